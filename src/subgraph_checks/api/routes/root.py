from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from subgraph_checks.core.rules.registry import available_strategies

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root discovery endpoint, lists the check webhooks this service answers."""
    strategies = available_strategies()
    return {
        "meta": {
            "title": "Subgraph Checks",
            "description": "Governance checks for proposed GraphQL subgraph schemas.",
            "version": "0.1.0",
            "strategies": strategies,
        },
        "links": {
            "self": "/",
            **{f"checks/{name}": f"/checks/{name}" for name in strategies},
            "checks/pull-request": "/checks/pull-request",
            "custom-lint": "/custom-lint",
            "health": "/healthz/ready",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
