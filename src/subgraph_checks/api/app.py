from __future__ import annotations

from fastapi import FastAPI

from subgraph_checks.api.lifespan import lifespan
from subgraph_checks.api.routes.checks import router as checks_router
from subgraph_checks.api.routes.health import router as health_router
from subgraph_checks.api.routes.root import router as root_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="Subgraph Checks API",
        description="Governance checks for proposed GraphQL subgraph schemas.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(checks_router)

    return app
