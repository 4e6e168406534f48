from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from subgraph_checks.api.dependencies import shutdown_clients
from subgraph_checks.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    if not settings.hmac_secret:
        logger.warning("APOLLO_HMAC_TOKEN is not set; every webhook will be rejected")
    try:
        yield
    finally:
        await shutdown_clients()
