from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import Depends

from subgraph_checks.config import Settings, get_settings
from subgraph_checks.core.ports.documents import DocumentResolver
from subgraph_checks.core.ports.pull_requests import PullRequestLookup
from subgraph_checks.core.ports.reporter import CheckReporter
from subgraph_checks.github.client import GitHubClient
from subgraph_checks.graphos.client import GraphOSClient

logger = logging.getLogger(__name__)

_client: GraphOSClient | None = None
_github: GitHubClient | None = None


def _get_client(settings: Settings) -> GraphOSClient:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = GraphOSClient(
            settings.api_key,
            url=settings.studio_url,
            client_name=settings.client_name,
            client_version=settings.client_version,
        )
    return _client


def _get_github(settings: Settings) -> GitHubClient:
    global _github  # noqa: PLW0603
    if _github is None:
        _github = GitHubClient(
            settings.github_token, settings.github_owner, settings.github_repo, url=settings.github_url
        )
    return _github


async def get_document_resolver(settings: Settings = Depends(get_settings)) -> AsyncIterator[DocumentResolver]:
    """Yield the document resolver, creating the GraphOS client lazily on first call."""
    yield _get_client(settings)


async def get_reporter(settings: Settings = Depends(get_settings)) -> AsyncIterator[CheckReporter]:
    yield _get_client(settings)


async def get_pull_request_lookup(settings: Settings = Depends(get_settings)) -> AsyncIterator[PullRequestLookup]:
    yield _get_github(settings)


async def shutdown_clients() -> None:
    """Close whichever HTTP clients were opened while serving."""
    global _client, _github  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
        logger.info("Closed GraphOS client")
    if _github is not None:
        await _github.aclose()
        _github = None
        logger.info("Closed GitHub client")
