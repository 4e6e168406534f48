"""GitHub GraphQL client answering whether a branch has pull requests."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from subgraph_checks.config import DEFAULT_CLIENT_NAME, DEFAULT_GITHUB_URL
from subgraph_checks.core.errors import GitHubRequestError

logger = logging.getLogger(__name__)

PULL_REQUESTS_QUERY = """
query PullRequestsForBranch($owner: String!, $name: String!, $branch: String!) {
  repository(owner: $owner, name: $name) {
    pullRequests(headRefName: $branch, first: 100) {
      totalCount
      nodes {
        author {
          login
        }
        state
        title
      }
    }
  }
}
"""


class GitHubClient:
    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        url: str = DEFAULT_GITHUB_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.url = url
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": DEFAULT_CLIENT_NAME,
        }
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def count_pull_requests(self, branch: str) -> int:
        """Count pull requests, in any state, whose head is *branch*."""
        response = await self._http.post(
            self.url,
            json={
                "query": PULL_REQUESTS_QUERY,
                "variables": {"owner": self.owner, "name": self.repo, "branch": branch},
            },
            headers=self._headers,
        )
        response.raise_for_status()
        body: dict[str, Any] = response.json()
        errors = [str(error.get("message", error)) for error in body.get("errors") or []]
        repository = (body.get("data") or {}).get("repository")
        if repository is None:
            raise GitHubRequestError(errors or [f"Repository {self.owner}/{self.repo} not found"])
        if errors:
            logger.warning("GitHub returned errors alongside data: %s", "; ".join(errors))
        count: int = (repository.get("pullRequests") or {}).get("totalCount") or 0
        return count

    async def aclose(self) -> None:
        await self._http.aclose()
