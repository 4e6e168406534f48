"""GraphQL client for the GraphOS platform API.

Implements both collaborator ports: document lookup by content hash and the
custom check callback.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from subgraph_checks.config import DEFAULT_CLIENT_NAME, DEFAULT_CLIENT_VERSION, DEFAULT_STUDIO_URL
from subgraph_checks.core.errors import GraphOSRequestError
from subgraph_checks.models import CallbackOutcome, CheckResult, SourceDocument

logger = logging.getLogger(__name__)

DOCS_QUERY = """
query SourceCode($graphId: ID!, $hashes: [SHA256!]!) {
  graph(id: $graphId) {
    docs(hashes: $hashes) {
      hash
      source
    }
  }
}
"""

CUSTOM_CHECK_CALLBACK_MUTATION = """
mutation CustomCheckCallback($input: CustomCheckCallbackInput!, $name: String!, $graphId: ID!) {
  graph(id: $graphId) {
    variant(name: $name) {
      customCheckCallback(input: $input) {
        __typename
        ... on CustomCheckResult {
          violations {
            level
            message
            rule
          }
        }
        ... on PermissionError {
          message
        }
        ... on TaskError {
          message
        }
        ... on ValidationError {
          message
        }
      }
    }
  }
}
"""


class GraphOSClient:
    def __init__(
        self,
        api_key: str,
        url: str = DEFAULT_STUDIO_URL,
        client_name: str = DEFAULT_CLIENT_NAME,
        client_version: str = DEFAULT_CLIENT_VERSION,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self._headers = {
            "Content-Type": "application/json",
            "apollographql-client-name": client_name,
            "apollographql-client-version": client_version,
            "x-api-key": api_key,
        }
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def execute(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """POST one GraphQL operation and return its ``data``.

        Partial data with errors is returned with the errors logged; errors
        without data raise ``GraphOSRequestError``.
        """
        response = await self._http.post(
            self.url, json={"query": query, "variables": variables}, headers=self._headers
        )
        response.raise_for_status()
        body: dict[str, Any] = response.json()
        errors = [str(error.get("message", error)) for error in body.get("errors") or []]
        data = body.get("data")
        if data is None:
            raise GraphOSRequestError(errors)
        if errors:
            logger.warning("GraphOS returned errors alongside data: %s", "; ".join(errors))
        result: dict[str, Any] = data
        return result

    async def fetch_documents(self, graph_id: str, hashes: list[str]) -> list[SourceDocument | None]:
        data = await self.execute(DOCS_QUERY, {"graphId": graph_id, "hashes": hashes})
        docs = (data.get("graph") or {}).get("docs") or []
        return [SourceDocument.model_validate(doc) if doc is not None else None for doc in docs]

    async def report(self, graph_id: str, graph_variant: str, result: CheckResult) -> CallbackOutcome:
        data = await self.execute(
            CUSTOM_CHECK_CALLBACK_MUTATION,
            {
                "graphId": graph_id,
                "name": graph_variant,
                "input": result.model_dump(mode="json", by_alias=True),
            },
        )
        variant = (data.get("graph") or {}).get("variant") or {}
        callback = variant.get("customCheckCallback")
        if callback is None:
            return CallbackOutcome(typename="NotFound", message=f"Variant {graph_variant!r} of {graph_id!r} not found")
        return CallbackOutcome(typename=callback.get("__typename", "Unknown"), message=callback.get("message"))

    async def aclose(self) -> None:
        await self._http.aclose()
