from typing import Protocol

from subgraph_checks.models import SourceDocument


class DocumentResolver(Protocol):
    async def fetch_documents(self, graph_id: str, hashes: list[str]) -> list[SourceDocument | None]: ...
