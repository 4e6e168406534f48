from __future__ import annotations

import hashlib
from dataclasses import dataclass

from subgraph_checks.models import CallbackOutcome, CheckResult, SourceDocument


def content_hash(source: str) -> str:
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


class InMemoryDocumentStore:
    """Document resolver backed by a dict of hash -> source."""

    def __init__(self, documents: dict[str, str] | None = None) -> None:
        self.documents: dict[str, str] = dict(documents or {})
        self.requests: list[tuple[str, list[str]]] = []

    def add(self, source: str) -> str:
        digest = content_hash(source)
        self.documents[digest] = source
        return digest

    async def fetch_documents(self, graph_id: str, hashes: list[str]) -> list[SourceDocument | None]:
        self.requests.append((graph_id, list(hashes)))
        return [SourceDocument(hash=h, source=self.documents[h]) if h in self.documents else None for h in hashes]


@dataclass(frozen=True)
class ReportedCheck:
    graph_id: str
    graph_variant: str
    result: CheckResult


class RecordingReporter:
    """Reporter that keeps every result it is handed."""

    def __init__(self, outcome: CallbackOutcome | None = None) -> None:
        self.reports: list[ReportedCheck] = []
        self.outcome = outcome or CallbackOutcome(typename="CustomCheckResult")

    async def report(self, graph_id: str, graph_variant: str, result: CheckResult) -> CallbackOutcome:
        self.reports.append(ReportedCheck(graph_id, graph_variant, result))
        return self.outcome
