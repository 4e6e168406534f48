from typing import Protocol

from subgraph_checks.models import CallbackOutcome, CheckResult


class CheckReporter(Protocol):
    async def report(self, graph_id: str, graph_variant: str, result: CheckResult) -> CallbackOutcome: ...
