from __future__ import annotations


class StaticPullRequestLookup:
    """Pull request lookup answering from a fixed branch -> count table."""

    def __init__(self, counts: dict[str, int] | None = None) -> None:
        self.counts: dict[str, int] = dict(counts or {})
        self.branches: list[str] = []

    async def count_pull_requests(self, branch: str) -> int:
        self.branches.append(branch)
        return self.counts.get(branch, 0)
