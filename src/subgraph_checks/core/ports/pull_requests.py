from typing import Protocol


class PullRequestLookup(Protocol):
    async def count_pull_requests(self, branch: str) -> int: ...
