class CheckError(Exception):
    """Base class for errors raised by subgraph-checks."""


class ConfigError(CheckError, ValueError):
    """Raised when an environment setting cannot be parsed."""


class UnknownStrategyError(CheckError, KeyError):
    """Raised when no rule strategy is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown check strategy: {self.name!r}"


class GraphQLRequestError(CheckError):
    """Raised when a GraphQL API answers with errors and no data."""

    service = "GraphQL"

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages) or f"{self.service} request failed")
        self.messages = messages


class GraphOSRequestError(GraphQLRequestError):
    service = "GraphOS"


class GitHubRequestError(GraphQLRequestError):
    service = "GitHub"
