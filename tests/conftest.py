"""Shared fixtures and helpers for tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from subgraph_checks.graphos.memory import InMemoryDocumentStore, RecordingReporter
from subgraph_checks.models import CheckEvent

_REPO_ROOT = Path(__file__).parent.parent

# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Sample SDL
# ---------------------------------------------------------------------------

CONTACT_SDL = '''extend schema
  @link(url: "https://specs.apollo.dev/federation/v2.3", import: ["@key"])
  @contact(name: "Accounts", url: "https://example.com/accounts", description: "Owns user accounts")

"""
A registered user.
"""
type User @key(fields: "id") {
  id: ID!
  name: String
}
'''

NO_CONTACT_SDL = '''extend schema
  @link(url: "https://specs.apollo.dev/federation/v2.3", import: ["@key"])

"""
A product in the catalog.
"""
type Product @key(fields: "upc") {
  upc: String!
}
'''

SUPERGRAPH_SDL = """schema {
  query: Query
}

type Query {
  me: User
  topProducts: [Product]
}

type User {
  id: ID!
  name: String
}

type Product {
  upc: String!
}
"""


def make_event(
    base: list[tuple[str, str]] | None,
    proposed: list[tuple[str, str]] | None,
    proposed_hash: str = "supergraph-hash",
    **check_step: Any,
) -> CheckEvent:
    """Build a check event in the webhook's wire shape."""

    def _subgraphs(pairs: list[tuple[str, str]] | None) -> list[dict[str, str]] | None:
        return None if pairs is None else [{"name": name, "hash": digest} for name, digest in pairs]

    return CheckEvent.model_validate(
        {
            "checkStep": {
                "taskId": "task-1",
                "graphId": "my-graph",
                "graphVariant": "current",
                "workflowId": "workflow-1",
                **check_step,
            },
            "baseSchema": {"hash": "base-hash", "subgraphs": _subgraphs(base)},
            "proposedSchema": {"hash": proposed_hash, "subgraphs": _subgraphs(proposed)},
            "gitContext": {"branch": "feature/contact", "commit": "abc123"},
        }
    )


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
