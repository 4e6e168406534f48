"""Unit tests for the check pipeline orchestration."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from subgraph_checks.config import Settings
from subgraph_checks.core.errors import GraphOSRequestError
from subgraph_checks.core.pipeline import (
    DEADLINE_RULE,
    PULL_REQUEST_RULE,
    SOURCE_RESOLUTION_RULE,
    run_check,
    run_pull_request_check,
)
from subgraph_checks.core.rules.contact import CONTACT_RULE, ContactDirectiveRule
from subgraph_checks.core.rules.lint import UNKNOWN_RULE, LintRule
from subgraph_checks.core.rules.registry import build_evaluator
from subgraph_checks.github.memory import StaticPullRequestLookup
from subgraph_checks.graphos.memory import InMemoryDocumentStore, RecordingReporter
from subgraph_checks.models import CallbackOutcome, CheckResult, CheckStatus, SourceDocument, Violation, ViolationLevel
from tests.conftest import CONTACT_SDL, NO_CONTACT_SDL, SUPERGRAPH_SDL, make_event


class _NamingRule:
    """Evaluator that reports one warning per subgraph and records what it saw."""

    name = "naming"

    def __init__(self, failing: str | None = None) -> None:
        self.failing = failing
        self.seen: list[tuple[str, str, str | None]] = []

    def evaluate(self, subgraph_name: str, source_text: str, supergraph_text: str | None = None) -> list[Violation]:
        self.seen.append((subgraph_name, source_text, supergraph_text))
        if subgraph_name == self.failing:
            raise RuntimeError("boom")
        return [Violation(level=ViolationLevel.WARNING, message=subgraph_name, rule="naming")]


class _FailingResolver:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.calls = 0

    async def fetch_documents(self, graph_id: str, hashes: list[str]) -> list[SourceDocument | None]:
        self.calls += 1
        raise self.exc


class _SlowResolver:
    async def fetch_documents(self, graph_id: str, hashes: list[str]) -> list[SourceDocument | None]:
        await asyncio.sleep(5)
        return []


class _FailingReporter:
    async def report(self, graph_id: str, graph_variant: str, result: CheckResult) -> CallbackOutcome:
        raise httpx.ConnectError("unreachable")


@pytest.mark.asyncio
async def test_changed_subgraph_without_contact_fails(
    store: InMemoryDocumentStore, reporter: RecordingReporter
) -> None:
    super_hash = store.add(SUPERGRAPH_SDL)
    products = store.add(NO_CONTACT_SDL)
    event = make_event([("products", "old")], [("products", products)], proposed_hash=super_hash)

    result = await run_check(event, ContactDirectiveRule(), store, reporter)

    assert len(reporter.reports) == 1
    reported = reporter.reports[0]
    assert (reported.graph_id, reported.graph_variant) == ("my-graph", "current")
    assert reported.result == result
    assert result.status == CheckStatus.FAILURE
    assert len(result.violations) == 1
    assert result.violations[0].rule == CONTACT_RULE
    assert (result.task_id, result.workflow_id) == ("task-1", "workflow-1")


@pytest.mark.asyncio
async def test_documents_are_fetched_in_one_batch(store: InMemoryDocumentStore, reporter: RecordingReporter) -> None:
    super_hash = store.add(SUPERGRAPH_SDL)
    accounts = store.add(CONTACT_SDL)
    products = store.add(NO_CONTACT_SDL)
    event = make_event(
        [("accounts", "old-a"), ("reviews", "same")],
        [("accounts", accounts), ("reviews", "same"), ("products", products)],
        proposed_hash=super_hash,
    )

    rule = _NamingRule()
    await run_check(event, rule, store, reporter)

    assert store.requests == [("my-graph", [super_hash, accounts, products])]
    assert sorted(name for name, _, _ in rule.seen) == ["accounts", "products"]
    assert {supergraph for _, _, supergraph in rule.seen} == {SUPERGRAPH_SDL}


@pytest.mark.asyncio
async def test_violations_follow_diff_order(store: InMemoryDocumentStore, reporter: RecordingReporter) -> None:
    names = [f"subgraph{i}" for i in range(8)]
    proposed = [(name, store.add(f"type Query {{ f{i}: String }}")) for i, name in enumerate(names)]

    result = await run_check(make_event([], proposed), _NamingRule(), store, reporter)

    assert [v.message for v in result.violations] == names
    assert result.status == CheckStatus.SUCCESS


@pytest.mark.asyncio
async def test_nothing_changed_skips_fetch_and_succeeds(
    store: InMemoryDocumentStore, reporter: RecordingReporter
) -> None:
    event = make_event([("accounts", "h1")], [("accounts", "h1")])

    result = await run_check(event, ContactDirectiveRule(), store, reporter)

    assert store.requests == []
    assert result.status == CheckStatus.SUCCESS
    assert result.violations == []
    assert len(reporter.reports) == 1


@pytest.mark.asyncio
async def test_missing_source_fails_when_strict(store: InMemoryDocumentStore, reporter: RecordingReporter) -> None:
    event = make_event([], [("accounts", "unknown-hash")])

    result = await run_check(event, ContactDirectiveRule(), store, reporter, strict_resolution=True)

    assert result.status == CheckStatus.FAILURE
    [violation] = result.violations
    assert violation.rule == SOURCE_RESOLUTION_RULE
    assert violation.level == ViolationLevel.ERROR
    assert "accounts" in violation.message
    assert violation.source_locations == []


@pytest.mark.asyncio
async def test_missing_source_is_skipped_when_lenient(
    store: InMemoryDocumentStore, reporter: RecordingReporter
) -> None:
    rule = _NamingRule()
    event = make_event([], [("accounts", "unknown-hash")])

    result = await run_check(event, rule, store, reporter, strict_resolution=False)

    assert result.status == CheckStatus.SUCCESS
    assert result.violations == []
    assert rule.seen == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [httpx.ConnectError("unreachable"), GraphOSRequestError(["Graph not found"])],
    ids=["transport", "graphql"],
)
async def test_resolver_failure_reports_each_subgraph_as_unresolved(
    exc: Exception, reporter: RecordingReporter
) -> None:
    resolver = _FailingResolver(exc)
    event = make_event([], [("accounts", "h1"), ("products", "h2")])

    result = await run_check(event, ContactDirectiveRule(), resolver, reporter)

    assert resolver.calls == 1
    assert result.status == CheckStatus.FAILURE
    assert [v.rule for v in result.violations] == [SOURCE_RESOLUTION_RULE, SOURCE_RESOLUTION_RULE]
    assert len(reporter.reports) == 1


@pytest.mark.asyncio
async def test_resolver_failure_is_silent_when_lenient(reporter: RecordingReporter) -> None:
    event = make_event([], [("accounts", "h1")])

    result = await run_check(
        event, ContactDirectiveRule(), _FailingResolver(httpx.ReadTimeout("slow")), reporter, strict_resolution=False
    )

    assert result.status == CheckStatus.SUCCESS
    assert result.violations == []


@pytest.mark.asyncio
async def test_evaluation_failure_only_drops_that_subgraph(
    store: InMemoryDocumentStore, reporter: RecordingReporter, caplog: pytest.LogCaptureFixture
) -> None:
    accounts, broken = store.add("type A { a: String }"), store.add("type B { b: Int }")
    event = make_event([], [("accounts", accounts), ("broken", broken)])

    with caplog.at_level(logging.ERROR, logger="subgraph_checks.core.pipeline"):
        result = await run_check(event, _NamingRule(failing="broken"), store, reporter)

    assert [v.message for v in result.violations] == ["accounts"]
    assert result.status == CheckStatus.SUCCESS
    assert any("broken" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_syntax_error_in_subgraph_is_an_evaluation_failure(
    store: InMemoryDocumentStore, reporter: RecordingReporter
) -> None:
    event = make_event([], [("accounts", store.add("type Query {")), ("products", store.add(NO_CONTACT_SDL))])

    result = await run_check(event, ContactDirectiveRule(), store, reporter)

    assert [v.rule for v in result.violations] == [CONTACT_RULE]


@pytest.mark.asyncio
async def test_deadline_reports_failure(reporter: RecordingReporter) -> None:
    event = make_event([], [("accounts", "h1")])

    result = await run_check(event, ContactDirectiveRule(), _SlowResolver(), reporter, deadline_seconds=0.05)

    assert result.status == CheckStatus.FAILURE
    [violation] = result.violations
    assert violation.rule == DEADLINE_RULE
    assert "0.05" in violation.message
    assert reporter.reports[0].result == result


@pytest.mark.asyncio
async def test_reporting_failure_is_logged_not_raised(
    store: InMemoryDocumentStore, caplog: pytest.LogCaptureFixture
) -> None:
    event = make_event([], [("products", store.add(NO_CONTACT_SDL))])

    with caplog.at_level(logging.ERROR, logger="subgraph_checks.core.pipeline"):
        result = await run_check(event, ContactDirectiveRule(), store, _FailingReporter())

    assert result.status == CheckStatus.FAILURE
    assert any("task-1" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_typed_callback_error_is_logged(store: InMemoryDocumentStore, caplog: pytest.LogCaptureFixture) -> None:
    reporter = RecordingReporter(CallbackOutcome(typename="TaskError", message="Task already completed"))
    event = make_event([], [("products", store.add(NO_CONTACT_SDL))])

    with caplog.at_level(logging.WARNING, logger="subgraph_checks.core.pipeline"):
        await run_check(event, ContactDirectiveRule(), store, reporter)

    assert len(reporter.reports) == 1
    assert any("TaskError" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_lint_rule_fails_a_badly_named_type(store: InMemoryDocumentStore, reporter: RecordingReporter) -> None:
    event = make_event([], [("profiles", store.add("type user_profile {\n  id: ID\n}\n"))])

    result = await run_check(event, LintRule(), store, reporter)

    assert result.status == CheckStatus.FAILURE
    assert "naming-convention" in {v.rule for v in result.violations}


@pytest.mark.asyncio
async def test_combined_reports_parse_error_for_unparseable_subgraph(
    store: InMemoryDocumentStore, reporter: RecordingReporter
) -> None:
    event = make_event([], [("broken", store.add("type {{{ broken"))])

    result = await run_check(event, build_evaluator("combined", Settings()), store, reporter)

    assert result.status == CheckStatus.FAILURE
    assert [v.rule for v in result.violations] == [UNKNOWN_RULE]


class TestPullRequestCheck:
    @pytest.mark.asyncio
    async def test_branch_with_pull_request_passes(self, reporter: RecordingReporter) -> None:
        lookup = StaticPullRequestLookup({"feature/contact": 1})

        result = await run_pull_request_check(make_event([], []), lookup, reporter)

        assert lookup.branches == ["feature/contact"]
        assert result.status == CheckStatus.SUCCESS
        assert result.violations == []
        assert reporter.reports[0].result == result

    @pytest.mark.asyncio
    async def test_branch_without_pull_request_fails(self, reporter: RecordingReporter) -> None:
        result = await run_pull_request_check(make_event([], []), StaticPullRequestLookup(), reporter)

        assert result.status == CheckStatus.FAILURE
        [violation] = result.violations
        assert violation.rule == PULL_REQUEST_RULE
        assert "feature/contact" in violation.message

    @pytest.mark.asyncio
    async def test_check_step_branch_is_looked_up(self, reporter: RecordingReporter) -> None:
        lookup = StaticPullRequestLookup({"feature/step": 3})
        event = make_event([], [], gitContext={"branch": "feature/step"})

        result = await run_pull_request_check(event, lookup, reporter)

        assert lookup.branches == ["feature/step"]
        assert result.status == CheckStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_event_without_branch_fails_without_lookup(self, reporter: RecordingReporter) -> None:
        event = make_event([], []).model_copy(update={"git_context": None})
        lookup = StaticPullRequestLookup()

        result = await run_pull_request_check(event, lookup, reporter)

        assert lookup.branches == []
        assert result.status == CheckStatus.FAILURE
        assert result.violations[0].rule == PULL_REQUEST_RULE

    @pytest.mark.asyncio
    async def test_lookup_failure_fails_the_check(self, reporter: RecordingReporter) -> None:
        class _Unreachable:
            async def count_pull_requests(self, branch: str) -> int:
                raise httpx.ConnectError("unreachable")

        result = await run_pull_request_check(make_event([], []), _Unreachable(), reporter)

        assert result.status == CheckStatus.FAILURE
        assert "could not be looked up" in result.violations[0].message
        assert len(reporter.reports) == 1

    @pytest.mark.asyncio
    async def test_slow_lookup_hits_the_deadline(self, reporter: RecordingReporter) -> None:
        class _Slow:
            async def count_pull_requests(self, branch: str) -> int:
                await asyncio.sleep(5)
                return 1

        result = await run_pull_request_check(make_event([], []), _Slow(), reporter, deadline_seconds=0.05)

        assert [v.rule for v in result.violations] == [DEADLINE_RULE]
