"""Run one check event end to end: diff, resolve, evaluate, aggregate, report."""

from __future__ import annotations

import asyncio
import logging

import httpx

from subgraph_checks.core.aggregate import aggregate
from subgraph_checks.core.diff import changed_subgraphs
from subgraph_checks.core.errors import GraphQLRequestError
from subgraph_checks.core.ports.documents import DocumentResolver
from subgraph_checks.core.ports.pull_requests import PullRequestLookup
from subgraph_checks.core.ports.reporter import CheckReporter
from subgraph_checks.core.rules.base import RuleEvaluator
from subgraph_checks.models import CallbackOutcome, CheckEvent, CheckResult, SubgraphRef, Violation, ViolationLevel

logger = logging.getLogger(__name__)

SOURCE_RESOLUTION_RULE = "source-resolution"
DEADLINE_RULE = "check-deadline"
PULL_REQUEST_RULE = "pull-request"


async def resolve_sources(resolver: DocumentResolver, graph_id: str, hashes: list[str]) -> dict[str, str]:
    """Fetch all *hashes* in one call; a failed fetch resolves nothing."""
    try:
        documents = await resolver.fetch_documents(graph_id, hashes)
    except (httpx.HTTPError, GraphQLRequestError):
        logger.exception("Fetching %d document(s) for graph %s failed", len(hashes), graph_id)
        return {}
    return {doc.hash: doc.source for doc in documents if doc is not None and doc.source is not None}


def unresolved_violation(subgraph: SubgraphRef) -> Violation:
    return Violation(
        level=ViolationLevel.ERROR,
        message=f'Source for subgraph "{subgraph.name}" could not be resolved, so it was not checked',
        rule=SOURCE_RESOLUTION_RULE,
    )


def deadline_violation(deadline_seconds: float) -> Violation:
    return Violation(
        level=ViolationLevel.ERROR,
        message=f"Check did not complete within {deadline_seconds:g} seconds",
        rule=DEADLINE_RULE,
    )


def evaluate_subgraph(
    evaluator: RuleEvaluator,
    subgraph: SubgraphRef,
    sources: dict[str, str],
    supergraph_text: str | None,
    strict_resolution: bool = True,
) -> list[Violation]:
    source = sources.get(subgraph.hash)
    if source is None:
        logger.warning("No source for subgraph %s (hash %s)", subgraph.name, subgraph.hash)
        return [unresolved_violation(subgraph)] if strict_resolution else []
    try:
        return evaluator.evaluate(subgraph.name, source, supergraph_text)
    except Exception:
        logger.exception("Rule %s failed on subgraph %s", evaluator.name, subgraph.name)
        return []


async def evaluate_changes(
    event: CheckEvent,
    evaluator: RuleEvaluator,
    resolver: DocumentResolver,
    strict_resolution: bool = True,
) -> list[list[Violation]]:
    changed = changed_subgraphs(event.base_schema, event.proposed_schema)
    logger.info("Task %s: %d changed subgraph(s)", event.task_id, len(changed))
    if not changed:
        return []

    hashes = [event.proposed_schema.hash, *(subgraph.hash for subgraph in changed)]
    sources = await resolve_sources(resolver, event.graph_id, hashes)
    supergraph_text = sources.get(event.proposed_schema.hash)

    results = await asyncio.gather(
        *(
            asyncio.to_thread(evaluate_subgraph, evaluator, subgraph, sources, supergraph_text, strict_resolution)
            for subgraph in changed
        )
    )
    return list(results)


async def report_result(reporter: CheckReporter, event: CheckEvent, result: CheckResult) -> CallbackOutcome | None:
    """Send *result* once; failures are logged and never retried."""
    try:
        outcome = await reporter.report(event.graph_id, event.graph_variant, result)
    except (httpx.HTTPError, GraphQLRequestError):
        logger.exception("Reporting task %s failed", event.task_id)
        return None
    if outcome.ok:
        logger.info("Task %s reported as %s", event.task_id, result.status)
    else:
        logger.warning("Callback for task %s returned %s: %s", event.task_id, outcome.typename, outcome.message)
    return outcome


async def run_check(
    event: CheckEvent,
    evaluator: RuleEvaluator,
    resolver: DocumentResolver,
    reporter: CheckReporter,
    *,
    deadline_seconds: float | None = None,
    strict_resolution: bool = True,
) -> CheckResult:
    """Check *event* with *evaluator* and report the verdict before returning it.

    Work past *deadline_seconds* is abandoned and reported as a failure.
    """
    logger.info("Handling task %s with rule %s", event.task_id, evaluator.name)
    try:
        per_subgraph = await asyncio.wait_for(
            evaluate_changes(event, evaluator, resolver, strict_resolution),
            timeout=deadline_seconds,
        )
    except TimeoutError:
        assert deadline_seconds is not None
        logger.error("Task %s exceeded its %gs deadline", event.task_id, deadline_seconds)
        per_subgraph = [[deadline_violation(deadline_seconds)]]

    result = aggregate(event.task_id, event.workflow_id, per_subgraph)
    await report_result(reporter, event, result)
    return result


def pull_request_violation(message: str) -> Violation:
    return Violation(level=ViolationLevel.ERROR, message=message, rule=PULL_REQUEST_RULE)


async def check_pull_request(event: CheckEvent, lookup: PullRequestLookup) -> list[Violation]:
    branch = event.branch
    if branch is None:
        return [pull_request_violation("Check event carries no git branch to look up pull requests for")]
    try:
        count = await lookup.count_pull_requests(branch)
    except (httpx.HTTPError, GraphQLRequestError):
        logger.exception("Looking up pull requests for branch %s failed", branch)
        return [pull_request_violation(f'Pull requests for branch "{branch}" could not be looked up')]
    logger.info("Task %s: branch %s has %d pull request(s)", event.task_id, branch, count)
    if count == 0:
        return [pull_request_violation(f'Branch "{branch}" has no pull request')]
    return []


async def run_pull_request_check(
    event: CheckEvent,
    lookup: PullRequestLookup,
    reporter: CheckReporter,
    *,
    deadline_seconds: float | None = None,
) -> CheckResult:
    """Pass *event* iff its branch has a pull request, and report the verdict."""
    logger.info("Handling task %s with rule %s", event.task_id, PULL_REQUEST_RULE)
    try:
        violations = await asyncio.wait_for(check_pull_request(event, lookup), timeout=deadline_seconds)
    except TimeoutError:
        assert deadline_seconds is not None
        logger.error("Task %s exceeded its %gs deadline", event.task_id, deadline_seconds)
        violations = [deadline_violation(deadline_seconds)]

    result = aggregate(event.task_id, event.workflow_id, [violations])
    await report_result(reporter, event, result)
    return result
