from collections.abc import Iterable

from subgraph_checks.models import CheckResult, CheckStatus, Violation, ViolationLevel


def aggregate(task_id: str, workflow_id: str, per_subgraph: Iterable[list[Violation]]) -> CheckResult:
    """Flatten per-subgraph violations in order; any ERROR fails the check."""
    violations = [violation for violations in per_subgraph for violation in violations]
    failed = any(violation.level == ViolationLevel.ERROR for violation in violations)
    return CheckResult(
        task_id=task_id,
        workflow_id=workflow_id,
        status=CheckStatus.FAILURE if failed else CheckStatus.SUCCESS,
        violations=violations,
    )
