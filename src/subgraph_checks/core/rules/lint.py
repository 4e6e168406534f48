from __future__ import annotations

from collections.abc import Mapping

from subgraph_checks.core.locations import source_location
from subgraph_checks.core.rules.sdl_lint import SCHEMA_RECOMMENDED, LintFinding, LintSeverity, lint_sdl
from subgraph_checks.models import Violation, ViolationLevel

UNKNOWN_RULE = "unknown"


class LintRule:
    """Report ``schema-recommended`` lint findings as check violations.

    Findings at the highest severity become ``ERROR``, the rest ``WARNING``.
    ``level_overrides`` then pins the level of specific rule ids, e.g.
    ``{"naming-convention": ViolationLevel.ERROR}``.
    """

    name = "lint"

    def __init__(
        self,
        ruleset: Mapping[str, LintSeverity] | None = None,
        level_overrides: Mapping[str, ViolationLevel] | None = None,
    ) -> None:
        self.ruleset = dict(SCHEMA_RECOMMENDED if ruleset is None else ruleset)
        self.level_overrides = dict(level_overrides or {})

    def level_for(self, finding: LintFinding) -> ViolationLevel:
        rule_id = finding.rule_id or UNKNOWN_RULE
        if rule_id in self.level_overrides:
            return self.level_overrides[rule_id]
        return ViolationLevel.ERROR if finding.severity == max(LintSeverity) else ViolationLevel.WARNING

    def evaluate(self, subgraph_name: str, source_text: str, supergraph_text: str | None = None) -> list[Violation]:
        if not source_text.strip():
            return []

        violations = []
        for finding in lint_sdl(source_text, self.ruleset, schema_context=supergraph_text):
            end = (finding.end_line, finding.end_column) if finding.end_line and finding.end_column else None
            location = source_location(subgraph_name, source_text, (finding.line, finding.column), end)
            violations.append(
                Violation(
                    level=self.level_for(finding),
                    message=finding.message,
                    rule=finding.rule_id or UNKNOWN_RULE,
                    source_locations=[location],
                )
            )
        return violations
