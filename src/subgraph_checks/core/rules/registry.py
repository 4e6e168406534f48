"""Named rule strategies that a check endpoint can run."""

from __future__ import annotations

from collections.abc import Callable

from subgraph_checks.config import Settings
from subgraph_checks.core.errors import UnknownStrategyError
from subgraph_checks.core.rules.base import CompositeRule, RuleEvaluator
from subgraph_checks.core.rules.contact import ContactDirectiveRule
from subgraph_checks.core.rules.lint import LintRule
from subgraph_checks.core.rules.sdl_lint import SCHEMA_RECOMMENDED


def _lint(settings: Settings) -> RuleEvaluator:
    ruleset = {**SCHEMA_RECOMMENDED, **settings.lint_rule_severities}
    return LintRule(ruleset=ruleset, level_overrides=settings.lint_level_overrides)


def _contact(_settings: Settings) -> RuleEvaluator:
    return ContactDirectiveRule()


def _combined(settings: Settings) -> RuleEvaluator:
    return CompositeRule("combined", [_contact(settings), _lint(settings)])


STRATEGIES: dict[str, Callable[[Settings], RuleEvaluator]] = {
    "contact": _contact,
    "lint": _lint,
    "combined": _combined,
}


def available_strategies() -> list[str]:
    return sorted(STRATEGIES)


def build_evaluator(name: str, settings: Settings) -> RuleEvaluator:
    try:
        factory = STRATEGIES[name]
    except KeyError:
        raise UnknownStrategyError(name) from None
    return factory(settings)
