import logging
from typing import Protocol

from subgraph_checks.models import Violation

logger = logging.getLogger(__name__)


class RuleEvaluator(Protocol):
    name: str

    def evaluate(self, subgraph_name: str, source_text: str, supergraph_text: str | None = None) -> list[Violation]: ...


class CompositeRule:
    """Runs several evaluators in order and concatenates their violations.

    An evaluator that raises is logged and contributes nothing; the ones after
    it still run.
    """

    def __init__(self, name: str, evaluators: list[RuleEvaluator]) -> None:
        self.name = name
        self.evaluators = evaluators

    def evaluate(self, subgraph_name: str, source_text: str, supergraph_text: str | None = None) -> list[Violation]:
        violations: list[Violation] = []
        for evaluator in self.evaluators:
            try:
                violations.extend(evaluator.evaluate(subgraph_name, source_text, supergraph_text))
            except Exception:
                logger.exception("Rule %s failed on subgraph %s", evaluator.name, subgraph_name)
        return violations
