"""
Rule evaluation orchestrator.

``RuleEvaluator.evaluate`` runs a batch of rule expressions against one
context and one clock value. Every rule is evaluated, in order, whatever
happened to the rules before it. Each result is classified:

- boolean true: passed, nothing is recorded;
- boolean false: "Rule evaluated to 'false'";
- any other kind: "Result type of rule was <Kind>, but must be Boolean.";
- engine failure: the engine's message.

If anything was recorded the batch raises ``EvaluationFailedError`` carrying
all errors in rule order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from collections.abc import Sequence
from datetime import UTC
from datetime import datetime
from functools import lru_cache
from typing import TYPE_CHECKING
from typing import Any

from django.conf import settings

from ruleevaluator.rules.constants import DEFAULT_MAX_EXPRESSION_CHARS
from ruleevaluator.rules.constants import RULE_FALSE_MESSAGE
from ruleevaluator.rules.constants import RULE_WRONG_TYPE_MESSAGE
from ruleevaluator.rules.constants import RuleOutcome
from ruleevaluator.rules.constants import ValueKind
from ruleevaluator.rules.engines.cel import CelExpressionEngine
from ruleevaluator.rules.exceptions import InvalidEvaluationInput
from ruleevaluator.rules.functions.registry import get_default_registry
from ruleevaluator.rules.report import EvaluationReport

if TYPE_CHECKING:
    from ruleevaluator.rules.engines.base import EngineResult
    from ruleevaluator.rules.engines.base import ExpressionEngine
    from ruleevaluator.rules.functions.registry import FunctionRegistry

logger = logging.getLogger(__name__)


def classify_result(result: EngineResult) -> RuleOutcome:
    if not result.success:
        return RuleOutcome.EVALUATION_ERROR
    if result.kind != ValueKind.BOOLEAN:
        return RuleOutcome.WRONG_RESULT_TYPE
    if result.value:
        return RuleOutcome.PASSED
    return RuleOutcome.FAILED_ASSERTION


def _failure_message(outcome: RuleOutcome, result: EngineResult) -> str:
    if outcome == RuleOutcome.FAILED_ASSERTION:
        return RULE_FALSE_MESSAGE
    if outcome == RuleOutcome.WRONG_RESULT_TYPE:
        return RULE_WRONG_TYPE_MESSAGE.format(kind=str(result.kind.label))
    return result.error


class RuleEvaluator:
    """
    Evaluates rule batches with one expression engine and function registry.

    Both collaborators are shared across calls and never modified; all
    per-call state (clock binding, error report) lives inside ``evaluate``,
    so a single instance can serve concurrent requests.
    """

    def __init__(self, *, engine: ExpressionEngine, registry: FunctionRegistry):
        self.engine = engine
        self.registry = registry

    def evaluate(
        self,
        rules: Sequence[str],
        context: Mapping[str, Any],
        current_time: datetime,
    ) -> None:
        """
        Evaluate every rule and raise if any of them did not pass.

        Args:
            rules: Expressions in batch order; the position of a rule is the
                index reported for it.
            context: Names visible to every rule. Not mutated.
            current_time: Clock value shared by all rules of the batch.
                Naive datetimes are taken as UTC.

        Raises:
            InvalidEvaluationInput: The arguments are malformed. Raised before
                any rule is evaluated.
            EvaluationFailedError: One or more rules did not pass.
        """
        report = self.run(rules, context, current_time)
        report.raise_for_errors()

    def run(
        self,
        rules: Sequence[str],
        context: Mapping[str, Any],
        current_time: datetime,
    ) -> EvaluationReport:
        """Evaluate every rule and return the report without raising for failures."""
        self._check_input(rules, context, current_time)
        if current_time.tzinfo is None:
            current_time = current_time.replace(tzinfo=UTC)

        report = EvaluationReport()
        for index, rule in enumerate(rules):
            result = self.engine.evaluate(
                rule,
                context=context,
                functions=self.registry,
                current_time=current_time,
            )
            outcome = classify_result(result)
            if outcome == RuleOutcome.PASSED:
                continue
            error = report.add(index, _failure_message(outcome, result))
            logger.debug(
                "Rule %s classified as %s: %s",
                index,
                outcome,
                error.message,
            )

        logger.info(
            "Evaluated %s rule(s) at %s: %s failed",
            len(rules),
            current_time.isoformat(),
            len(report.errors),
        )
        return report

    @staticmethod
    def _check_input(rules: Any, context: Any, current_time: Any) -> None:
        if rules is None:
            raise InvalidEvaluationInput("Rules are required.")
        if isinstance(rules, (str, bytes)) or not isinstance(rules, Sequence):
            raise InvalidEvaluationInput("Rules must be a list of expressions.")
        for index, rule in enumerate(rules):
            if not isinstance(rule, str):
                raise InvalidEvaluationInput(
                    f"Rule {index} must be an expression string, "
                    f"got {type(rule).__name__}.",
                )
        if not isinstance(context, Mapping):
            raise InvalidEvaluationInput("Context must be a mapping.")
        if not isinstance(current_time, datetime):
            raise InvalidEvaluationInput("Current time must be a datetime.")


@lru_cache(maxsize=1)
def get_rule_evaluator() -> RuleEvaluator:
    """Process-wide evaluator using the CEL engine and the default registry."""
    engine = CelExpressionEngine(
        max_expression_chars=getattr(
            settings,
            "RULES_MAX_EXPRESSION_CHARS",
            DEFAULT_MAX_EXPRESSION_CHARS,
        ),
    )
    return RuleEvaluator(engine=engine, registry=get_default_registry())
