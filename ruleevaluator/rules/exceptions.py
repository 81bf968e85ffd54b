"""
Exceptions raised by the rule evaluator.

Callers can tell the three situations apart:

- ``InvalidEvaluationInput``: the call itself was malformed (no rule list,
  a context that is not a mapping, no clock). Raised before any rule runs.
- ``EvaluationFailedError``: the batch ran and at least one rule did not
  pass. Carries every per-rule error in rule order.
- ``ExtensionFunctionError``: raised inside an extension function when it
  receives arguments of the wrong shape. Engines turn it into a per-rule
  failure; it never escapes a batch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ruleevaluator.rules.report import EvaluationError


class RuleEvaluationError(Exception):
    """Base class for rule evaluator errors."""


class InvalidEvaluationInput(RuleEvaluationError, ValueError):
    """Raised when the evaluator is called with a malformed rule batch."""


class EvaluationFailedError(RuleEvaluationError):
    """Raised once per batch when one or more rules did not pass."""

    def __init__(self, errors: tuple[EvaluationError, ...]):
        super().__init__("Evaluation failed; see the evaluation errors for details.")
        self.errors = tuple(errors)

    def as_list(self) -> list[dict]:
        return [error.as_dict() for error in self.errors]


class ExtensionFunctionError(RuleEvaluationError):
    """Raised by an extension function given arguments it cannot inspect."""
