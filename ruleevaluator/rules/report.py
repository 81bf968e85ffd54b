"""
Per-rule error records and the ordered collector used during one batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

from ruleevaluator.rules.exceptions import EvaluationFailedError


@dataclass(frozen=True)
class EvaluationError:
    """A rule that did not pass: its position in the batch and the cause."""

    index: int
    message: str

    def as_dict(self) -> dict:
        return {"index": self.index, "message": self.message}


@dataclass
class EvaluationReport:
    """
    Append-only collector for the errors of a single evaluation call.

    Errors keep insertion order, which is rule order because the evaluator
    walks the batch front to back. Nothing is merged or deduplicated.
    """

    _errors: list[EvaluationError] = field(default_factory=list)

    def add(self, index: int, message: str) -> EvaluationError:
        error = EvaluationError(index=index, message=message)
        self._errors.append(error)
        return error

    @property
    def errors(self) -> tuple[EvaluationError, ...]:
        return tuple(self._errors)

    @property
    def passed(self) -> bool:
        return not self._errors

    def raise_for_errors(self) -> None:
        """Raise ``EvaluationFailedError`` with every error, if there are any."""
        if self._errors:
            raise EvaluationFailedError(self.errors)
