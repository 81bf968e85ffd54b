"""
Expression engine interface.

The rule evaluator does not know which expression language it runs. It talks
to an ``ExpressionEngine`` that evaluates one expression and answers with an
``EngineResult``: either a value tagged with its ``ValueKind`` or a failure
message.
"""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

from ruleevaluator.rules.constants import ValueKind

if TYPE_CHECKING:
    from ruleevaluator.rules.functions.registry import FunctionRegistry


@dataclass(frozen=True)
class EngineResult:
    """Outcome of evaluating one expression."""

    success: bool
    value: Any = None
    kind: ValueKind | None = None
    error: str = ""

    @classmethod
    def ok(cls, value: Any, kind: ValueKind) -> EngineResult:
        return cls(success=True, value=value, kind=kind)

    @classmethod
    def failure(cls, message: str) -> EngineResult:
        return cls(success=False, error=message)


class ExpressionEngine(Protocol):
    """
    Protocol for expression engines.

    Implementations must be safe to share between threads: everything that
    belongs to a single evaluation (context, clock) arrives as an argument.
    """

    def evaluate(
        self,
        expression: str,
        *,
        context: Mapping[str, Any],
        functions: FunctionRegistry,
        current_time: datetime,
    ) -> EngineResult:
        """
        Evaluate ``expression`` and return its tagged value or a failure.

        Args:
            expression: Source text of one rule.
            context: Names visible to the expression. Must not be mutated.
            functions: Extension functions the expression may call.
            current_time: Clock value for time-relative expressions.

        Returns:
            EngineResult. Syntax errors, unknown names, failing extension
            functions and unsupported result types are all reported as
            ``EngineResult.failure``; engines do not raise for them.
        """
        ...


def kind_of(value: Any) -> ValueKind | None:
    """
    Tag a plain Python value with its ValueKind.

    Returns None for values outside the closed set of kinds.
    """
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if value is None:
        return ValueKind.NULL
    if isinstance(value, datetime):
        return ValueKind.TIMESTAMP
    if isinstance(value, timedelta):
        return ValueKind.DURATION
    if isinstance(value, (int, float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BYTES
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, Sequence):
        return ValueKind.SEQUENCE
    return None
