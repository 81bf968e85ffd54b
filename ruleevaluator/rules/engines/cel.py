"""
CEL expression engine.

Uses cel-python for evaluation, caches compiled expressions, and returns
structured results so the rule evaluator can report failures per rule.

Rules may use two spellings CEL does not parse. Extension functions whose
names contain spaces ("has allowed changes") are exposed under their
identifier form (``has_allowed_changes``) and spaced call sites are rewritten
to it; a single ``=`` is rewritten to ``==``. Both rewrites skip string
literals. ``now()`` returns the clock value of the current evaluation as a CEL
timestamp.

Failure messages never include the evaluation context: cel-python appends the
whole activation to undeclared-name errors, and that part is dropped.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC
from functools import lru_cache
from typing import TYPE_CHECKING
from typing import Any

import celpy
from celpy import celtypes
from celpy.celparser import CELParseError
from celpy.evaluation import CELEvalError

from ruleevaluator.rules.constants import DEFAULT_MAX_EXPRESSION_CHARS
from ruleevaluator.rules.constants import ValueKind
from ruleevaluator.rules.engines.base import EngineResult
from ruleevaluator.rules.engines.base import kind_of

if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Mapping
    from datetime import datetime

    from ruleevaluator.rules.functions.base import ExtensionFunction
    from ruleevaluator.rules.functions.registry import FunctionRegistry

logger = logging.getLogger(__name__)

CLOCK_FUNCTION = "now"

_STRING_LITERAL = r"\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*'"
# A lone "=" (not part of ==, !=, <= or >=) is equality.
_SINGLE_EQUALS = r"(?<![=!<>])=(?!=)"
# Undeclared-name errors end with a dump of the whole activation.
_ACTIVATION_SUFFIX = " (in activation"


def cel_identifier(name: str) -> str:
    """Return the CEL identifier under which a function name is exposed."""
    return re.sub(r"\s+", "_", name.strip())


@lru_cache(maxsize=256)
def _compile_expr(expr: str):
    """
    Parse a CEL expression into a reusable AST.
    Cached by expression string to avoid repeated compilation.
    """
    env = celpy.Environment()
    return env.compile(expr)


@lru_cache(maxsize=32)
def _rewrite_pattern(names: frozenset[str]) -> re.Pattern:
    parts = [rf"(?P<literal>{_STRING_LITERAL})"]
    spaced = sorted(
        (name for name in names if cel_identifier(name) != name),
        key=len,
        reverse=True,
    )
    if spaced:
        alternatives = "|".join(
            r"\s+".join(re.escape(part) for part in name.split()) for name in spaced
        )
        parts.append(rf"(?<![\w.])(?P<name>{alternatives})(?=\s*\()")
    parts.append(rf"(?P<equals>{_SINGLE_EQUALS})")
    return re.compile("|".join(parts))


def rewrite_expression(expression: str, names: frozenset[str]) -> str:
    """
    Rewrite rule syntax that CEL does not accept into its CEL form.

    Spaced function names at call sites become their identifiers and a single
    ``=`` becomes ``==``. String literals are left untouched.
    """

    def _replace(match: re.Match) -> str:
        if match.group("literal") is not None:
            return match.group(0)
        if match.group("equals") is not None:
            return "=="
        return cel_identifier(match.group("name"))

    return _rewrite_pattern(names).sub(_replace, expression)


def _bind(function: ExtensionFunction) -> Callable[..., celtypes.BoolType]:
    def _call(*args: Any) -> celtypes.BoolType:
        return celtypes.BoolType(function(*args))

    _call.__name__ = cel_identifier(function.name)
    return _call


@lru_cache(maxsize=8)
def _bound_functions(functions: FunctionRegistry) -> dict[str, Callable]:
    return {cel_identifier(function.name): _bind(function) for function in functions}


def _cel_kind(value: Any) -> ValueKind | None:
    # BoolType subclasses int and NullType is not None, so check them first.
    if isinstance(value, celtypes.BoolType):
        return ValueKind.BOOLEAN
    if isinstance(value, celtypes.NullType):
        return ValueKind.NULL
    return kind_of(value)


def _syntax_error_message(exc: CELParseError) -> str:
    # The parser's own exception carries the reason; CELParseError only
    # carries the source line with a caret.
    cause = exc.__cause__ or exc.__context__
    lines = str(cause).strip().splitlines() if cause is not None else []
    reason = lines[0] if lines else "invalid syntax"
    line = getattr(exc, "line", None)
    column = getattr(exc, "column", None)
    if line is None:
        return f"Syntax error: {reason}"
    return f"Syntax error at line {line}, column {column}: {reason}"


def _error_message(exc: Exception) -> str:
    if isinstance(exc, CELParseError):
        return _syntax_error_message(exc)
    if isinstance(exc, CELEvalError) and exc.args:
        message = str(exc.args[0])
    else:
        message = str(exc) or exc.__class__.__name__
    return message.split(_ACTIVATION_SUFFIX, 1)[0]


class CelExpressionEngine:
    """
    ExpressionEngine backed by cel-python.

    The engine holds no per-evaluation state; one instance serves every
    request.
    """

    def __init__(self, *, max_expression_chars: int = DEFAULT_MAX_EXPRESSION_CHARS):
        self.max_expression_chars = max_expression_chars

    def evaluate(
        self,
        expression: str,
        *,
        context: Mapping[str, Any],
        functions: FunctionRegistry,
        current_time: datetime,
    ) -> EngineResult:
        normalized = (expression or "").strip()
        if not normalized:
            return EngineResult.failure("Empty expression.")
        if len(normalized) > self.max_expression_chars:
            return EngineResult.failure("Expression is too long.")

        source = rewrite_expression(normalized, functions.function_names())
        clock = self._timestamp(current_time)
        bound = {
            **_bound_functions(functions),
            CLOCK_FUNCTION: lambda: clock,
        }

        try:
            activation = {
                str(name): celpy.json_to_cel(value) for name, value in context.items()
            }
            ast = _compile_expr(source)
            program = celpy.Environment().program(ast, functions=bound)
            value = program.evaluate(activation)
        except Exception as exc:
            message = _error_message(exc)
            logger.debug("CEL evaluation of %r failed: %s", normalized, message)
            return EngineResult.failure(message)

        if isinstance(value, CELEvalError):
            return EngineResult.failure(_error_message(value))

        kind = _cel_kind(value)
        if kind is None:
            return EngineResult.failure(
                f"Unsupported result type {type(value).__name__}.",
            )
        return EngineResult.ok(value, kind)

    @staticmethod
    def _timestamp(current_time: datetime) -> celtypes.TimestampType:
        if current_time.tzinfo is None:
            current_time = current_time.replace(tzinfo=UTC)
        return celtypes.TimestampType(current_time)
