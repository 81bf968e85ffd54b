"""
Tests for the rule evaluation orchestrator.

Most tests run real expressions through the CEL engine; the ordering and
classification tests use a scripted engine so they do not depend on CEL's
error wording.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC
from datetime import datetime
from datetime import timedelta

import pytest

from ruleevaluator.rules.constants import RULE_FALSE_MESSAGE
from ruleevaluator.rules.constants import RuleOutcome
from ruleevaluator.rules.constants import ValueKind
from ruleevaluator.rules.engines.base import EngineResult
from ruleevaluator.rules.engines.cel import CelExpressionEngine
from ruleevaluator.rules.evaluator import RuleEvaluator
from ruleevaluator.rules.evaluator import classify_result
from ruleevaluator.rules.evaluator import get_rule_evaluator
from ruleevaluator.rules.exceptions import EvaluationFailedError
from ruleevaluator.rules.exceptions import InvalidEvaluationInput
from ruleevaluator.rules.functions.registry import build_default_registry

WRONG_TYPE_STRING = "Result type of rule was String, but must be Boolean."


class ScriptedEngine:
    """Returns canned results keyed by expression and records every call."""

    def __init__(self, results: dict[str, EngineResult]):
        self.results = results
        self.calls: list[tuple[str, datetime]] = []

    def evaluate(self, expression, *, context, functions, current_time):
        self.calls.append((expression, current_time))
        return self.results[expression]


@pytest.fixture
def evaluator():
    return RuleEvaluator(engine=CelExpressionEngine(), registry=build_default_registry())


# ---------------------------------------------------------------- Outcomes


def test_true_rules_pass(evaluator, current_time):
    evaluator.evaluate(["true", "1 = 1"], {}, current_time)


def test_single_equals_compares_context_values(evaluator, current_time):
    context = {"context": {"status": "open"}}

    evaluator.evaluate(['context.status = "open"', "1 == 1"], context, current_time)
    with pytest.raises(EvaluationFailedError) as excinfo:
        evaluator.evaluate(['context.status = "closed"'], context, current_time)

    assert excinfo.value.as_list() == [{"index": 0, "message": RULE_FALSE_MESSAGE}]


def test_empty_rule_list_passes(evaluator, current_time):
    evaluator.evaluate([], {}, current_time)


def test_false_rule_reports_false_message(evaluator, current_time):
    with pytest.raises(EvaluationFailedError) as excinfo:
        evaluator.evaluate(["false"], {}, current_time)

    assert excinfo.value.as_list() == [{"index": 0, "message": RULE_FALSE_MESSAGE}]


def test_non_boolean_rule_reports_result_kind(evaluator, current_time):
    with pytest.raises(EvaluationFailedError) as excinfo:
        evaluator.evaluate(['"x"'], {}, current_time)

    assert excinfo.value.as_list() == [{"index": 0, "message": WRONG_TYPE_STRING}]


def test_unknown_name_reports_engine_error(evaluator, current_time):
    with pytest.raises(EvaluationFailedError) as excinfo:
        evaluator.evaluate(["unknownVar > 1"], {}, current_time)

    assert excinfo.value.as_list() == [
        {"index": 0, "message": "undeclared reference to 'unknownVar'"},
    ]


def test_every_rule_is_evaluated_and_errors_keep_rule_order(evaluator, current_time):
    rules = ["true", "false", '"x"', "unknownVar", "1 == 1"]

    with pytest.raises(EvaluationFailedError) as excinfo:
        evaluator.evaluate(rules, {}, current_time)

    errors = excinfo.value.errors
    assert [error.index for error in errors] == [1, 2, 3]
    assert errors[0].message == RULE_FALSE_MESSAGE
    assert errors[1].message == WRONG_TYPE_STRING


def test_rules_read_context(evaluator, current_time):
    context = {"context": {"status": "open", "amount": 3}}

    evaluator.evaluate(
        ['context.status == "open"', "context.amount > 2"],
        context,
        current_time,
    )


def test_evaluation_is_repeatable(evaluator, current_time):
    context = {"context": {"status": "open"}}
    rules = ['context.status == "closed"', "true"]

    outcomes = []
    for _ in range(2):
        with pytest.raises(EvaluationFailedError) as excinfo:
            evaluator.evaluate(rules, context, current_time)
        outcomes.append(excinfo.value.as_list())

    assert outcomes[0] == outcomes[1]
    assert context == {"context": {"status": "open"}}


def test_run_returns_report_without_raising(evaluator, current_time):
    report = evaluator.run(["false", "true"], {}, current_time)

    assert not report.passed
    assert [error.as_dict() for error in report.errors] == [
        {"index": 0, "message": RULE_FALSE_MESSAGE},
    ]


# ---------------------------------------------------------------- Concurrency


def test_concurrent_calls_do_not_share_state(evaluator):
    rules = [
        "context.n % 2 == 0",
        "context.n < 50",
        'now() > timestamp("2000-01-01T00:00:00Z")',
    ]

    def _run(n):
        clock = datetime(2024, 5, 1, tzinfo=UTC) + timedelta(seconds=n)
        report = evaluator.run(rules, {"context": {"n": n}}, clock)
        return n, [error.as_dict() for error in report.errors]

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(_run, range(100)))

    for n, errors in results:
        expected = []
        if n % 2:
            expected.append({"index": 0, "message": RULE_FALSE_MESSAGE})
        if n >= 50:
            expected.append({"index": 1, "message": RULE_FALSE_MESSAGE})
        assert errors == expected, n


# ---------------------------------------------------------------- Clock


def test_now_is_the_supplied_clock(evaluator, current_time):
    evaluator.evaluate(
        ['now() == timestamp("2024-05-01T12:00:00Z")'],
        {},
        current_time,
    )


def test_naive_clock_is_taken_as_utc():
    engine = ScriptedEngine({"true": EngineResult.ok(True, ValueKind.BOOLEAN)})
    evaluator = RuleEvaluator(engine=engine, registry=build_default_registry())

    evaluator.evaluate(["true"], {}, datetime(2024, 5, 1, 12, 0))  # noqa: DTZ001

    (_, clock) = engine.calls[0]
    assert clock == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


# ---------------------------------------------------------------- Scripted engine


def test_scripted_results_are_classified(current_time):
    engine = ScriptedEngine(
        {
            "a": EngineResult.ok(True, ValueKind.BOOLEAN),
            "b": EngineResult.failure("boom"),
            "c": EngineResult.ok(3, ValueKind.NUMBER),
            "d": EngineResult.ok(False, ValueKind.BOOLEAN),
            "e": EngineResult.ok(None, ValueKind.NULL),
        },
    )
    evaluator = RuleEvaluator(engine=engine, registry=build_default_registry())

    with pytest.raises(EvaluationFailedError) as excinfo:
        evaluator.evaluate(["a", "b", "c", "d", "e"], {}, current_time)

    assert [call[0] for call in engine.calls] == ["a", "b", "c", "d", "e"]
    assert excinfo.value.as_list() == [
        {"index": 1, "message": "boom"},
        {"index": 2, "message": "Result type of rule was Number, but must be Boolean."},
        {"index": 3, "message": RULE_FALSE_MESSAGE},
        {"index": 4, "message": "Result type of rule was Null, but must be Boolean."},
    ]


def test_duplicate_rules_are_reported_separately(current_time):
    engine = ScriptedEngine({"false": EngineResult.ok(False, ValueKind.BOOLEAN)})
    evaluator = RuleEvaluator(engine=engine, registry=build_default_registry())

    with pytest.raises(EvaluationFailedError) as excinfo:
        evaluator.evaluate(["false", "false"], {}, current_time)

    assert [error.index for error in excinfo.value.errors] == [0, 1]


@pytest.mark.parametrize(
    ("result", "outcome"),
    [
        (EngineResult.ok(True, ValueKind.BOOLEAN), RuleOutcome.PASSED),
        (EngineResult.ok(False, ValueKind.BOOLEAN), RuleOutcome.FAILED_ASSERTION),
        (EngineResult.ok("x", ValueKind.STRING), RuleOutcome.WRONG_RESULT_TYPE),
        (EngineResult.failure("nope"), RuleOutcome.EVALUATION_ERROR),
    ],
)
def test_classify_result(result, outcome):
    assert classify_result(result) == outcome


# ---------------------------------------------------------------- Invalid input


@pytest.mark.parametrize(
    ("rules", "context", "clock"),
    [
        (None, {}, datetime(2024, 5, 1, tzinfo=UTC)),
        ("true", {}, datetime(2024, 5, 1, tzinfo=UTC)),
        (["true", 1], {}, datetime(2024, 5, 1, tzinfo=UTC)),
        (["true"], None, datetime(2024, 5, 1, tzinfo=UTC)),
        (["true"], [], datetime(2024, 5, 1, tzinfo=UTC)),
        (["true"], {}, None),
        (["true"], {}, "2024-05-01T00:00:00Z"),
    ],
)
def test_malformed_input_is_rejected_before_evaluation(rules, context, clock):
    engine = ScriptedEngine({})
    evaluator = RuleEvaluator(engine=engine, registry=build_default_registry())

    with pytest.raises(InvalidEvaluationInput):
        evaluator.evaluate(rules, context, clock)

    assert engine.calls == []


def test_invalid_input_is_a_value_error():
    assert issubclass(InvalidEvaluationInput, ValueError)


# ---------------------------------------------------------------- Settings


def test_default_evaluator_uses_configured_expression_limit(settings, current_time):
    settings.RULES_MAX_EXPRESSION_CHARS = 10

    with pytest.raises(EvaluationFailedError) as excinfo:
        get_rule_evaluator().evaluate(["true && true && true"], {}, current_time)

    assert excinfo.value.as_list() == [
        {"index": 0, "message": "Expression is too long."},
    ]


def test_default_evaluator_is_shared():
    assert get_rule_evaluator() is get_rule_evaluator()
