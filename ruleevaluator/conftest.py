from datetime import UTC
from datetime import datetime

import pytest

from ruleevaluator.rules.evaluator import get_rule_evaluator
from ruleevaluator.rules.functions.registry import get_default_registry


@pytest.fixture(autouse=True)
def _reset_rule_evaluator():
    """
    The evaluator and registry are built once per process from settings.
    Clear them around each test so ``settings`` overrides take effect.
    """
    get_rule_evaluator.cache_clear()
    get_default_registry.cache_clear()
    yield
    get_rule_evaluator.cache_clear()
    get_default_registry.cache_clear()


@pytest.fixture
def current_time():
    return datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
