from ruleevaluator.rules.engines.base import EngineResult
from ruleevaluator.rules.engines.base import ExpressionEngine
from ruleevaluator.rules.engines.cel import CelExpressionEngine

__all__ = [
    "CelExpressionEngine",
    "EngineResult",
    "ExpressionEngine",
]
