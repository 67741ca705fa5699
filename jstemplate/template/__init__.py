"""Expression compilation and evaluation contexts."""

from .engine import JSONPathEngine, ExpressionCompiler, Evaluator, FailedEvaluator
from .functions import ComputeFunctions, default_globals, stringify
from .context import EvalContext, ContextFactory

__all__ = [
    "JSONPathEngine",
    "ExpressionCompiler",
    "Evaluator",
    "FailedEvaluator",
    "ComputeFunctions",
    "default_globals",
    "stringify",
    "EvalContext",
    "ContextFactory",
]
