"""
Evaluation contexts: the chained variable scopes expressions run against.

Contexts are only built through ContextFactory, which owns the global
variable table and an optional pool of recycled instances.
"""

import logging
from typing import Any, Dict, List, Optional

from ..errors import MissingValueError
from .engine import Evaluator

logger = logging.getLogger(__name__)

VAR_INDEX = "$index"
VAR_LENGTH = "$length"
VAR_THIS = "$this"
VAR_CONTEXT = "$context"
VAR_TOP = "$top"
GLOBAL_DEFAULT = "$default"


class EvalContext:
    """
    A variable scope holding the current data value.

    A root context copies the factory's globals and binds $top; a child
    copies its parent's variables. Both bind $this and $context.
    """

    def __init__(self, factory: "ContextFactory"):
        self.factory = factory
        self.vars: Dict[str, Any] = {}
        self.data: Any = ""

    def _bind(self, data: Any, parent: Optional["EvalContext"]) -> None:
        if parent is not None:
            self.vars.update(parent.vars)
        else:
            self.vars.update(self.factory.globals)

        self.vars[VAR_THIS] = data
        self.vars[VAR_CONTEXT] = self
        self.data = data if data is not None else ""
        if parent is None:
            self.vars[VAR_TOP] = self.data

    def clone(self, data: Any, index: int, count: int) -> "EvalContext":
        """Create the child context for one item of a list of `count`."""
        child = self.factory.create(data, self)
        child.set_variable(VAR_INDEX, index)
        child.set_variable(VAR_LENGTH, count)
        return child

    def set_variable(self, name: str, value: Any) -> None:
        self.vars[name] = value

    def get_variable(self, name: str) -> Any:
        return self.vars.get(name)

    def execute(self, evaluator: Optional[Evaluator], node: Any = None) -> Any:
        """
        Run an evaluator against this context.

        Any error degrades to the global $default value. Missing values are
        expected in templates and only logged at debug level.
        """
        if evaluator is None:
            return self.factory.default
        try:
            return evaluator(self.vars, self.data)
        except MissingValueError as e:
            logger.debug(f"{e} in {evaluator.source!r}")
        except Exception as e:
            logger.warning(f"Expression {evaluator.source!r} failed on {node!r}: {e!r}")
        return self.factory.default

    def evaluate(self, source: str, node: Any = None) -> Any:
        """Compile and run expression source text against this context."""
        return self.execute(self.factory.compiler.compile(source), node)

    def __repr__(self) -> str:
        return f"<EvalContext data={self.data!r}>"


class ContextFactory:
    """Creates, pools and recycles evaluation contexts for one engine."""

    def __init__(self, compiler, global_vars: Optional[Dict[str, Any]] = None, pooling: bool = True):
        self.compiler = compiler
        self.globals: Dict[str, Any] = dict(global_vars or {})
        self.globals.setdefault(GLOBAL_DEFAULT, None)
        self.pooling = pooling
        self._pool: List[EvalContext] = []

    @property
    def default(self) -> Any:
        return self.globals.get(GLOBAL_DEFAULT)

    @property
    def pooled(self) -> int:
        return len(self._pool)

    def set_global(self, name: str, value: Any) -> None:
        self.globals[name] = value

    def create(self, data: Any = None, parent: Optional[EvalContext] = None) -> EvalContext:
        if self._pool:
            context = self._pool.pop()
        else:
            context = EvalContext(self)
        context._bind(data, parent)
        return context

    def recycle(self, context: EvalContext) -> None:
        """Clear a context; with pooling on, keep it for reuse."""
        context.vars.clear()
        context.data = None
        if self.pooling:
            self._pool.append(context)
