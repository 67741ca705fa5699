"""
jstemplate - render JSON data into annotated HTML trees.

Templates are ordinary HTML whose elements carry data-jst-* binding
attributes. A TemplateEngine evaluates those bindings against data and
updates the tree in place, so a template can be rendered again with new
data.
"""

from .config import EngineConfig
from .errors import (
    TemplateError,
    ExpressionCompileError,
    EvaluationError,
    MissingValueError,
    TemplateNotFoundError,
)
from .rendering import TemplateEngine, TemplateHandle
from .tree import TreeAdapter, LxmlTree

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "TemplateError",
    "ExpressionCompileError",
    "EvaluationError",
    "MissingValueError",
    "TemplateNotFoundError",
    "TemplateEngine",
    "TemplateHandle",
    "TreeAdapter",
    "LxmlTree",
]
