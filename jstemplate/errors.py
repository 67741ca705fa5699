"""
Exceptions raised by the template engine.

Per-binding failures are contained inside the engine and degrade to the
configured default value; only TemplateNotFoundError is meant to reach
the caller.
"""


class TemplateError(Exception):
    """Base exception for all template engine errors."""

    pass


class ExpressionCompileError(TemplateError):
    """Raised when expression source text cannot be parsed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot compile expression {source!r}: {reason}")


class EvaluationError(TemplateError):
    """Raised when a compiled expression fails at runtime."""

    pass


class MissingValueError(EvaluationError, LookupError):
    """Raised when a name, property or path does not resolve."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Value not found: {name}")


class TemplateNotFoundError(TemplateError, LookupError):
    """Raised when a template that must exist cannot be resolved."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Template not found: {reference}")
