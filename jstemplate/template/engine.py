"""
Expression compilation and JSONPath evaluation.

Binding attribute values are parsed with a small lark grammar and turned
into trees of Python closures. A compiled Evaluator is called with the
active variable table and data value; variables shadow data properties.
"""

import ast as py_ast
import logging
import re
from collections.abc import Mapping, Sized
from functools import lru_cache
from typing import Any, Callable, Dict, List, Match, Optional, Tuple

from jsonpath_ng.ext import parse as jsonpath_parse
from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError

from ..errors import EvaluationError, ExpressionCompileError, MissingValueError
from .functions import stringify

logger = logging.getLogger(__name__)


GRAMMAR = r"""
?start: expr

?expr: or_test
     | or_test "?" expr ":" expr      -> conditional

?or_test: and_test
        | or_test "||" and_test       -> or_op
        | or_test "or" and_test       -> or_op

?and_test: not_test
         | and_test "&&" not_test     -> and_op
         | and_test "and" not_test    -> and_op

?not_test: comparison
         | "!" not_test               -> not_op
         | "not" not_test             -> not_op

?comparison: sum
           | comparison "==" sum      -> eq
           | comparison "!=" sum      -> ne
           | comparison "<=" sum      -> le
           | comparison ">=" sum      -> ge
           | comparison "<" sum       -> lt
           | comparison ">" sum       -> gt

?sum: product
    | sum "+" product                 -> add
    | sum "-" product                 -> sub

?product: unary
        | product "*" unary           -> mul
        | product "/" unary           -> div
        | product "%" unary           -> mod

?unary: postfix
      | "-" unary                     -> neg

?postfix: atom
        | postfix "." NAME            -> getattr
        | postfix "[" expr "]"        -> getitem
        | postfix "(" [arguments] ")" -> call

arguments: expr ("," expr)*

?atom: NUMBER                         -> number
     | STRING                         -> string
     | "true"                         -> true
     | "True"                         -> true
     | "false"                        -> false
     | "False"                        -> false
     | "null"                         -> null
     | "None"                         -> null
     | VARIABLE                       -> variable
     | JSONPATH                       -> jsonpath
     | NAME                           -> name
     | "[" [arguments] "]"            -> list_literal
     | "(" expr ")"

VARIABLE: /\$[A-Za-z_]\w*/
JSONPATH: /\$(?:\.\.?(?:[A-Za-z_]\w*|\*)|\[[^\]]*\])+/
NAME: /[A-Za-z_]\w*/
NUMBER: /\d+(?:\.\d+)?(?:[eE][+-]?\d+)?/
STRING: /'(?:[^'\\]|\\.)*'/
      | /"(?:[^"\\]|\\.)*"/

%import common.WS
%ignore WS
"""

_parser = Lark(GRAMMAR, parser="lalr", start="start")


class JSONPathEngine:
    """Evaluates JSONPath expressions with variable substitution."""

    # Paths containing any of these can match more than one value
    MULTI_MARKERS = ("*", "..", ":", ",", "?")

    @staticmethod
    def substitute_variables(expression: str, variables: Mapping) -> str:
        """
        Replace ${var_name} placeholders with actual values.

        Args:
            expression: JSONPath expression with ${...} placeholders
            variables: Mapping of variable names to values

        Returns:
            Expression with variables substituted
        """
        def replace_var(match: Match[str]) -> str:
            var_name = match.group(1)
            if var_name in variables:
                return stringify(variables[var_name])
            if f"${var_name}" in variables:
                return stringify(variables[f"${var_name}"])
            return match.group(0)

        return re.sub(r'\$\{(\w+)\}', replace_var, expression)

    @staticmethod
    @lru_cache(maxsize=512)
    def parse(expression: str) -> Any:
        """Parse a JSONPath expression, caching by source text."""
        return jsonpath_parse(expression)

    def is_multiple(self, expression: str) -> bool:
        return any(marker in expression for marker in self.MULTI_MARKERS)

    def evaluate(self, expression: str, data: Any, variables: Optional[Mapping] = None) -> List[Any]:
        """
        Evaluate a JSONPath expression against data.

        Args:
            expression: JSONPath expression
            data: Data to query
            variables: Optional variables for substitution

        Returns:
            List of matching values
        """
        if variables and '${' in expression:
            expression = self.substitute_variables(expression, variables)

        matches = self.parse(expression).find(data)
        return [match.value for match in matches]

    def select(self, expression: str, data: Any, variables: Optional[Mapping] = None) -> Any:
        """
        Evaluate a path as a template value.

        Paths that can fan out yield the list of all matches; any other
        path yields its single match. No match is a missing value.
        """
        results = self.evaluate(expression, data, variables)
        if self.is_multiple(expression):
            return results
        if not results:
            raise MissingValueError(expression)
        return results[0]


class Evaluator:
    """A compiled expression: call it with (variables, data)."""

    def __init__(self, source: str, function: Callable[[Mapping, Any], Any]):
        self.source = source
        self._function = function

    def __call__(self, variables: Mapping, data: Any) -> Any:
        return self._function(variables, data)

    def __repr__(self) -> str:
        return f"<Evaluator {self.source!r}>"


class FailedEvaluator(Evaluator):
    """Stands in for source text that did not compile."""

    def __init__(self, source: str, error: ExpressionCompileError):
        super().__init__(source, self._fail)
        self.error = error

    def _fail(self, variables: Mapping, data: Any) -> Any:
        raise self.error


def _member(target: Any, name: str) -> Any:
    if isinstance(target, Mapping):
        try:
            return target[name]
        except KeyError:
            raise MissingValueError(name) from None
    if name == "length" and isinstance(target, Sized):
        return len(target)
    if name.startswith("_"):
        raise EvaluationError(f"Access to private attribute {name!r} is not allowed")
    try:
        return getattr(target, name)
    except AttributeError:
        raise MissingValueError(name) from None


def _lookup(name: str, variables: Mapping, data: Any) -> Any:
    if name in variables:
        return variables[name]
    return _member(data, name)


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        return stringify(left) + stringify(right)
    return left + right


def _binary(operator: Callable[[Any, Any], Any]) -> Callable:
    def build(self, left, right):
        return lambda v, d: operator(left(v, d), right(v, d))
    return build


@v_args(inline=True)
class ExpressionBuilder(Transformer):
    """Turns a parse tree into nested closures of (variables, data)."""

    def __init__(self, jsonpath: JSONPathEngine):
        super().__init__()
        self.paths = jsonpath

    def number(self, token):
        value = float(token) if any(c in token for c in ".eE") else int(token)
        return lambda v, d: value

    def string(self, token):
        value = py_ast.literal_eval(str(token))
        return lambda v, d: value

    def true(self):
        return lambda v, d: True

    def false(self):
        return lambda v, d: False

    def null(self):
        return lambda v, d: None

    def variable(self, token):
        name = str(token)
        return lambda v, d: _lookup(name, v, d)

    def name(self, token):
        name = str(token)
        return lambda v, d: _lookup(name, v, d)

    def jsonpath(self, token):
        path = str(token)
        if "${" not in path:
            try:
                self.paths.parse(path)
            except Exception as e:
                raise ExpressionCompileError(path, f"invalid JSONPath: {e}") from e
        engine = self.paths
        return lambda v, d: engine.select(path, d, v)

    def arguments(self, *items):
        return list(items)

    def list_literal(self, items=None):
        items = items or []
        return lambda v, d: [item(v, d) for item in items]

    def getattr(self, target, token):
        name = str(token)
        return lambda v, d: _member(target(v, d), name)

    def getitem(self, target, key):
        def get(v, d):
            container = target(v, d)
            index = key(v, d)
            try:
                return container[index]
            except (KeyError, IndexError):
                raise MissingValueError(stringify(index)) from None
        return get

    def call(self, target, arguments=None):
        arguments = arguments or []

        def invoke(v, d):
            function = target(v, d)
            if not callable(function):
                raise EvaluationError(f"{function!r} is not callable")
            return function(*[argument(v, d) for argument in arguments])
        return invoke

    def conditional(self, test, if_true, if_false):
        return lambda v, d: if_true(v, d) if test(v, d) else if_false(v, d)

    def or_op(self, left, right):
        return lambda v, d: left(v, d) or right(v, d)

    def and_op(self, left, right):
        return lambda v, d: left(v, d) and right(v, d)

    def not_op(self, operand):
        return lambda v, d: not operand(v, d)

    def neg(self, operand):
        return lambda v, d: -operand(v, d)

    eq = _binary(lambda a, b: a == b)
    ne = _binary(lambda a, b: a != b)
    lt = _binary(lambda a, b: a < b)
    le = _binary(lambda a, b: a <= b)
    gt = _binary(lambda a, b: a > b)
    ge = _binary(lambda a, b: a >= b)
    add = _binary(_add)
    sub = _binary(lambda a, b: a - b)
    mul = _binary(lambda a, b: a * b)
    div = _binary(lambda a, b: a / b)
    mod = _binary(lambda a, b: a % b)


class ExpressionCompiler:
    """
    Compiles binding attribute values into cached Evaluators.

    A source text compiles to exactly one Evaluator for the lifetime of
    the compiler. Source that fails to parse is logged once and cached as
    a FailedEvaluator unless retry_failed is set, in which case every
    request compiles it again.
    """

    # Separators for label=expr lists and for statement sequences
    PIPE_PATTERN = re.compile(r'\s*\|\s*')
    SEMICOLON_PATTERN = re.compile(r'\s*;\s*')

    def __init__(self, jsonpath: Optional[JSONPathEngine] = None, retry_failed: bool = False):
        self.jsonpath = jsonpath or JSONPathEngine()
        self.retry_failed = retry_failed
        self._cache: Dict[str, Evaluator] = {}
        self.compiled = 0
        self.hits = 0
        self.failures = 0

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        """Forget every compiled expression and reset the counters."""
        self._cache.clear()
        self.compiled = self.hits = self.failures = 0

    def compile(self, source: str) -> Evaluator:
        """
        Compile expression source text.

        Args:
            source: Expression source (e.g. "$this.name" or "len(items) > 0")

        Returns:
            The cached Evaluator for this exact source text
        """
        evaluator = self._cache.get(source)
        if evaluator is not None:
            self.hits += 1
            return evaluator

        try:
            tree = _parser.parse(source)
            function = ExpressionBuilder(self.jsonpath).transform(tree)
        except LarkError as e:
            self.failures += 1
            reason = getattr(e, "orig_exc", e)
            error = reason if isinstance(reason, ExpressionCompileError) else ExpressionCompileError(source, str(reason))
            logger.warning(f"Expression compile failed: {error}")
            failed = FailedEvaluator(source, error)
            if not self.retry_failed:
                self._cache[source] = failed
            return failed

        evaluator = Evaluator(source, function)
        self._cache[source] = evaluator
        self.compiled += 1
        return evaluator

    @classmethod
    def split_list(cls, source: str) -> List[Tuple[str, str]]:
        """
        Split "label=expr | label=expr" into (label, expr) pairs.

        Splitting on the pipe also splits "a || b"; an empty segment marks
        such a false split and its neighbours are joined back together.
        Tokens without "=" are ignored.

        Example: "class=$this.kind || 'plain' | title=$this.name"
            -> [("class", "$this.kind || 'plain'"), ("title", "$this.name")]
        """
        segments = cls.PIPE_PATTERN.split(source.strip())
        tokens: List[str] = []
        i = 0
        while i < len(segments):
            segment = segments[i]
            if segment == '' and tokens and i + 1 < len(segments):
                tokens.append(tokens.pop() + " || " + segments[i + 1])
                i += 2
                continue
            if segment:
                tokens.append(segment)
            i += 1

        pairs = []
        for token in tokens:
            label, separator, expression = token.partition('=')
            if not separator:
                continue
            pairs.append((label.strip(), expression))
        return pairs

    def compile_list(self, source: str) -> List[Tuple[str, Evaluator]]:
        """Compile a label=expr list into (label, Evaluator) pairs."""
        return [(label, self.compile(expression)) for label, expression in self.split_list(source)]

    def compile_sequence(self, source: str) -> List[Evaluator]:
        """Compile "expr; expr; ..." into Evaluators, skipping empty statements."""
        return [self.compile(statement) for statement in self.SEMICOLON_PATTERN.split(source) if statement]
