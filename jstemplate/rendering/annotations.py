"""
Parsing and sharing of binding attributes.

Every node shape (the set of binding attributes it carries, with their raw
values) is compiled once into an AnnotationSet. Nodes with textually
identical bindings share one AnnotationSet object.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from ..template.engine import Evaluator, ExpressionCompiler

if TYPE_CHECKING:
    from ..tree import TreeAdapter
    from .nodestore import NodeStore

logger = logging.getLogger(__name__)

# How a binding's raw attribute value is compiled
SCALAR = "scalar"
LIST = "list"
SEQUENCE = "sequence"
LITERAL = "literal"
TRANSCLUDE = "transclude"

# (attribute suffix, AnnotationSet field, compiled form), in fingerprint order
BINDINGS: Tuple[Tuple[str, str, str], ...] = (
    ("select", "select", SCALAR),
    ("if", "display", SCALAR),
    ("values", "values", LIST),
    ("vars", "variables", LIST),
    ("eval", "expressions", SEQUENCE),
    ("include", "transclude", TRANSCLUDE),
    ("content", "content", SCALAR),
    ("skip", "skip", SCALAR),
    ("hide", "hide", SCALAR),
    ("show", "show", SCALAR),
    ("id", "id", LITERAL),
    ("idexpr", "idexpr", SCALAR),
    ("overwrite", "overwrite", LITERAL),
    ("data", "data", LIST),
)

FINGERPRINT_SEPARATOR = "&"


@dataclass(frozen=True)
class Transclusion:
    """Include target: a literal template id or an expression yielding one."""

    reference: Optional[str] = None
    expression: Optional[Evaluator] = None


@dataclass(frozen=True)
class AnnotationSet:
    """The compiled bindings of one node shape."""

    fingerprint: str = ""
    select: Optional[Evaluator] = None
    display: Optional[Evaluator] = None
    values: Tuple[Tuple[str, Evaluator], ...] = ()
    variables: Tuple[Tuple[str, Evaluator], ...] = ()
    expressions: Tuple[Evaluator, ...] = ()
    transclude: Optional[Transclusion] = None
    content: Optional[Evaluator] = None
    skip: Optional[Evaluator] = None
    hide: Optional[Evaluator] = None
    show: Optional[Evaluator] = None
    id: Optional[str] = None
    idexpr: Optional[Evaluator] = None
    overwrite: Optional[str] = None
    data: Tuple[Tuple[str, Evaluator], ...] = ()

    @property
    def empty(self) -> bool:
        return not self.fingerprint


EMPTY = AnnotationSet()


class AnnotationCache:
    """
    Looks up, builds and shares AnnotationSets.

    hits counts nodes that reused an existing set by fingerprint, misses
    counts sets that had to be compiled.
    """

    def __init__(
        self,
        compiler: ExpressionCompiler,
        tree: "TreeAdapter",
        store: "NodeStore",
        prefix: str = "data-jst-",
        literal_marker: str = "#",
    ):
        self.compiler = compiler
        self.tree = tree
        self.store = store
        self.prefix = prefix
        self.literal_marker = literal_marker
        self.attributes = [(prefix + suffix, name, form) for suffix, name, form in BINDINGS]
        self._sets: Dict[str, AnnotationSet] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._sets)

    def clear(self) -> None:
        self._sets.clear()
        self.hits = self.misses = 0

    def attribute_name(self, field_name: str) -> str:
        for attribute, name, _ in self.attributes:
            if name == field_name:
                return attribute
        raise KeyError(field_name)

    def lookup(self, node: Any) -> AnnotationSet:
        """
        Return the AnnotationSet of node, building it on first sight.

        Only nodes with bindings get a record; plain nodes are rescanned
        on every lookup and never enter the store.
        """
        record = self.store.get(node)
        if record is not None and record.annotations is not None:
            return record.annotations

        present: List[Tuple[str, str, str, str]] = []
        for attribute, name, form in self.attributes:
            value = self.tree.get_attribute(node, attribute)
            if value is not None:
                present.append((attribute, name, form, value))

        if not present:
            if record is not None:
                record.annotations = EMPTY
            return EMPTY

        fingerprint = FINGERPRINT_SEPARATOR.join(f"{attribute}={value}" for attribute, _, _, value in present)
        annotations = self._sets.get(fingerprint)
        if annotations is not None:
            self.hits += 1
        else:
            self.misses += 1
            annotations = self._build(fingerprint, present)
            self._sets[fingerprint] = annotations
        self.store.record(node).annotations = annotations
        return annotations

    def prime(self, root: Any) -> None:
        """Look up every node under root, breadth first, unless root is known."""
        record = self.store.get(root)
        if record is not None and record.annotations is not None:
            return
        queue = deque([root])
        while queue:
            node = queue.popleft()
            self.lookup(node)
            queue.extend(self.tree.children(node))

    def _build(self, fingerprint: str, present: List[Tuple[str, str, str, str]]) -> AnnotationSet:
        fields: Dict[str, Any] = {"fingerprint": fingerprint}
        for _, name, form, value in present:
            if form == LITERAL:
                fields[name] = value
            elif form == TRANSCLUDE:
                fields[name] = self._transclusion(value)
            elif not value.strip():
                continue
            elif form == SCALAR:
                fields[name] = self.compiler.compile(value)
            elif form == LIST:
                fields[name] = tuple(self.compiler.compile_list(value))
            elif form == SEQUENCE:
                fields[name] = tuple(self.compiler.compile_sequence(value))
        logger.debug(f"Compiled annotation set {fingerprint!r}")
        return AnnotationSet(**fields)

    def _transclusion(self, value: str) -> Optional[Transclusion]:
        if not value:
            return None
        if value.startswith(self.literal_marker):
            return Transclusion(reference=value[len(self.literal_marker):])
        return Transclusion(expression=self.compiler.compile(value))
