"""
Binding interpreter.

The Binder walks a template with a WorkStack. Outer handles node
replacement (include) and multiplication (select); Inner runs the scalar
bindings of one node in a fixed order and then descends into children or
writes content.
"""

import logging
from typing import Any, Callable, List, TYPE_CHECKING

from ..template.context import EvalContext
from ..template.functions import stringify
from .annotations import AnnotationSet
from .reconciler import Reconciler
from .traversal import WorkStack

if TYPE_CHECKING:
    from .processor import TemplateEngine

logger = logging.getLogger(__name__)

ID_ATTRIBUTE = "id"
VARIABLE_MARKER = "$"
PROPERTY_MARKER = "."

Step = Callable[[EvalContext, Any, AnnotationSet], bool]


class Binder:
    """
    Applies the bindings of a template for one render pass.

    in_place renders keep the id attributes already on the nodes; other
    renders strip them so cloned instances never share an id.
    """

    def __init__(self, engine: "TemplateEngine", in_place: bool = True):
        self.engine = engine
        self.tree = engine.tree
        self.store = engine.store
        self.annotations = engine.annotations
        self.contexts = engine.contexts
        self.registry = engine.registry
        self.in_place = in_place
        self.stack = WorkStack()
        self.reconciler = Reconciler(self)
        # Inner steps in order; a step returning False ends processing of the node
        self.steps: List[Step] = [
            self.bind_identity,
            self.bind_display,
            self.bind_variables,
            self.bind_values,
            self.bind_data,
            self.run_callbacks,
            self.run_expressions,
            self.bind_show,
            self.bind_hide,
            self.bind_skip,
        ]

    def run(self, context: EvalContext, node: Any) -> None:
        self.stack.run(self.outer, context, node)

    def clone_node(self, node: Any) -> Any:
        return self.engine.clone_node(node)

    def remove_node(self, node: Any) -> None:
        self.engine.remove_node(node)

    def recycle(self, context: EvalContext, _unused: Any = None) -> None:
        self.contexts.recycle(context)

    def outer(self, context: EvalContext, node: Any) -> None:
        annotations = self.annotations.lookup(node)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Outer {node!r} {annotations.fingerprint!r}")

        if annotations.transclude is not None:
            self.transclude(context, node, annotations)
        elif annotations.select is not None:
            self.reconciler.select(context, node, annotations.select)
        else:
            self.inner(context, node)

    def inner(self, context: EvalContext, node: Any) -> None:
        annotations = self.annotations.lookup(node)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Inner {node!r} {annotations.fingerprint!r}")

        for step in self.steps:
            if not step(context, node, annotations):
                return

        if annotations.content is not None:
            self.apply_content(context, node, annotations)
        else:
            children = self.tree.children(node)
            self.stack.push([(self.outer, context, child) for child in children])

    def transclude(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> None:
        transclusion = annotations.transclude
        reference = transclusion.reference
        if reference is None:
            reference = context.execute(transclusion.expression, node)

        if self.tree.parent(node) is None:
            logger.warning(f"Cannot include {reference!r} in place of detached {node!r}")
            return
        replacement = self.registry.resolve(reference, scope=node)
        if replacement is None:
            logger.debug(f"Include target {reference!r} not found, removing {node!r}")
            self.remove_node(node)
            return

        self.store.forget(node)
        self.tree.replace(node, replacement)
        self.stack.push([(self.outer, context, replacement)])

    def bind_identity(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        if not self.in_place:
            self.tree.remove_attribute(node, ID_ATTRIBUTE)
        if annotations.id:
            self.tree.set_attribute(node, ID_ATTRIBUTE, annotations.id)
        if annotations.idexpr is not None:
            identity = context.execute(annotations.idexpr, node)
            if identity:
                self.tree.set_attribute(node, ID_ATTRIBUTE, stringify(identity))
        return True

    def bind_display(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        if annotations.display is None:
            return True
        if not context.execute(annotations.display, node):
            self.tree.hide(node)
            return False
        self.tree.show(node)
        return True

    def bind_variables(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        for label, evaluator in annotations.variables:
            context.set_variable(label, context.execute(evaluator, node))
        return True

    def bind_values(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        for label, evaluator in annotations.values:
            value = context.execute(evaluator, node)
            if label.startswith(VARIABLE_MARKER):
                context.set_variable(label, value)
            elif label.startswith(PROPERTY_MARKER):
                self.assign_property(node, label[1:].split(PROPERTY_MARKER), value)
            elif label:
                self.assign_attribute(node, label, value)
        return True

    def assign_attribute(self, node: Any, name: str, value: Any) -> None:
        # Booleans follow the HTML boolean attribute convention
        if isinstance(value, bool):
            if value:
                self.tree.set_attribute(node, name, name)
            else:
                self.tree.remove_attribute(node, name)
        else:
            self.tree.set_attribute(node, name, stringify(value))

    def assign_property(self, node: Any, path: List[str], value: Any) -> None:
        target = self.store.record(node).properties
        for part in path[:-1]:
            nested = target.get(part)
            if not isinstance(nested, dict):
                nested = target[part] = {}
            target = nested
        target[path[-1]] = value

    def bind_data(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        if annotations.data:
            data = self.store.record(node).data
            for label, evaluator in annotations.data:
                data[label] = context.execute(evaluator, node)
        return True

    def run_callbacks(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        record = self.store.get(node)
        if record is None:
            return True
        for callback in list(record.callbacks):
            try:
                callback(context, node)
            except Exception:
                logger.exception(f"Template callback {callback!r} failed on {node!r}")
        return True

    def run_expressions(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        for evaluator in annotations.expressions:
            context.execute(evaluator, node)
        return True

    def bind_show(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        if annotations.show is not None and context.execute(annotations.show, node):
            self.tree.show(node)
        return True

    def bind_hide(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        if annotations.hide is not None and context.execute(annotations.hide, node):
            self.tree.hide(node)
        return True

    def bind_skip(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> bool:
        if annotations.skip is not None and context.execute(annotations.skip, node):
            return False
        return True

    def apply_content(self, context: EvalContext, node: Any, annotations: AnnotationSet) -> None:
        value = context.execute(annotations.content, node)
        if not self.tree.is_node(value) and self.tree.get_content(node) == stringify(value):
            return

        overwrite = annotations.overwrite
        if overwrite and overwrite != "true":
            return

        for child in self.tree.children(node):
            self.store.forget(child)
        self.tree.set_content(node, value)
