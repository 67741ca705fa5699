"""
Template engine entry points.

A TemplateEngine owns every cache used while rendering (compiled
expressions, annotation sets, per-node records, pooled contexts and the
template registry), so separate engines never share state.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..config import EngineConfig
from ..template import ContextFactory, EvalContext, ExpressionCompiler, default_globals
from ..tree import LxmlTree, TreeAdapter
from .annotations import AnnotationCache
from .binder import Binder
from .nodestore import InstanceMarker, NodeStore
from .registry import Loader, TemplateRegistry

logger = logging.getLogger(__name__)

Callback = Callable[[EvalContext, Any], Any]


class TemplateHandle:
    """A template node plus the render mode it is processed with."""

    def __init__(self, engine: "TemplateEngine", node: Any, in_place: bool):
        self.engine = engine
        self.node = node
        self.in_place = in_place

    def process(self, data: Any = None, parent_data: Any = None) -> Any:
        """Render data into the handle's node and return the node."""
        if self.node is None:
            return None
        return self.engine.render(data, self.node, parent_data, in_place=self.in_place)

    def release(self) -> None:
        """Forget the engine records of a cloned node once it is no longer rendered."""
        if self.node is not None and not self.in_place:
            self.engine.release(self.node)

    def __repr__(self) -> str:
        mode = "in-place" if self.in_place else "cloned"
        return f"<TemplateHandle {mode} {self.node!r}>"


class TemplateEngine:
    """Renders data into annotated trees."""

    def __init__(
        self,
        tree: Optional[TreeAdapter] = None,
        config: Optional[EngineConfig] = None,
        document: Any = None,
        loader: Optional[Loader] = None,
    ):
        self.config = config or EngineConfig()
        self.tree = tree or LxmlTree()
        self.store = NodeStore(self.tree)
        self.compiler = ExpressionCompiler(retry_failed=self.config.retry_failed_compiles)
        self.contexts = ContextFactory(
            self.compiler,
            default_globals(self.config.default_value),
            pooling=self.config.pool_contexts,
        )
        self.annotations = AnnotationCache(
            self.compiler,
            self.tree,
            self.store,
            prefix=self.config.attribute_prefix,
            literal_marker=self.config.literal_marker,
        )
        self.registry = TemplateRegistry(
            self,
            document=document,
            loader=loader,
            container_id=self.config.template_container_id,
        )

    @property
    def document(self) -> Any:
        return self.registry.document

    def set_document(self, document: Any) -> None:
        self.registry.document = document

    def set_global(self, name: str, value: Any) -> None:
        """Add or replace a global variable for contexts created from now on."""
        self.contexts.set_global(name, value)

    def render_in_place(self, data: Any, node: Any, parent_data: Any = None) -> Any:
        """Render data directly into node, keeping its id attributes."""
        return self.render(data, node, parent_data, in_place=True)

    def render_clone(self, data: Any, node: Any, parent_data: Any = None) -> Any:
        """Clone node without its id, render data into the clone and return it."""
        self.annotations.prime(node)
        clone = self.clone_node(node)
        self.tree.remove_attribute(clone, "id")
        return self.render(data, clone, parent_data, in_place=False)

    def render(self, data: Any, node: Any, parent_data: Any = None, in_place: bool = True) -> Any:
        parent = self.contexts.create(parent_data) if parent_data is not None else None
        context = self.contexts.create(data, parent)
        try:
            self.render_context(context, node, in_place)
        finally:
            self.contexts.recycle(context)
            if parent is not None:
                self.contexts.recycle(parent)
        return node

    def render_context(self, context: EvalContext, node: Any, in_place: bool = True) -> Any:
        """Render with a context built by engine.contexts.create()."""
        self.annotations.prime(node)
        binder = Binder(self, in_place)
        binder.run(context, node)
        logger.debug(f"Rendered {node!r}: {binder.stack.executed} steps, depth {binder.stack.max_depth}")
        return node

    def get_template(self, identity: str) -> TemplateHandle:
        """Handle that renders the document's template node in place."""
        return TemplateHandle(self, self.registry.find(identity), in_place=True)

    def clone_template(self, identity: str, loader: Optional[Loader] = None) -> TemplateHandle:
        """Handle that renders a fresh clone of the template."""
        return TemplateHandle(self, self.registry.resolve(identity, loader), in_place=False)

    def clone_node(self, node: Any) -> Any:
        """Deep copy node, carrying its compiled bindings and records along."""
        clone = self.tree.clone(node)
        self.store.copy_subtree(node, clone)
        return clone

    def remove_node(self, node: Any) -> None:
        self.store.forget(node)
        self.tree.remove(node)

    def release(self, node: Any) -> None:
        """
        Drop the records kept for node and its subtree.

        Call this once a tree returned by render_clone, clone_template or
        a handle is no longer rendered, so the engine stops holding it.
        """
        self.store.forget(node)

    def add_callback(self, node: Any, callback: Callback) -> None:
        """Call callback(context, node) every time node is processed."""
        self.store.record(node).callbacks.append(callback)

    def remove_callbacks(self, node: Any) -> None:
        record = self.store.get(node)
        if record is not None:
            record.callbacks.clear()

    def node_data(self, node: Any) -> Dict[str, Any]:
        """Auxiliary values attached to node by its data binding."""
        return self.store.record(node).data

    def node_properties(self, node: Any) -> Dict[str, Any]:
        """Values assigned to node through .property paths."""
        return self.store.record(node).properties

    def instance_of(self, node: Any) -> Optional[InstanceMarker]:
        record = self.store.get(node)
        return record.instance if record is not None else None

    def clear_caches(self) -> None:
        """Forget compiled expressions, annotation sets and node records."""
        self.compiler.clear()
        self.annotations.clear()
        self.store.clear()
