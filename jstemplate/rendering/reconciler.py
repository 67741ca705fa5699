"""
List and optional bindings (the select attribute).

A node bound to a list is multiplied into one instance per item. Each
instance carries an InstanceMarker so a later render with a different
list reuses existing instances, clones new ones after the last instance
and removes the ones past the end.
"""

import logging
from collections.abc import Sequence
from typing import Any, List, Tuple, TYPE_CHECKING

from ..template.context import EvalContext
from ..template.engine import Evaluator

if TYPE_CHECKING:
    from .binder import Binder

logger = logging.getLogger(__name__)


def is_list_like(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


class Reconciler:
    """Applies select bindings for one render."""

    def __init__(self, binder: "Binder"):
        self.binder = binder
        self.tree = binder.tree
        self.store = binder.store

    def select(self, context: EvalContext, node: Any, evaluator: Evaluator) -> None:
        value = context.execute(evaluator, node)
        record = self.store.get(node)
        marker = record.instance if record is not None else None

        if not is_list_like(value):
            if value is None:
                self.tree.hide(node)
                return
            self.tree.show(node)
            self._enqueue([(node, context.clone(value, 0, 1))])
            return

        count = len(value)
        if count == 0:
            if marker is None or marker.index == 0:
                self.store.set_instance(node, 0, True)
                self.tree.hide(node)
            else:
                self.binder.remove_node(node)
            return

        self.tree.show(node)
        if marker is None:
            work = self._first_render(context, node, value)
        elif marker.last and marker.index < count - 1:
            work = self._grow(context, node, value, marker.index)
        elif marker.index < count:
            index = marker.index
            self.store.set_instance(node, index, index == count - 1)
            work = [(node, context.clone(value[index], index, count))]
        else:
            self.binder.remove_node(node)
            return
        self._enqueue(work)

    def _first_render(self, context: EvalContext, node: Any, items: Sequence) -> List[Tuple[Any, EvalContext]]:
        # Clones go before the template node, which becomes the last instance
        count = len(items)
        work = []
        for index in range(count - 1):
            clone = self.binder.clone_node(node)
            self.tree.insert_before(clone, node)
            self.store.set_instance(clone, index, False)
            work.append((clone, context.clone(items[index], index, count)))
        self.store.set_instance(node, count - 1, True)
        work.append((node, context.clone(items[count - 1], count - 1, count)))
        return work

    def _grow(self, context: EvalContext, node: Any, items: Sequence, start: int) -> List[Tuple[Any, EvalContext]]:
        # The old last instance keeps its position; new instances follow it
        count = len(items)
        logger.debug(f"Growing list instances {start + 1}..{count - 1}")
        self.store.set_instance(node, start, False)
        work = [(node, context.clone(items[start], start, count))]
        previous = node
        for index in range(start + 1, count):
            clone = self.binder.clone_node(node)
            self.tree.insert_after(clone, previous)
            self.store.set_instance(clone, index, index == count - 1)
            work.append((clone, context.clone(items[index], index, count)))
            previous = clone
        return work

    def _enqueue(self, work: List[Tuple[Any, EvalContext]]) -> None:
        queue = []
        for node, item_context in work:
            queue.append((self.binder.inner, item_context, node))
            queue.append((self.binder.recycle, item_context, None))
        self.binder.stack.push(queue)
