"""
Per-node engine metadata kept beside the tree.

Annotation sets, list instance markers, auxiliary data, property paths
and callbacks live in a side table keyed by TreeAdapter.node_key, so the
tree itself only ever carries the template's own attributes.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..tree import TreeAdapter
    from .annotations import AnnotationSet


@dataclass(frozen=True)
class InstanceMarker:
    """Position of a multiplied node within its list."""

    index: int
    last: bool


def _copy_nested(values: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: _copy_nested(value) if isinstance(value, dict) else value
        for key, value in values.items()
    }


@dataclass
class NodeRecord:
    annotations: Optional["AnnotationSet"] = None
    instance: Optional[InstanceMarker] = None
    data: Dict[str, Any] = field(default_factory=dict)
    properties: Dict[str, Any] = field(default_factory=dict)
    callbacks: List[Callable] = field(default_factory=list)

    def copy(self) -> "NodeRecord":
        return NodeRecord(
            annotations=self.annotations,
            instance=self.instance,
            data=dict(self.data),
            properties=_copy_nested(self.properties),
            callbacks=list(self.callbacks),
        )


class NodeStore:
    """Side table of NodeRecords for one engine."""

    def __init__(self, tree: "TreeAdapter"):
        self.tree = tree
        self._records: Dict[Any, NodeRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, node: Any) -> bool:
        return self.tree.node_key(node) in self._records

    def get(self, node: Any) -> Optional[NodeRecord]:
        return self._records.get(self.tree.node_key(node))

    def record(self, node: Any) -> NodeRecord:
        """Return the record for node, creating an empty one if needed."""
        key = self.tree.node_key(node)
        record = self._records.get(key)
        if record is None:
            record = self._records[key] = NodeRecord()
        return record

    def set_instance(self, node: Any, index: int, last: bool) -> None:
        self.record(node).instance = InstanceMarker(index, last)

    def forget(self, node: Any) -> None:
        """Drop the records of node and all its descendants."""
        for member in self.tree.iter_subtree(node):
            self._records.pop(self.tree.node_key(member), None)

    def copy_subtree(self, source: Any, target: Any) -> None:
        """
        Carry the records of a subtree over to its clone.

        The clone must have the same shape as the source; nodes are paired
        up in document order.
        """
        for original, copied in zip(self.tree.iter_subtree(source), self.tree.iter_subtree(target)):
            record = self._records.get(self.tree.node_key(original))
            if record is not None:
                self._records[self.tree.node_key(copied)] = record.copy()

    def clear(self) -> None:
        self._records.clear()
