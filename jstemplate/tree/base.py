"""
The tree primitives the engine relies on.

The engine never touches nodes directly; everything goes through a
TreeAdapter so any host tree with identity-stable nodes can be rendered.
"""

from abc import ABC, abstractmethod
from typing import Any, Hashable, Iterator, List, Optional


class TreeAdapter(ABC):
    """Abstract tree manipulation API."""

    @abstractmethod
    def node_key(self, node: Any) -> Hashable:
        """Return a key that identifies the node for as long as it lives."""

    @abstractmethod
    def is_node(self, value: Any) -> bool:
        """Return True if value is a node of this tree."""

    @abstractmethod
    def parent(self, node: Any) -> Optional[Any]:
        """Parent of node, or None for a detached or root node."""

    @abstractmethod
    def children(self, node: Any) -> List[Any]:
        """Element children of node, in document order."""

    @abstractmethod
    def iter_subtree(self, node: Any) -> Iterator[Any]:
        """Node and its element descendants, in document order."""

    @abstractmethod
    def get_attribute(self, node: Any, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_attribute(self, node: Any, name: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_attribute(self, node: Any, name: str) -> None:
        pass

    @abstractmethod
    def clone(self, node: Any) -> Any:
        """Deep copy of node, detached from any parent."""

    @abstractmethod
    def insert_before(self, node: Any, reference: Any) -> None:
        """Insert node as the previous sibling of reference."""

    @abstractmethod
    def insert_after(self, node: Any, reference: Any) -> None:
        """Insert node as the next sibling of reference."""

    @abstractmethod
    def replace(self, old: Any, new: Any) -> None:
        """Put new where old is and detach old."""

    @abstractmethod
    def remove(self, node: Any) -> None:
        """Detach node from its parent."""

    @abstractmethod
    def get_content(self, node: Any) -> str:
        """Serialized content of node (its inner markup)."""

    @abstractmethod
    def set_content(self, node: Any, value: Any) -> None:
        """Replace the content of node with value."""

    @abstractmethod
    def show(self, node: Any) -> None:
        pass

    @abstractmethod
    def hide(self, node: Any) -> None:
        pass

    @abstractmethod
    def is_hidden(self, node: Any) -> bool:
        pass

    @abstractmethod
    def find_by_id(self, scope: Any, identity: str) -> Optional[Any]:
        """Find the node with the given id in the document containing scope."""

    @abstractmethod
    def create_element(self, tag: str) -> Any:
        pass

    @abstractmethod
    def append_child(self, parent: Any, child: Any) -> None:
        pass

    @abstractmethod
    def body_of(self, scope: Any) -> Any:
        """The node new top-level content is appended to."""

    @abstractmethod
    def to_string(self, node: Any) -> str:
        """Serialize node, including itself."""
