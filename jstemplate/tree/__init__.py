"""Tree manipulation adapters."""

from .base import TreeAdapter
from .lxml_tree import LxmlTree

__all__ = ["TreeAdapter", "LxmlTree"]
