"""Binding interpretation and rendering modules."""

from .annotations import AnnotationSet, AnnotationCache, Transclusion, EMPTY, BINDINGS
from .nodestore import InstanceMarker, NodeRecord, NodeStore
from .traversal import WorkStack
from .reconciler import Reconciler
from .binder import Binder
from .registry import TemplateRegistry
from .processor import TemplateEngine, TemplateHandle

__all__ = [
    "AnnotationSet",
    "AnnotationCache",
    "Transclusion",
    "EMPTY",
    "BINDINGS",
    "InstanceMarker",
    "NodeRecord",
    "NodeStore",
    "WorkStack",
    "Reconciler",
    "Binder",
    "TemplateRegistry",
    "TemplateEngine",
    "TemplateHandle",
]
