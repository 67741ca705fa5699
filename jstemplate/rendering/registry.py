"""
Template lookup by id.

Templates are ordinary nodes with an id somewhere in the document. A
loader can supply markup for templates that are not in the document yet;
that markup is parked in a hidden container so later lookups find it.
"""

import logging
from typing import Any, Callable, Optional, TYPE_CHECKING

from ..errors import TemplateNotFoundError
from ..template.functions import stringify

if TYPE_CHECKING:
    from .processor import TemplateEngine

logger = logging.getLogger(__name__)

# Called with the missing template id, returns markup containing it
Loader = Callable[[str], str]


class TemplateRegistry:
    """Resolves template ids to fresh, render-ready clones."""

    def __init__(
        self,
        engine: "TemplateEngine",
        document: Any = None,
        loader: Optional[Loader] = None,
        container_id: str = "js-templates",
    ):
        self.engine = engine
        self.tree = engine.tree
        self.document = document
        self.loader = loader
        self.container_id = container_id

    def find(self, reference: str, scope: Any = None) -> Optional[Any]:
        """Return the template node itself (not a clone), or None."""
        root = self.document if self.document is not None else scope
        if root is None:
            return None
        return self.tree.find_by_id(root, reference)

    def resolve(self, reference: Any, loader: Optional[Loader] = None, scope: Any = None) -> Optional[Any]:
        """
        Resolve a template id to a clone of the template node.

        Args:
            reference: Template id; None or empty resolves to None
            loader: Markup loader for ids not in the document (defaults
                to the registry's loader)
            scope: Node whose document is searched when the registry has
                no document of its own

        Returns:
            A clone without an id attribute, or None if not found
        """
        if reference is None or reference == "":
            return None
        reference = stringify(reference)
        root = self.document if self.document is not None else scope
        if root is None:
            logger.warning(f"No document to resolve template {reference!r} in")
            return None

        section = self.tree.find_by_id(root, reference)
        loader = loader or self.loader
        if section is None and loader is not None:
            section = self._load(root, reference, loader)
        if section is None:
            return None

        self.engine.annotations.prime(section)
        clone = self.engine.clone_node(section)
        self.tree.remove_attribute(clone, "id")
        return clone

    def resolve_or_fail(self, reference: Any, loader: Optional[Loader] = None, scope: Any = None) -> Any:
        """Like resolve, but a missing template is an error."""
        clone = self.resolve(reference, loader, scope)
        if clone is None:
            raise TemplateNotFoundError(stringify(reference))
        return clone

    def _load(self, root: Any, reference: str, loader: Loader) -> Optional[Any]:
        try:
            markup = loader(reference)
        except Exception:
            logger.exception(f"Template loader failed for {reference!r}")
            return None

        container = self.tree.find_by_id(root, self.container_id)
        if container is None:
            container = self.tree.create_element("div")
            self.tree.set_attribute(container, "id", self.container_id)
            self.tree.hide(container)
            self.tree.append_child(self.tree.body_of(root), container)

        wrapper = self.tree.create_element("div")
        self.tree.append_child(container, wrapper)
        self.tree.set_content(wrapper, markup)

        section = self.tree.find_by_id(root, reference)
        if section is None:
            logger.error(f"Template loader did not provide the id {reference!r}")
        return section
