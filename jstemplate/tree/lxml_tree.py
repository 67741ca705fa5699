"""
TreeAdapter over lxml.html elements.

Content is the inner HTML of an element and visibility is the HTML
"hidden" attribute. Text that trails an element (its lxml tail) stays
in the document when the element is removed or replaced.
"""

import copy
from html import escape
from typing import Any, Iterator, List, Optional

from lxml import etree
from lxml import html as lxml_html

from ..template.functions import stringify
from .base import TreeAdapter

HIDDEN_ATTRIBUTE = "hidden"


def _root_of(scope: Any) -> Any:
    if hasattr(scope, "getroot"):
        return scope.getroot()
    return scope.getroottree().getroot()


def _append_text(node: Any, text: str) -> None:
    if len(node):
        last = node[-1]
        last.tail = (last.tail or "") + text
    else:
        node.text = (node.text or "") + text


class LxmlTree(TreeAdapter):
    """Tree primitives for lxml elements."""

    @staticmethod
    def parse_document(markup: str) -> Any:
        """Parse a complete HTML document and return its root element."""
        return lxml_html.document_fromstring(markup)

    @staticmethod
    def parse_fragment(markup: str, create_parent: bool = False) -> Any:
        """Parse markup holding a single element (or wrap several in a div) into a detached element."""
        element = lxml_html.fragment_fromstring(markup, create_parent="div" if create_parent else False)
        # Some lxml releases leave the fragment inside a synthetic html/body
        parent = element.getparent()
        if parent is not None:
            parent.remove(element)
        return element

    def node_key(self, node: Any) -> Any:
        # lxml keeps one proxy per element while a reference is held
        return node

    def is_node(self, value: Any) -> bool:
        return etree.iselement(value)

    def parent(self, node: Any) -> Optional[Any]:
        return node.getparent()

    def children(self, node: Any) -> List[Any]:
        return [child for child in node if isinstance(child.tag, str)]

    def iter_subtree(self, node: Any) -> Iterator[Any]:
        return node.iter(etree.Element)

    def get_attribute(self, node: Any, name: str) -> Optional[str]:
        return node.get(name)

    def set_attribute(self, node: Any, name: str, value: str) -> None:
        node.set(name, value)

    def remove_attribute(self, node: Any, name: str) -> None:
        node.attrib.pop(name, None)

    def clone(self, node: Any) -> Any:
        copied = copy.deepcopy(node)
        copied.tail = None
        return copied

    def insert_before(self, node: Any, reference: Any) -> None:
        reference.addprevious(node)

    def insert_after(self, node: Any, reference: Any) -> None:
        reference.addnext(node)

    def replace(self, old: Any, new: Any) -> None:
        parent = old.getparent()
        if parent is None:
            raise ValueError(f"Cannot replace detached element <{old.tag}>")
        new.tail, old.tail = old.tail, None
        parent.replace(old, new)

    def remove(self, node: Any) -> None:
        parent = node.getparent()
        if parent is None:
            return
        if node.tail:
            previous = node.getprevious()
            if previous is not None:
                previous.tail = (previous.tail or "") + node.tail
            else:
                parent.text = (parent.text or "") + node.tail
            node.tail = None
        parent.remove(node)

    def get_content(self, node: Any) -> str:
        parts = [escape(node.text, quote=False)] if node.text else []
        parts.extend(lxml_html.tostring(child, encoding="unicode") for child in node)
        return "".join(parts)

    def set_content(self, node: Any, value: Any) -> None:
        for child in list(node):
            node.remove(child)
        node.text = None

        if value is None:
            return
        if self.is_node(value):
            node.append(value)
            return
        if not isinstance(value, str):
            node.text = stringify(value)
            return
        if '<' not in value and '&' not in value:
            node.text = value or None
            return

        for fragment in lxml_html.fragments_fromstring(value):
            if isinstance(fragment, str):
                _append_text(node, fragment)
            else:
                node.append(fragment)

    def show(self, node: Any) -> None:
        node.attrib.pop(HIDDEN_ATTRIBUTE, None)

    def hide(self, node: Any) -> None:
        node.set(HIDDEN_ATTRIBUTE, HIDDEN_ATTRIBUTE)

    def is_hidden(self, node: Any) -> bool:
        return node.get(HIDDEN_ATTRIBUTE) is not None

    def find_by_id(self, scope: Any, identity: str) -> Optional[Any]:
        matches = _root_of(scope).xpath("//*[@id=$identity]", identity=identity)
        return matches[0] if matches else None

    def create_element(self, tag: str) -> Any:
        return lxml_html.Element(tag)

    def append_child(self, parent: Any, child: Any) -> None:
        parent.append(child)

    def body_of(self, scope: Any) -> Any:
        root = _root_of(scope)
        if root.tag == "body":
            return root
        body = root.find(".//body")
        return body if body is not None else root

    def to_string(self, node: Any) -> str:
        return lxml_html.tostring(node, encoding="unicode", with_tail=False)
