"""Tests for the lxml tree adapter and the node side table."""

import pytest

from jstemplate import LxmlTree
from jstemplate.rendering import InstanceMarker, NodeStore


class TestLxmlTree:

    def test_children_skip_comments(self, tree, fragment):
        root = fragment("<div><!-- note --><p></p><span></span></div>")
        assert [child.tag for child in tree.children(root)] == ["p", "span"]

    def test_clone_drops_tail(self, tree, fragment):
        root = fragment("<div><p>a</p> after</div>")
        clone = tree.clone(root.find("p"))
        assert clone.text == "a"
        assert clone.tail is None

    def test_remove_keeps_trailing_text(self, tree, fragment):
        root = fragment("<div>start<p>x</p> middle<b>y</b> end</div>")
        tree.remove(root.find("p"))
        assert root.text == "start middle"
        tree.remove(root.find("b"))
        assert root.text == "start middle end"

    def test_parse_fragment_is_detached(self, tree, fragment):
        node = fragment("<p></p>")
        assert node.getparent() is None
        assert tree.parent(node) is None
        wrapped = LxmlTree.parse_fragment("<p></p><b></b>", create_parent=True)
        assert wrapped.tag == "div"
        assert wrapped.getparent() is None

    def test_remove_detached_is_noop(self, tree, fragment):
        tree.remove(fragment("<p></p>"))

    def test_replace_moves_tail(self, tree, fragment):
        root = fragment("<div><p>old</p> tail</div>")
        new = tree.create_element("em")
        tree.replace(root.find("p"), new)
        assert root[0] is new
        assert new.tail == " tail"

    def test_replace_detached(self, tree, fragment):
        with pytest.raises(ValueError):
            tree.replace(fragment("<p></p>"), tree.create_element("em"))

    def test_insert_before_and_after(self, tree, fragment):
        root = fragment("<ul><li>b</li></ul>")
        middle = root[0]
        first, last = tree.create_element("li"), tree.create_element("li")
        tree.insert_before(first, middle)
        tree.insert_after(last, middle)
        assert list(root) == [first, middle, last]

    def test_content_round_trip(self, tree, fragment):
        node = fragment("<div></div>")
        tree.set_content(node, "a &amp; <i>b</i>")
        assert node.find("i").text == "b"
        assert tree.get_content(node) == "a &amp; <i>b</i>"

    def test_plain_text_content(self, tree, fragment):
        node = fragment("<div><span></span></div>")
        tree.set_content(node, "plain")
        assert len(node) == 0
        assert tree.get_content(node) == "plain"
        tree.set_content(node, None)
        assert tree.get_content(node) == ""

    def test_visibility(self, tree, fragment):
        node = fragment("<p></p>")
        tree.hide(node)
        assert node.get("hidden") == "hidden"
        assert tree.is_hidden(node)
        tree.show(node)
        assert not tree.is_hidden(node)

    def test_find_by_id_and_body(self, tree, document):
        page = document('<html><body><div><p id="x"></p></div></body></html>')
        inner = page.find(".//div")
        assert tree.find_by_id(inner, "x").tag == "p"
        assert tree.find_by_id(page, "missing") is None
        assert tree.body_of(inner).tag == "body"


class TestNodeStore:

    def test_record_created_on_demand(self, tree, fragment):
        store = NodeStore(tree)
        node = fragment("<p></p>")
        assert store.get(node) is None
        store.set_instance(node, 2, True)
        assert node in store
        assert store.get(node).instance == InstanceMarker(2, True)

    def test_forget_subtree(self, tree, fragment):
        store = NodeStore(tree)
        root = fragment("<div><p></p></div>")
        store.record(root)
        store.record(root[0])
        store.forget(root)
        assert len(store) == 0

    def test_copy_subtree(self, tree, fragment):
        store = NodeStore(tree)
        root = fragment("<div><p></p><span></span></div>")
        store.record(root[1]).properties["meta"] = {"id": 1}
        store.record(root[1]).callbacks.append(print)

        clone = tree.clone(root)
        store.copy_subtree(root, clone)

        copied = store.get(clone[1])
        assert copied.callbacks == [print]
        assert copied.properties == {"meta": {"id": 1}}
        assert store.get(clone[0]) is None

        copied.properties["meta"]["id"] = 2
        assert store.get(root[1]).properties["meta"]["id"] == 1
