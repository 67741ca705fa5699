"""Tests for list and optional bindings (data-jst-select)."""

import pytest

from jstemplate.rendering import InstanceMarker


def child_texts(node, tag):
    return [child.text for child in node.findall(tag)]


LIST_TEMPLATE = '<ul><li data-jst-select="$this.items" data-jst-content="$this"></li></ul>'

POSITION_TEMPLATE = (
    '<ul><li data-jst-select="items"'
    ' data-jst-values="data-index=$index | data-length=$length"'
    ' data-jst-content="$this.name"></li></ul>'
)


@pytest.fixture
def list_root(fragment):
    return fragment(LIST_TEMPLATE)


class TestFirstRender:

    def test_one_instance_per_item(self, engine, list_root):
        engine.render_in_place({"items": ["a", "b", "c"]}, list_root)
        assert child_texts(list_root, "li") == ["a", "b", "c"]

    def test_instance_markers(self, engine, list_root):
        engine.render_in_place({"items": ["a", "b", "c"]}, list_root)
        markers = [engine.instance_of(li) for li in list_root.findall("li")]
        assert markers == [InstanceMarker(0, False), InstanceMarker(1, False), InstanceMarker(2, True)]

    def test_index_and_length(self, engine, fragment):
        root = fragment(POSITION_TEMPLATE)
        engine.render_in_place({"items": [{"name": "a"}, {"name": "b"}]}, root)
        items = root.findall("li")
        assert [li.get("data-index") for li in items] == ["0", "1"]
        assert [li.get("data-length") for li in items] == ["2", "2"]

    def test_template_node_becomes_last_instance(self, engine, list_root):
        template = list_root.find("li")
        engine.render_in_place({"items": ["a", "b"]}, list_root)
        assert list_root.findall("li")[-1] is template


class TestRerender:

    def test_growth_keeps_existing_instances(self, engine, list_root):
        engine.render_in_place({"items": ["a", "b", "c"]}, list_root)
        before = list_root.findall("li")

        engine.render_in_place({"items": ["a", "b", "c", "d"]}, list_root)
        after = list_root.findall("li")

        assert child_texts(list_root, "li") == ["a", "b", "c", "d"]
        assert len(after) == 4
        assert all(old is new for old, new in zip(before, after[:3]))
        assert engine.instance_of(after[2]) == InstanceMarker(2, False)
        assert engine.instance_of(after[3]) == InstanceMarker(3, True)

    def test_growth_from_single_item(self, engine, list_root):
        engine.render_in_place({"items": ["a"]}, list_root)
        first = list_root.find("li")
        engine.render_in_place({"items": ["x", "y", "z"]}, list_root)
        assert child_texts(list_root, "li") == ["x", "y", "z"]
        assert list_root.find("li") is first

    def test_positions_after_growth(self, engine, fragment):
        root = fragment(POSITION_TEMPLATE)
        engine.render_in_place({"items": [{"name": "a"}, {"name": "b"}]}, root)
        first, second = root.findall("li")

        engine.render_in_place({"items": [{"name": "a"}, {"name": "b"}, {"name": "c"}]}, root)
        items = root.findall("li")

        assert items[0] is first and items[1] is second
        assert [li.text for li in items] == ["a", "b", "c"]
        assert items[2].get("data-index") == "2"
        assert [li.get("data-length") for li in items] == ["3", "3", "3"]

    def test_shrink(self, engine, list_root):
        engine.render_in_place({"items": ["a", "b", "c", "d"]}, list_root)
        before = list_root.findall("li")
        engine.render_in_place({"items": ["x", "y"]}, list_root)
        after = list_root.findall("li")
        assert child_texts(list_root, "li") == ["x", "y"]
        assert after[0] is before[0] and after[1] is before[1]
        assert engine.instance_of(after[1]) == InstanceMarker(1, True)

    def test_shrink_to_empty_leaves_hidden_placeholder(self, engine, tree, list_root):
        engine.render_in_place({"items": ["a", "b", "c", "d", "e"]}, list_root)
        engine.render_in_place({"items": []}, list_root)
        remaining = list_root.findall("li")
        assert len(remaining) == 1
        assert tree.is_hidden(remaining[0])

    def test_empty_then_refill(self, engine, tree, list_root):
        engine.render_in_place({"items": ["a", "b"]}, list_root)
        engine.render_in_place({"items": []}, list_root)
        engine.render_in_place({"items": ["p", "q", "r"]}, list_root)
        items = list_root.findall("li")
        assert child_texts(list_root, "li") == ["p", "q", "r"]
        assert not any(tree.is_hidden(li) for li in items)

    def test_removed_instances_are_forgotten(self, engine, list_root):
        engine.render_in_place({"items": ["a", "b", "c"]}, list_root)
        removed = list_root.findall("li")[1:]
        engine.render_in_place({"items": ["a"]}, list_root)
        assert all(li not in engine.store for li in removed)

    def test_rerender_with_same_list_is_stable(self, engine, tree, list_root):
        data = {"items": ["a", "b", "c"]}
        engine.render_in_place(data, list_root)
        first = tree.to_string(list_root)
        engine.render_in_place(data, list_root)
        assert tree.to_string(list_root) == first


class TestOptionalSelect:
    """A non-list select value renders the node once or hides it."""

    TEMPLATE = '<div><p data-jst-select="$this.user" data-jst-content="$this.name"></p></div>'

    def test_object_value(self, engine, tree, fragment):
        root = fragment(self.TEMPLATE)
        engine.render_in_place({"user": {"name": "Ann"}}, root)
        node = root.find("p")
        assert node.text == "Ann"
        assert not tree.is_hidden(node)

    def test_null_value_hides(self, engine, tree, fragment):
        root = fragment(self.TEMPLATE)
        engine.render_in_place({"user": None}, root)
        assert tree.is_hidden(root.find("p"))

    def test_missing_value_hides(self, engine, tree, fragment):
        root = fragment(self.TEMPLATE)
        engine.render_in_place({}, root)
        assert tree.is_hidden(root.find("p"))

    def test_value_reappears(self, engine, tree, fragment):
        root = fragment(self.TEMPLATE)
        engine.render_in_place({"user": None}, root)
        engine.render_in_place({"user": {"name": "Bo"}}, root)
        node = root.find("p")
        assert node.text == "Bo"
        assert not tree.is_hidden(node)

    def test_string_is_not_a_list(self, engine, fragment):
        root = fragment('<div><p data-jst-select="$this.word" data-jst-content="$this"></p></div>')
        engine.render_in_place({"word": "abc"}, root)
        assert child_texts(root, "p") == ["abc"]
