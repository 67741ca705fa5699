"""Tests for evaluation contexts and the context factory."""

import logging

import pytest

from jstemplate.template import ContextFactory, ExpressionCompiler, default_globals


@pytest.fixture
def factory():
    return ContextFactory(ExpressionCompiler(), default_globals())


class TestScopes:

    def test_root_context_variables(self, factory):
        data = {"a": 1}
        root = factory.create(data)
        assert root.get_variable("$this") is data
        assert root.get_variable("$top") is data
        assert root.get_variable("$context") is root
        assert root.data is data

    def test_child_context(self, factory):
        root = factory.create({"items": ["x", "y"]})
        child = root.clone("y", 1, 2)
        assert child.get_variable("$this") == "y"
        assert child.get_variable("$index") == 1
        assert child.get_variable("$length") == 2
        assert child.get_variable("$top") == {"items": ["x", "y"]}
        assert child.get_variable("$context") is child

    def test_child_variables_do_not_leak(self, factory):
        root = factory.create({})
        root.set_variable("$shared", 1)
        child = root.clone({}, 0, 1)
        child.set_variable("$local", 2)
        assert child.get_variable("$shared") == 1
        assert root.get_variable("$local") is None

    def test_none_data_becomes_empty_string(self, factory):
        assert factory.create(None).data == ""

    def test_globals_are_visible(self, factory):
        factory.set_global("$site", "shop")
        context = factory.create({})
        assert context.evaluate("$site + '!'") == "shop!"
        assert context.evaluate("currency(5)") == "$5.00"

    def test_evaluate_against_child(self, factory):
        child = factory.create({}).clone({"name": "Ann"}, 2, 3)
        assert child.evaluate("$index + 1") == 3
        assert child.evaluate("name") == "Ann"


class TestDefaults:
    """Failing expressions degrade to $default."""

    def test_missing_value_returns_default(self, factory):
        assert factory.create({}).evaluate("$this.missing") is None

    def test_configured_default(self):
        factory = ContextFactory(ExpressionCompiler(), default_globals("N/A"))
        assert factory.default == "N/A"
        assert factory.create({}).evaluate("$this.missing") == "N/A"

    def test_none_evaluator_returns_default(self, factory):
        assert factory.create({}).execute(None) is None

    def test_runtime_error_logged_as_warning(self, factory, caplog):
        with caplog.at_level(logging.WARNING):
            assert factory.create({}).evaluate("1 / 0") is None
        assert any(record.levelno == logging.WARNING for record in caplog.records)

    def test_missing_value_not_logged_as_warning(self, factory, caplog):
        with caplog.at_level(logging.WARNING):
            factory.create({}).evaluate("$this.missing")
        assert not caplog.records


class TestPooling:

    def test_recycled_context_is_reused(self, factory):
        context = factory.create({"a": 1})
        factory.recycle(context)
        assert factory.pooled == 1
        reused = factory.create({"b": 2})
        assert reused is context
        assert factory.pooled == 0

    def test_recycled_context_is_cleared(self, factory):
        context = factory.create({})
        context.set_variable("$old", 1)
        factory.recycle(context)
        reused = factory.create({"b": 2})
        assert reused.get_variable("$old") is None
        assert reused.data == {"b": 2}

    def test_pooling_disabled(self):
        factory = ContextFactory(ExpressionCompiler(), pooling=False)
        context = factory.create({})
        factory.recycle(context)
        assert factory.pooled == 0
        assert factory.create({}) is not context
