"""Shared fixtures for the jstemplate test suites."""

import pytest

from jstemplate import EngineConfig, LxmlTree, TemplateEngine


@pytest.fixture
def tree():
    """LxmlTree adapter."""
    return LxmlTree()


@pytest.fixture
def engine(tree):
    """TemplateEngine with the default configuration."""
    return TemplateEngine(tree, EngineConfig())


@pytest.fixture
def fragment():
    """Parse a single-element HTML fragment."""
    return LxmlTree.parse_fragment


@pytest.fixture
def document():
    """Parse a complete HTML document."""
    return LxmlTree.parse_document
