"""
Configuration, template markup and data loaders.

Handles loading of the engine config, of template markup files used to
fill the template registry, and of JSON data to render.
"""

import json
from pathlib import Path
from typing import Any, List

from .settings import EngineConfig


class ConfigLoader:
    """Loads engine configuration files."""

    def __init__(self, config_dir: str = "configs"):
        self.config_dir = Path(config_dir)

    def load_engine(self, name: str = "engine") -> EngineConfig:
        """Load an engine configuration by name."""
        config_file = self.config_dir / f"{name}.json"
        if not config_file.exists():
            raise FileNotFoundError(f"Engine config not found: {name}")

        with open(config_file) as f:
            values = json.load(f)
        if not isinstance(values, dict):
            raise ValueError(f"Engine config '{name}' must be a JSON object")
        return EngineConfig.from_dict(values)


class TemplateLoader:
    """
    Loads template markup from <name>.html files.

    An instance can be passed to the engine as its registry loader; it is
    called with the id of a template missing from the document.
    """

    def __init__(self, template_dir: str = "templates"):
        self.template_dir = Path(template_dir)

    def load_markup(self, name: str) -> str:
        template_file = self.template_dir / f"{name}.html"
        if not template_file.exists():
            raise FileNotFoundError(f"Template not found: {name}")
        return template_file.read_text(encoding="utf-8")

    def __call__(self, name: str) -> str:
        return self.load_markup(name)

    def get_available_templates(self) -> List[str]:
        """Get list of all template names with a markup file."""
        return sorted(file.stem for file in self.template_dir.glob("*.html"))


class DataLoader:
    """Loads JSON data documents to render."""

    def __init__(self, data_dir: str = "."):
        self.data_dir = Path(data_dir)

    def load(self, filename: str) -> Any:
        data_file = self.data_dir / filename
        if not data_file.exists():
            raise FileNotFoundError(f"Data file not found: {filename}")

        with open(data_file) as f:
            return json.load(f)
