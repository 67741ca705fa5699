"""Configuration loading modules."""

from .settings import EngineConfig
from .loaders import ConfigLoader, TemplateLoader, DataLoader

__all__ = ["EngineConfig", "ConfigLoader", "TemplateLoader", "DataLoader"]
