"""Engine settings and their defaults."""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass
class EngineConfig:
    """Tunable engine parameters."""

    # Binding attributes are this prefix plus the binding name
    attribute_prefix: str = "data-jst-"
    # $default: what a failing expression evaluates to
    default_value: Any = None
    # Reuse recycled evaluation contexts
    pool_contexts: bool = True
    # Recompile source that failed to parse on every request instead of caching the failure
    retry_failed_compiles: bool = False
    # Hidden container that loaded template markup is parked in
    template_container_id: str = "js-templates"
    # Leading character of a literal include reference
    literal_marker: str = "#"

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> "EngineConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        values = values or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown engine config keys: {', '.join(unknown)}")
        return cls(**values)
