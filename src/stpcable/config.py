"""Reconstruction settings and their YAML loader.

Settings can be passed explicitly, loaded from a YAML mapping, or picked
up from the file named by the ``STPCABLE_CONFIG`` environment variable.

Example file::

    tolerance: 0.1
    maxDistanceBetweenPoints: 0.05
    attachSegments: true
    min_centerline_points: 20
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

# Environment variable naming a YAML settings file
STPCABLE_CONFIG = "STPCABLE_CONFIG"

# camelCase spellings accepted alongside the field names
_ALIASES = {
    "maxDistanceBetweenPoints": "max_distance_between_points",
    "attachSegments": "attach_segments",
    "parallelTolerance": "parallel_tolerance",
    "pointEpsilon": "point_epsilon",
    "requireForwardHit": "require_forward_hit",
    "minCenterlinePoints": "min_centerline_points",
    "minRailSplines": "min_rail_splines",
    "localityWindow": "locality_window",
    "maxChainIterations": "max_chain_iterations",
}

_POSITIVE = (
    "tolerance",
    "parallel_tolerance",
    "point_epsilon",
    "max_distance_between_points",
    "max_chain_iterations",
)
_NON_NEGATIVE = ("min_centerline_points", "min_rail_splines", "locality_window")


@dataclass(frozen=True)
class ReconstructionConfig:
    """Geometric thresholds for cable reconstruction.

    All distances are in file units (millimetres for typical exports).
    """

    tolerance: float = 0.1
    parallel_tolerance: float = 0.01
    point_epsilon: float = 0.00001
    max_distance_between_points: float = 0.1
    attach_segments: bool = False
    require_forward_hit: bool = True
    min_centerline_points: int = 50
    min_rail_splines: int = 3
    locality_window: int = 4
    max_chain_iterations: int = 300

    def __post_init__(self) -> None:
        for name in _POSITIVE:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        for name in _NON_NEGATIVE:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ReconstructionConfig":
        """Build a config from a mapping of field names (or camelCase aliases)."""
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        unknown = []
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            values[name] = _coerce(known[name].type, name, value)
        if unknown:
            raise ValueError(f"unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**values)

    def replace(self, **overrides: Any) -> "ReconstructionConfig":
        """Return a copy with ``overrides`` applied; ``None`` values are ignored."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _coerce(type_name: Any, name: str, value: Any) -> Any:
    # annotations are strings under ``from __future__ import annotations``
    type_name = getattr(type_name, "__name__", type_name)
    if type_name == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be true or false, got {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if type_name == "int":
        if int(value) != value:
            raise ValueError(f"{name} must be an integer, got {value!r}")
        return int(value)
    return float(value)


def load_config(path: Optional[Path | str] = None) -> ReconstructionConfig:
    """Load a YAML settings file.

    Search order:
        1. ``path`` when given
        2. the file named by ``STPCABLE_CONFIG``
        3. built-in defaults
    """
    if path is None:
        env_path = os.environ.get(STPCABLE_CONFIG)
        if not env_path:
            return ReconstructionConfig()
        path = Path(env_path).expanduser()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"configuration must be a mapping, got {type(data)!r}")
    logger.debug("loaded configuration from %s", config_path)
    return ReconstructionConfig.from_mapping(data)


__all__ = ["STPCABLE_CONFIG", "ReconstructionConfig", "load_config"]
