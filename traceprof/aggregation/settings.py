"""
Classification settings: thresholds used by the aggregate views.

Defaults reproduce the thresholds the profile table has always used. Callers
may override any subset from a dict (e.g. a request body) or a YAML file.
"""

import math
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


@dataclass
class ClassificationSettings:
    """
    Tunable thresholds for the profile table, buckets and optimization views.

    Shares are fractions in [0, 1], not percentages.
    """

    # ── Profile table ─────────────────────────────────────────

    tier_dominance: float = 0.5
    """A tier dominates a row when its share of the row's samples exceeds this."""

    critical_share: float = 0.10
    """Row share of the window above which an interpreter-dominated row is critical."""

    cell_share: float = 0.01
    """Row share of the window above which tier cells are flagged."""

    min_visible_share: float = 0.001
    """Rows whose share of the whole thread is not above this are dropped."""

    # ── Flat profile / buckets ────────────────────────────────

    bucket_count: int = 80
    """Number of time buckets per function."""

    include_platform_frames: bool = True
    """Count platform (non-content) frames in the flat profile."""

    # ── Optimization sites ────────────────────────────────────

    optimization_sample_threshold: int = 0
    """Sites with fewer samples are not reported."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce(value: Any, default: Any) -> Optional[Any]:
    """Convert a raw value to the type of `default`, or None if unusable."""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    if isinstance(default, int):
        return int(value)
    return float(value)


def settings_from_dict(d: Optional[Dict[str, Any]]) -> ClassificationSettings:
    """
    Construct ClassificationSettings from a dict.

    Missing fields use defaults. Extra fields and values of the wrong type
    (or non-finite numbers) are ignored.
    """
    if not d:
        return ClassificationSettings()

    defaults = ClassificationSettings()
    kwargs = {}
    for f in fields(ClassificationSettings):
        if f.name in d:
            val = _coerce(d[f.name], getattr(defaults, f.name))
            if val is not None:
                kwargs[f.name] = val
    return ClassificationSettings(**kwargs)


def load_settings(path: Union[str, Path]) -> ClassificationSettings:
    """
    Load settings from a YAML mapping.

    Raises:
        ValueError: If the document is not valid YAML or not a mapping
    """
    with open(path) as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML ({e})") from e
    if config is None:
        return ClassificationSettings()
    if not isinstance(config, dict):
        raise ValueError(f"{path}: settings must be a mapping, got {type(config).__name__}")
    return settings_from_dict(config)
