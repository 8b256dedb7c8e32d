"""
Configuration schema for the isometric editor.

This module defines the dataclass holding projection and interaction
settings. The configuration can be:
- Used with its defaults (2.5 world units per cm, 30 degree tilt)
- Written manually in YAML format
- Saved back to YAML after adjustment
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .isometric.constants import (
    HOVER_THRESHOLD_PX,
    HOVER_THRESHOLD_TOUCH_PX,
    MAX_ZOOM,
    MIN_ZOOM,
    PICK_THRESHOLD_PX,
    PICK_THRESHOLD_TOUCH_PX,
    SCALE,
    SNAP_THRESHOLD_PX,
)
from .isometric.view_projection import IsoProjection


def _to_float(name: str, value: Any) -> float:
    """Convert a config value to float."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _to_int(name: str, value: Any) -> int:
    """Convert a config value to int, rejecting fractions."""
    number = _to_float(name, value)
    if not number.is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(number)


@dataclass
class EditorConfig:
    """
    Projection and interaction settings for the editor.

    Attributes:
        scale: World units per centimeter of pipe
        iso_angle_deg: Tilt of horizontal runs from the X axis, in degrees
        pick_threshold_px: Click selection radius on screen (mouse)
        pick_threshold_touch_px: Click selection radius on screen (touch)
        hover_threshold_px: Hover highlight radius on screen (mouse)
        hover_threshold_touch_px: Hover highlight radius on screen (touch)
        snap_threshold_px: Ruler snap radius on screen
        min_zoom: Smallest allowed zoom factor
        max_zoom: Largest allowed zoom factor
        history_limit: Number of undo steps kept
    """

    scale: float = SCALE
    iso_angle_deg: float = 30.0
    pick_threshold_px: float = PICK_THRESHOLD_PX
    pick_threshold_touch_px: float = PICK_THRESHOLD_TOUCH_PX
    hover_threshold_px: float = HOVER_THRESHOLD_PX
    hover_threshold_touch_px: float = HOVER_THRESHOLD_TOUCH_PX
    snap_threshold_px: float = SNAP_THRESHOLD_PX
    min_zoom: float = MIN_ZOOM
    max_zoom: float = MAX_ZOOM
    history_limit: int = 50

    def __post_init__(self):
        # YAML may hand over strings or ints; coerce before validating.
        for f in fields(self):
            convert = _to_int if f.name == "history_limit" else _to_float
            setattr(self, f.name, convert(f.name, getattr(self, f.name)))

        if not (math.isfinite(self.scale) and self.scale > 0):
            raise ValueError(f"scale must be positive, got {self.scale}")
        if not 0 < self.iso_angle_deg < 90:
            raise ValueError(f"iso_angle_deg must be between 0 and 90, got {self.iso_angle_deg}")
        if not 0 < self.min_zoom <= self.max_zoom:
            raise ValueError(f"Invalid zoom range: {self.min_zoom}..{self.max_zoom}")
        for name in ("pick_threshold_px", "pick_threshold_touch_px", "hover_threshold_px",
                     "hover_threshold_touch_px", "snap_threshold_px"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value >= 0):
                raise ValueError(f"{name} must be a finite value >= 0, got {value}")
        if self.history_limit < 0:
            raise ValueError(f"history_limit must be >= 0, got {self.history_limit}")

    @property
    def projection(self) -> IsoProjection:
        """Projection built from scale and tilt angle."""
        return IsoProjection.from_degrees(self.scale, self.iso_angle_deg)

    def clamp_zoom(self, zoom: float) -> float:
        """Limit a zoom factor to the configured range."""
        return max(self.min_zoom, min(self.max_zoom, zoom))

    def world_threshold(self, threshold_px: float, zoom: float) -> float:
        """Convert an on-screen pixel radius to world units at the given zoom."""
        return threshold_px / self.clamp_zoom(zoom)

    def pick_threshold(self, zoom: float, touch: bool = False) -> float:
        px = self.pick_threshold_touch_px if touch else self.pick_threshold_px
        return self.world_threshold(px, zoom)

    def hover_threshold(self, zoom: float, touch: bool = False) -> float:
        px = self.hover_threshold_touch_px if touch else self.hover_threshold_px
        return self.world_threshold(px, zoom)

    def snap_threshold(self, zoom: float) -> float:
        return self.world_threshold(self.snap_threshold_px, zoom)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> EditorConfig:
        """
        Create a config from a dictionary (missing keys use defaults).

        Raises:
            ValueError: If the data is not a mapping, has unknown keys or
                holds invalid values
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}. Valid keys: {sorted(known)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> EditorConfig:
        """Load an editor configuration from a YAML file."""
        with open(yaml_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e
        return cls.from_dict(data)

    def to_yaml(self, yaml_path: str | Path) -> None:
        """Save the editor configuration to a YAML file."""
        with open(yaml_path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=False)
