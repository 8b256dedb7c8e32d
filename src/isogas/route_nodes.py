#!/usr/bin/env python3
"""
Segment Model for Isometric Gas-Piping Diagrams

This module defines the flat, id-keyed data model for a pipe tree. Every
Segment knows only its parent id, a direction and a length; absolute
positions are derived later by the coordinate resolver.

Example:
    ROOT (0, 0)
        └── s1: NORTH 100 cm
                ├── s2: UP 50 cm   (fitting: VALVE_GC)
                └── s3: EAST 80 cm
                        └── s4: DOWN 0 cm  (fitting: METER)

The tree is stored as a flat list of Segments; children are found by
parent id, never through embedded references.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

# =============================================================================
# TYPE ALIASES AND VOCABULARIES
# =============================================================================

ROOT_ID = "ROOT"

Direction: TypeAlias = Literal["NORTH", "SOUTH", "EAST", "WEST", "UP", "DOWN"]

InstallationType: TypeAlias = Literal["ABOVE", "UNDER"]

FittingType: TypeAlias = Literal[
    "NONE",
    "VALVE_GC", "VALVE_RC", "VALVE_WH", "VALVE_PC", "VALVE_H", "VALVE_MAIN", "VALVE",
    "VALVE_LI", "VALVE_FP", "VALVE_B",
    "METER", "REGULATOR",
    "ELBOW45", "TEE", "COUPLING", "NIPPLE", "CAP", "FLANGE", "UNION", "REDUCER",
]

DIRECTIONS: tuple[str, ...] = ("NORTH", "SOUTH", "EAST", "WEST", "UP", "DOWN")
INSTALLATION_TYPES: tuple[str, ...] = ("ABOVE", "UNDER")
FITTING_TYPES: tuple[str, ...] = (
    "NONE",
    "VALVE_GC", "VALVE_RC", "VALVE_WH", "VALVE_PC", "VALVE_H", "VALVE_MAIN", "VALVE",
    "VALVE_LI", "VALVE_FP", "VALVE_B",
    "METER", "REGULATOR",
    "ELBOW45", "TEE", "COUPLING", "NIPPLE", "CAP", "FLANGE", "UNION", "REDUCER",
)

# Nominal sizes offered by the editor (inches)
PIPE_SIZES: tuple[str, ...] = ('1/2"', '3/4"', '1"', '1 1/4"', '1 1/2"', '2"')


def normalize_direction(direction: str) -> Direction:
    """Get the canonical direction symbol for a direction name."""
    symbol = str(direction).strip().upper()
    if symbol not in DIRECTIONS:
        raise ValueError(f"Unknown direction: {direction}. Use: {list(DIRECTIONS)}")
    return symbol  # type: ignore[return-value]


def _normalize_choice(value: str, choices: tuple[str, ...], kind: str) -> str:
    symbol = str(value).strip().upper()
    if symbol not in choices:
        raise ValueError(f"Unknown {kind}: {value}. Use: {list(choices)}")
    return symbol


# =============================================================================
# SEGMENT
# =============================================================================


@dataclass
class Segment:
    """
    One directed pipe run in the tree.

    A segment starts at its parent's end point (or at the origin when the
    parent is ROOT) and extends `length` centimeters in `direction`.

    Attributes:
        id: Unique identifier, never equal to ROOT_ID
        parent_id: Id of the segment this one extends from, or ROOT_ID
        length: Run length in cm; 0 places a fitting at the parent's end
        direction: One of NORTH, SOUTH, EAST, WEST, UP, DOWN
        size: Nominal pipe size (e.g. '1"')
        fitting: Fitting placed on this segment ("NONE" for plain pipe)
        installation_type: ABOVE or UNDER ground
        label: Optional annotation (e.g. "Unit 1")
    """

    id: str
    parent_id: str = ROOT_ID
    length: float = 100.0
    direction: Direction = "NORTH"
    size: str = '1"'
    fitting: FittingType = "NONE"
    installation_type: InstallationType = "ABOVE"
    label: str | None = None

    def __post_init__(self) -> None:
        self.direction = normalize_direction(self.direction)
        self.fitting = _normalize_choice(self.fitting, FITTING_TYPES, "fitting")  # type: ignore[assignment]
        self.installation_type = _normalize_choice(  # type: ignore[assignment]
            self.installation_type, INSTALLATION_TYPES, "installation type"
        )
        length = float(self.length)
        if not math.isfinite(length) or length < 0:
            raise ValueError(f"Segment '{self.id}' length must be a finite value >= 0, got {self.length}")
        self.length = length

    @property
    def is_fitting_only(self) -> bool:
        """True for zero-length segments that only place a fitting."""
        return self.length == 0

    @property
    def is_top_level(self) -> bool:
        return self.parent_id == ROOT_ID

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Segment:
        """
        Create a Segment from a project-file dictionary.

        Missing or null fields take their defaults; the id is required.

        Raises:
            ValueError: If the id is missing, null or empty
        """
        segment_id = data.get("id")
        if segment_id is None or segment_id == "":
            raise ValueError(f"Segment entry has no id: {data}")
        return cls(
            id=str(segment_id),
            parent_id=str(data.get("parentId") or ROOT_ID),
            length=data.get("length") or 0.0,
            direction=data.get("direction") or "NORTH",
            size=data.get("size") or '1"',
            fitting=data.get("fitting") or "NONE",
            installation_type=data.get("installationType") or "ABOVE",
            label=data.get("label"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a project-file dictionary."""
        result: dict[str, Any] = {
            "id": self.id,
            "parentId": self.parent_id,
            "length": self.length,
            "size": self.size,
            "direction": self.direction,
            "fitting": self.fitting,
            "installationType": self.installation_type,
        }
        if self.label:
            result["label"] = self.label
        return result


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def index_segments(segments: Iterable[Segment]) -> dict[str, Segment]:
    """Map segment ids to segments; the first occurrence of a duplicate id wins."""
    index: dict[str, Segment] = {}
    for segment in segments:
        index.setdefault(segment.id, segment)
    return index


def children_of(segments: Iterable[Segment], parent_id: str) -> list[Segment]:
    """Return the segments that extend directly from `parent_id`."""
    return [s for s in segments if s.parent_id == parent_id]


def iter_descendants(segments: list[Segment], segment_id: str) -> Iterator[Segment]:
    """
    Iterate over every descendant of `segment_id` (breadth-first).

    Each segment is yielded at most once, so parent cycles terminate.
    """
    by_parent: dict[str, list[Segment]] = {}
    for segment in segments:
        by_parent.setdefault(segment.parent_id, []).append(segment)

    seen: set[str] = {segment_id}
    queue = list(by_parent.get(segment_id, []))
    while queue:
        segment = queue.pop(0)
        if segment.id in seen:
            continue
        seen.add(segment.id)
        yield segment
        queue.extend(by_parent.get(segment.id, []))


def find_segment(segments: Iterable[Segment], segment_id: str) -> Segment | None:
    """Find a segment by id."""
    for segment in segments:
        if segment.id == segment_id:
            return segment
    return None


def segments_from_data(data: Any) -> list[Segment]:
    """
    Build segments from loaded project data.

    Accepts either the editor's `{"pipes": [...]}` document or a bare list
    of segment dictionaries.

    Raises:
        ValueError: If the data has neither shape
    """
    if isinstance(data, dict):
        data = data.get("pipes", [])
    if not isinstance(data, list):
        raise ValueError(f"Project data must be a list of segments, got {type(data).__name__}")
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"Segment entries must be objects, got {type(item).__name__}")
    return [Segment.from_dict(item) for item in data]


def segments_to_data(segments: Iterable[Segment]) -> dict[str, Any]:
    """Convert segments to the editor's project document."""
    return {"pipes": [s.to_dict() for s in segments]}
