"""
Material Takeoff

This module provides:
- TakeoffEntry: Aggregated line of the takeoff table
- aggregate_takeoff: Groups a segment list into pipe runs and fittings
- format_length_cm: Human-readable length for the takeoff table

Pipe is totalled per size and installation type; fittings are counted per
fitting type and size. Zero-length segments only contribute their fitting.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .route_nodes import PIPE_SIZES, Segment

# Display names for the takeoff table
FITTING_DESCRIPTIONS = {
    "VALVE_GC": "COOKER VALVE (GC)",
    "VALVE_RC": "VALVE (RC)",
    "VALVE_WH": "WATER HEATER VALVE (WH)",
    "VALVE_PC": "PACKAGE BOILER VALVE (P)",
    "VALVE_H": "HEATER VALVE (H)",
    "VALVE_MAIN": "MAIN VALVE",
    "VALVE": "VALVE",
    "VALVE_LI": "VALVE (Li)",
    "VALVE_FP": "VALVE (FP)",
    "VALVE_B": "VALVE (B)",
    "METER": "GAS METER",
    "REGULATOR": "REGULATOR",
    "ELBOW45": "45 DEG ELBOW",
    "TEE": "TEE",
    "COUPLING": "COUPLING",
    "NIPPLE": "NIPPLE",
    "CAP": "CAP",
    "FLANGE": "FLANGE",
    "UNION": "UNION",
    "REDUCER": "REDUCER",
}


@dataclass
class TakeoffEntry:
    """
    Aggregated entry for the material takeoff.

    Pipe entries carry a total length; fitting entries carry a quantity.
    """
    item_number: int           # Display item number
    category: str              # "pipe" or "fitting"
    size: str                  # Nominal pipe size
    description: str           # Component description
    quantity: int = 0          # Fittings: count; pipe: number of runs
    length_cm: float = 0.0     # Pipe only: total run length
    segment_ids: list[str] = field(default_factory=list)

    @property
    def length_display(self) -> str:
        return format_length_cm(self.length_cm) if self.category == "pipe" else ""


def format_length_cm(length_cm: float) -> str:
    """
    Format a length for the takeoff table.

    Examples:
        250.0 -> 2.50 m
        85.0 -> 85 cm
    """
    if length_cm >= 100:
        return f"{length_cm / 100:.2f} m"
    return f"{length_cm:.0f} cm"


def _size_order(size: str) -> int:
    return PIPE_SIZES.index(size) if size in PIPE_SIZES else len(PIPE_SIZES)


def aggregate_takeoff(segments: Iterable[Segment]) -> list[TakeoffEntry]:
    """
    Aggregate segments into takeoff entries.

    Pipe runs are grouped by size and installation type and their lengths
    summed. Fittings are grouped by fitting type and size. Pipe entries
    come first, smallest size first; item numbers follow that order.
    """
    pipe_groups: dict[tuple[str, str], list[Segment]] = {}
    fitting_groups: dict[tuple[str, str], list[Segment]] = {}

    for segment in segments:
        if segment.length > 0:
            key = (segment.size, segment.installation_type)
            pipe_groups.setdefault(key, []).append(segment)
        if segment.fitting != "NONE":
            key = (segment.fitting, segment.size)
            fitting_groups.setdefault(key, []).append(segment)

    entries: list[TakeoffEntry] = []

    for (size, installation), group in sorted(
        pipe_groups.items(), key=lambda item: (_size_order(item[0][0]), item[0][0], item[0][1])
    ):
        suffix = " (UNDERGROUND)" if installation == "UNDER" else ""
        entries.append(TakeoffEntry(
            item_number=0,
            category="pipe",
            size=size,
            description=f"PIPE{suffix}",
            quantity=len(group),
            length_cm=sum(s.length for s in group),
            segment_ids=[s.id for s in group],
        ))

    for (fitting, size), group in sorted(
        fitting_groups.items(), key=lambda item: (item[0][0], _size_order(item[0][1]), item[0][1])
    ):
        entries.append(TakeoffEntry(
            item_number=0,
            category="fitting",
            size=size,
            description=FITTING_DESCRIPTIONS.get(fitting, fitting),
            quantity=len(group),
            segment_ids=[s.id for s in group],
        ))

    for number, entry in enumerate(entries, start=1):
        entry.item_number = number

    return entries


def total_pipe_length(segments: Iterable[Segment]) -> float:
    """Total pipe length in centimeters across all sizes."""
    return sum(s.length for s in segments)
