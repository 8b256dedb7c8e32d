"""
Coordinate resolution for segment trees.

Turns the flat segment list into absolute 2D start/end points by walking
each segment's parent chain back to the ROOT origin. Positions are memoized
so every segment is projected once per call, and chains that never reach
ROOT (missing parent, parent cycle) are excluded instead of raising.

Example:
    coords = resolve_all([
        Segment(id="s1", parent_id="ROOT", length=100, direction="NORTH"),
        Segment(id="s2", parent_id="s1", length=50, direction="UP"),
    ])
    coords["s2"].start == coords["s1"].end
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeAlias

from ..route_nodes import ROOT_ID, Segment, index_segments
from .constants import ORIGIN
from .view_projection import DEFAULT_PROJECTION, IsoProjection

Point: TypeAlias = tuple[float, float]


@dataclass(frozen=True)
class ResolvedPosition:
    """Absolute start and end point of one segment, in world units."""

    start_x: float
    start_y: float
    end_x: float
    end_y: float

    @property
    def start(self) -> Point:
        return (self.start_x, self.start_y)

    @property
    def end(self) -> Point:
        return (self.end_x, self.end_y)

    @property
    def world_length(self) -> float:
        """Drawn length of the segment in world units."""
        return math.hypot(self.end_x - self.start_x, self.end_y - self.start_y)


CoordinateMap: TypeAlias = dict[str, ResolvedPosition]


class UnresolvedReason(str, Enum):
    """Why a segment has no resolved position."""

    MISSING_PARENT = "missing_parent"            # parent id is neither ROOT nor a segment
    CYCLE = "cycle"                              # segment lies on a parent cycle
    UNRESOLVED_ANCESTOR = "unresolved_ancestor"  # some ancestor failed to resolve
    RESERVED_ID = "reserved_id"                  # segment uses the ROOT id


@dataclass
class ResolveReport:
    """
    Result of a resolve pass with diagnostics.

    Attributes:
        coordinates: Resolved positions, in input order
        unresolved: Excluded segment ids and the reason for each
    """

    coordinates: CoordinateMap = field(default_factory=dict)
    unresolved: dict[str, UnresolvedReason] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when every segment resolved."""
        return not self.unresolved


def resolve_with_report(
    segments: Iterable[Segment],
    projection: IsoProjection = DEFAULT_PROJECTION,
) -> ResolveReport:
    """
    Resolve every segment's absolute position and report the ones excluded.

    Parent chains are walked iteratively with a "currently resolving" set,
    so cycles end the walk and deep trees never hit the recursion limit.

    Args:
        segments: Full segment collection, in any order
        projection: Projection used to turn runs into displacements

    Returns:
        ResolveReport whose coordinates follow input order
    """
    segments = list(segments)
    index = index_segments(segments)

    ends: dict[str, Point] = {ROOT_ID: ORIGIN}
    resolved: CoordinateMap = {}
    failed: dict[str, UnresolvedReason] = {}

    for segment in segments:
        if segment.id == ROOT_ID:
            failed[segment.id] = UnresolvedReason.RESERVED_ID
            continue
        if segment.id in ends or segment.id in failed:
            continue

        # Walk up until a cached position, a failure, or a cycle.
        chain: list[Segment] = []
        resolving: set[str] = set()
        current = index[segment.id]
        failure: UnresolvedReason | None = None
        while True:
            chain.append(current)
            resolving.add(current.id)
            parent_id = current.parent_id
            if parent_id in ends:
                break
            if parent_id in failed:
                failure = UnresolvedReason.UNRESOLVED_ANCESTOR
                break
            if parent_id in resolving:
                failure = UnresolvedReason.CYCLE
                break
            parent = index.get(parent_id)
            if parent is None:
                failure = UnresolvedReason.MISSING_PARENT
                break
            current = parent

        if failure is not None:
            _mark_failed(chain, failure, failed)
            continue

        # Unwind parent-before-child.
        for link in reversed(chain):
            start_x, start_y = ends[link.parent_id]
            dx, dy = projection.vector_for(link.length, link.direction)
            end = (start_x + dx, start_y + dy)
            ends[link.id] = end
            resolved[link.id] = ResolvedPosition(start_x, start_y, end[0], end[1])

    coordinates = {s.id: resolved[s.id] for s in segments if s.id in resolved}
    return ResolveReport(coordinates=coordinates, unresolved=failed)


def _mark_failed(
    chain: list[Segment],
    failure: UnresolvedReason,
    failed: dict[str, UnresolvedReason],
) -> None:
    """Record a failed parent chain; the top of the chain carries the cause."""
    top = chain[-1]
    if failure is UnresolvedReason.CYCLE:
        # Segments from the re-entered one upward are the cycle itself.
        cycle_start = next(i for i, link in enumerate(chain) if link.id == top.parent_id)
        for link in chain[cycle_start:]:
            failed[link.id] = UnresolvedReason.CYCLE
        below = chain[:cycle_start]
    else:
        failed[top.id] = failure
        below = chain[:-1]
    for link in below:
        failed[link.id] = UnresolvedReason.UNRESOLVED_ANCESTOR


def resolve_all(
    segments: Iterable[Segment],
    projection: IsoProjection = DEFAULT_PROJECTION,
) -> CoordinateMap:
    """
    Resolve every segment's absolute start and end position.

    Segments whose parent chain does not reach ROOT are left out of the
    result; nothing is raised for malformed trees.
    """
    return resolve_with_report(segments, projection).coordinates
