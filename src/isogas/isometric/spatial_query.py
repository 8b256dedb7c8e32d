"""
Spatial queries over resolved coordinates.

Snap, hit-test and measurement helpers used by the editing canvas. All
thresholds are world-space distances; convert on-screen pixels by dividing
by the current zoom before calling.

Candidate order is fixed: ROOT first, then segments in coordinate-map
order. Ties on distance go to the earlier candidate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .constants import EMPTY_EXTENT_HALF_SIZE, ORIGIN, ROOT, SCALE
from .coordinate_resolver import CoordinateMap, Point


# =============================================================================
# DISTANCE HELPERS
# =============================================================================


def distance_point_to_segment(
    px: float, py: float,
    x1: float, y1: float,
    x2: float, y2: float,
) -> float:
    """
    Shortest distance from a point to a line segment.

    The projection parameter is clamped to [0, 1] so the nearest point stays
    on the segment. A zero-length segment degrades to point distance.
    """
    dx = x2 - x1
    dy = y2 - y1
    l2 = dx * dx + dy * dy
    if l2 == 0:
        return math.hypot(px - x1, py - y1)
    t = ((px - x1) * dx + (py - y1) * dy) / l2
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (x1 + t * dx), py - (y1 + t * dy))


def distances_to_segments(x: float, y: float, coordinate_map: CoordinateMap) -> np.ndarray:
    """
    Distances from a point to every segment, in coordinate-map order.

    Each entry is computed by distance_point_to_segment, so values match it
    exactly and threshold comparisons agree with the scalar function.
    """
    return np.fromiter(
        (
            distance_point_to_segment(x, y, c.start_x, c.start_y, c.end_x, c.end_y)
            for c in coordinate_map.values()
        ),
        dtype=float,
        count=len(coordinate_map),
    )


# =============================================================================
# SNAP AND HIT TESTING
# =============================================================================


def nearest_snap_point(
    x: float,
    y: float,
    coordinate_map: CoordinateMap,
    threshold: float,
) -> Point | None:
    """
    Find the snap point nearest to (x, y) within threshold.

    Candidates are the origin (ROOT) and every segment's end point; start
    points always coincide with another end point or the origin.

    Returns:
        The snap point, or None when nothing is strictly closer than threshold
    """
    best_distance = threshold
    nearest: Point | None = None

    root_distance = math.hypot(x - ORIGIN[0], y - ORIGIN[1])
    if root_distance < best_distance:
        best_distance = root_distance
        nearest = ORIGIN

    for coords in coordinate_map.values():
        d = math.hypot(x - coords.end_x, y - coords.end_y)
        if d < best_distance:
            best_distance = d
            nearest = coords.end

    return nearest


def closest_segment(
    x: float,
    y: float,
    coordinate_map: CoordinateMap,
    threshold: float,
) -> str:
    """
    Pick the segment (or ROOT) closest to (x, y) for selection.

    ROOT competes at its distance from the origin. When no candidate is
    strictly closer than threshold, ROOT is returned so the editor always
    has an active anchor.
    """
    best_id = ROOT
    best_distance = threshold

    root_distance = math.hypot(x - ORIGIN[0], y - ORIGIN[1])
    if root_distance < best_distance:
        best_distance = root_distance

    segment_id, distance = _nearest_segment(x, y, coordinate_map)
    if segment_id is not None and distance < best_distance:
        best_id = segment_id
    return best_id


def hovered_segment(
    x: float,
    y: float,
    coordinate_map: CoordinateMap,
    threshold: float,
) -> str | None:
    """Segment under the cursor for hover highlighting, or None."""
    segment_id, distance = _nearest_segment(x, y, coordinate_map)
    if segment_id is not None and distance < threshold:
        return segment_id
    return None


def _nearest_segment(x: float, y: float, coordinate_map: CoordinateMap) -> tuple[str | None, float]:
    """First segment at the minimum distance from (x, y)."""
    distances = distances_to_segments(x, y, coordinate_map)
    if distances.size == 0:
        return None, math.inf
    best = int(np.argmin(distances))
    return list(coordinate_map)[best], float(distances[best])


# =============================================================================
# MEASUREMENT
# =============================================================================


def measure_distance(p1: Point, p2: Point, scale: float = SCALE) -> float:
    """Ruler distance between two world points, in centimeters of pipe."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1]) / scale


@dataclass(frozen=True)
class Extents:
    """Axis-aligned bounding box of a drawing, in world units."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


def drawing_extents(coordinate_map: CoordinateMap) -> Extents:
    """
    Bounding box of every segment end point, always including the origin.

    An empty diagram reports a fixed box centered on the origin.
    """
    if not coordinate_map:
        half = EMPTY_EXTENT_HALF_SIZE
        return Extents(-half, -half, half, half)

    xs = np.array([ORIGIN[0]] + [v for c in coordinate_map.values() for v in (c.start_x, c.end_x)])
    ys = np.array([ORIGIN[1]] + [v for c in coordinate_map.values() for v in (c.start_y, c.end_y)])
    return Extents(float(xs.min()), float(ys.min()), float(xs.max()), float(ys.max()))
