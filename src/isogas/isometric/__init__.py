"""
Isometric Geometry Module

Resolves segment trees into absolute drawing coordinates and answers spatial
questions over them.

Features:
- Direction vectors for the six piping directions (30 degree isometric)
- Memoized, cycle-safe coordinate resolution
- Snap points, click selection and hover hit-testing
- Ruler measurement and drawing extents

Usage:
    from isogas.isometric import resolve_all, nearest_snap_point

    coords = resolve_all(segments)
    snap = nearest_snap_point(x, y, coords, threshold=20 / zoom)
"""

from .constants import ISO_ANGLE, ORIGIN, ROOT, SCALE
from .coordinate_resolver import (
    CoordinateMap,
    ResolvedPosition,
    ResolveReport,
    UnresolvedReason,
    resolve_all,
    resolve_with_report,
)
from .spatial_query import (
    Extents,
    closest_segment,
    distance_point_to_segment,
    distances_to_segments,
    drawing_extents,
    hovered_segment,
    measure_distance,
    nearest_snap_point,
)
from .view_projection import DEFAULT_PROJECTION, IsoProjection, vector_for

__all__ = [
    # Constants
    "ISO_ANGLE",
    "ORIGIN",
    "ROOT",
    "SCALE",
    # Projection
    "DEFAULT_PROJECTION",
    "IsoProjection",
    "vector_for",
    # Resolution
    "CoordinateMap",
    "ResolvedPosition",
    "ResolveReport",
    "UnresolvedReason",
    "resolve_all",
    "resolve_with_report",
    # Spatial queries
    "Extents",
    "closest_segment",
    "distance_point_to_segment",
    "distances_to_segments",
    "drawing_extents",
    "hovered_segment",
    "measure_distance",
    "nearest_snap_point",
]
