#!/usr/bin/env python3
"""
Tests for spatial queries over resolved coordinates.

Tests cover:
- Point-to-segment distance (clamping, zero-length segments)
- Vectorized distances
- Snap points, click selection and hover hit-testing
- Ruler measurement and drawing extents
"""

import math

import numpy as np
import pytest

from isogas.isometric.coordinate_resolver import ResolvedPosition, resolve_all
from isogas.isometric.spatial_query import (
    Extents,
    closest_segment,
    distance_point_to_segment,
    distances_to_segments,
    drawing_extents,
    hovered_segment,
    measure_distance,
    nearest_snap_point,
)
from isogas.route_nodes import ROOT_ID, Segment


@pytest.fixture
def s1_map():
    """Single segment s1: ROOT -> 100 cm NORTH."""
    return resolve_all([Segment(id="s1", parent_id=ROOT_ID, length=100, direction="NORTH")])


@pytest.fixture
def axis_map():
    """Hand-built map with axis-aligned segments for exact distances."""
    return {
        "h": ResolvedPosition(0.0, 0.0, 100.0, 0.0),      # along +X
        "v": ResolvedPosition(100.0, 0.0, 100.0, -100.0),  # straight up from h's end
        "z": ResolvedPosition(100.0, -100.0, 100.0, -100.0),  # zero length at v's end
    }


# =============================================================================
# DISTANCE HELPERS
# =============================================================================


class TestDistancePointToSegment:
    """Test the scalar point-to-segment distance."""

    def test_perpendicular_projection(self):
        assert distance_point_to_segment(5, 3, 0, 0, 10, 0) == pytest.approx(3.0)

    def test_clamped_before_start(self):
        """Points beyond the start measure to the start point."""
        assert distance_point_to_segment(-3, 4, 0, 0, 10, 0) == pytest.approx(5.0)

    def test_clamped_after_end(self):
        """Points beyond the end measure to the end point, not the line."""
        assert distance_point_to_segment(13, 4, 0, 0, 10, 0) == pytest.approx(5.0)

    def test_point_on_segment(self):
        assert distance_point_to_segment(2, 2, 0, 0, 4, 4) == pytest.approx(0.0)

    @pytest.mark.parametrize("px, py", [(3.0, 4.0), (-7.5, 2.0), (0.0, 0.0), (1e6, -1e6)])
    def test_zero_length_is_point_distance(self, px, py):
        """A degenerate segment degrades to Euclidean point distance."""
        x, y = 1.5, -2.5
        assert distance_point_to_segment(px, py, x, y, x, y) == math.hypot(px - x, py - y)

    def test_symmetric_in_endpoints(self):
        a = distance_point_to_segment(3, 7, -2, 1, 9, -4)
        b = distance_point_to_segment(3, 7, 9, -4, -2, 1)
        assert a == pytest.approx(b)


class TestDistancesToSegments:
    """Test the vectorized distance helper."""

    def test_empty_map(self):
        result = distances_to_segments(1.0, 1.0, {})
        assert isinstance(result, np.ndarray)
        assert result.size == 0

    def test_matches_scalar(self, axis_map):
        """Vectorized distances agree with the scalar function in map order."""
        for px, py in [(50.0, 10.0), (130.0, -50.0), (100.0, -130.0), (-20.0, 0.0)]:
            result = distances_to_segments(px, py, axis_map)
            expected = [
                distance_point_to_segment(px, py, c.start_x, c.start_y, c.end_x, c.end_y)
                for c in axis_map.values()
            ]
            assert result.tolist() == expected

    def test_bit_identical_to_scalar_on_random_segments(self):
        """Hit testing uses exactly the distances the scalar function reports."""
        rng = np.random.default_rng(7)
        values = rng.uniform(-1000.0, 1000.0, size=(2000, 6)).tolist()
        for px, py, x1, y1, x2, y2 in values:
            result = distances_to_segments(px, py, {"s": ResolvedPosition(x1, y1, x2, y2)})
            assert float(result[0]) == distance_point_to_segment(px, py, x1, y1, x2, y2)

    def test_zero_length_entry(self, axis_map):
        result = distances_to_segments(103.0, -96.0, axis_map)
        assert result[2] == pytest.approx(5.0)


# =============================================================================
# SNAP POINTS
# =============================================================================


class TestNearestSnapPoint:
    """Test snapping to ROOT and segment end points."""

    def test_root_example(self, s1_map):
        """Cursor at the origin snaps to ROOT rather than s1's far end."""
        assert nearest_snap_point(0, 0, s1_map, 20) == (0.0, 0.0)

    def test_snaps_to_segment_end(self, s1_map):
        end = s1_map["s1"].end
        assert nearest_snap_point(end[0] + 3, end[1] - 4, s1_map, 20) == end

    def test_nothing_within_threshold(self, s1_map):
        assert nearest_snap_point(100, 100, s1_map, 20) is None

    def test_threshold_is_strict(self):
        """A candidate exactly at the threshold distance is not a match."""
        assert nearest_snap_point(3, 4, {}, 5.0) is None
        assert nearest_snap_point(3, 4, {}, 5.0001) == (0.0, 0.0)

    def test_start_points_are_not_candidates(self):
        """Only ends and ROOT are offered, even for a stray start point."""
        coords = {"x": ResolvedPosition(50.0, 50.0, 200.0, 200.0)}
        assert nearest_snap_point(50, 50, coords, 10) is None

    def test_closest_candidate_wins(self, axis_map):
        assert nearest_snap_point(90, -5, axis_map, 50) == (100.0, 0.0)

    def test_tie_prefers_root(self):
        """Equidistant ROOT and segment end: ROOT comes first."""
        coords = {"a": ResolvedPosition(0.0, 0.0, 10.0, 0.0)}
        assert nearest_snap_point(5, 0, coords, 20) == (0.0, 0.0)

    def test_tie_prefers_map_order(self):
        """Equidistant segment ends: the earlier map entry wins."""
        upper = ResolvedPosition(0.0, 0.0, 100.0, 10.0)
        lower = ResolvedPosition(0.0, 0.0, 100.0, -10.0)
        assert nearest_snap_point(100, 0, {"upper": upper, "lower": lower}, 50) == (100.0, 10.0)
        assert nearest_snap_point(100, 0, {"lower": lower, "upper": upper}, 50) == (100.0, -10.0)


# =============================================================================
# CLICK SELECTION AND HOVER
# =============================================================================


class TestClosestSegment:
    """Test click selection with ROOT fallback."""

    def test_hits_segment(self, axis_map):
        assert closest_segment(50, 3, axis_map, 10) == "h"

    def test_falls_back_to_root(self, axis_map):
        """Nothing within threshold selects ROOT."""
        assert closest_segment(500, 500, axis_map, 10) == ROOT_ID

    def test_empty_map_selects_root(self):
        assert closest_segment(1, 1, {}, 10) == ROOT_ID

    def test_root_competes_on_distance(self, axis_map):
        """Near the origin ROOT beats the segment starting there only when closer."""
        assert closest_segment(0, 0, axis_map, 10) == ROOT_ID
        assert closest_segment(8, 1, axis_map, 10) == "h"

    def test_global_minimum(self, axis_map):
        assert closest_segment(97, -50, axis_map, 10) == "v"

    def test_tie_prefers_earlier_segment(self, axis_map):
        """At v's end, v and the zero-length z are both at distance 0."""
        assert closest_segment(100, -100, axis_map, 10) == "v"

    def test_threshold_is_strict(self, axis_map):
        assert closest_segment(50, 10, axis_map, 10) == ROOT_ID
        assert closest_segment(50, 10, axis_map, 10.001) == "h"

    def test_threshold_boundary_matches_scalar_distance(self):
        """A threshold equal to the reported distance never selects the segment."""
        coords = {"d": ResolvedPosition(13.7, -41.3, 311.9, 97.1)}
        px, py = 150.3, 40.9
        d = distance_point_to_segment(px, py, 13.7, -41.3, 311.9, 97.1)
        assert closest_segment(px, py, coords, d) == ROOT_ID
        assert hovered_segment(px, py, coords, d) is None
        assert hovered_segment(px, py, coords, math.nextafter(d, math.inf)) == "d"

    def test_resolved_map(self, s1_map):
        mid = ((s1_map["s1"].start_x + s1_map["s1"].end_x) / 2, (s1_map["s1"].start_y + s1_map["s1"].end_y) / 2)
        assert closest_segment(mid[0], mid[1] + 2, s1_map, 20) == "s1"


class TestHoveredSegment:
    """Test hover hit-testing (no ROOT fallback)."""

    def test_hover_hit(self, axis_map):
        assert hovered_segment(103, -40, axis_map, 15) == "v"

    def test_hover_miss(self, axis_map):
        assert hovered_segment(300, 300, axis_map, 15) is None

    def test_hover_ignores_root(self):
        assert hovered_segment(0, 0, {}, 15) is None


# =============================================================================
# MEASUREMENT
# =============================================================================


class TestMeasurement:
    """Test ruler distance and drawing extents."""

    def test_measure_distance_in_cm(self):
        """250 world units is 100 cm at the default scale."""
        assert measure_distance((0.0, 0.0), (150.0, 200.0)) == pytest.approx(100.0)

    def test_measure_distance_custom_scale(self):
        assert measure_distance((0.0, 0.0), (0.0, 10.0), scale=1.0) == pytest.approx(10.0)

    def test_measure_along_resolved_segment(self, s1_map):
        assert measure_distance(s1_map["s1"].start, s1_map["s1"].end) == pytest.approx(100.0)

    def test_empty_extents(self):
        extents = drawing_extents({})
        assert extents == Extents(-50.0, -50.0, 50.0, 50.0)
        assert extents.width == 100.0 and extents.height == 100.0

    def test_extents_include_origin(self):
        coords = {"a": ResolvedPosition(10.0, 10.0, 40.0, 30.0)}
        extents = drawing_extents(coords)
        assert extents == Extents(0.0, 0.0, 40.0, 30.0)
        assert extents.center == (20.0, 15.0)

    def test_extents_of_axis_map(self, axis_map):
        extents = drawing_extents(axis_map)
        assert (extents.min_x, extents.min_y, extents.max_x, extents.max_y) == (0.0, -100.0, 100.0, 0.0)
