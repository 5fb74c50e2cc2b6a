"""Tests for planar geometry primitives."""

import math

import pytest

from indoor_nav.core.geometry import (
    BoundingBox,
    Point,
    Polygon,
    bounding_box,
    distance,
    inflate,
    point_in_polygon,
    point_on_boundary,
    segment_blocked,
    segment_crosses_polygon,
    segments_intersect,
)


SQUARE = Polygon(((0, 0), (0, 10), (10, 10), (10, 0)))
L_SHAPE = Polygon(((0, 0), (10, 0), (10, 4), (4, 4), (4, 10), (0, 10)))


class TestPolygon:

    def test_closing_point_is_dropped(self):
        polygon = Polygon(((0, 0), (1, 0), (1, 1), (0, 0)))
        assert len(polygon) == 3
        assert polygon.points[0] == Point(0.0, 0.0)

    def test_too_few_points_raises(self):
        with pytest.raises(ValueError):
            Polygon(((0, 0), (1, 1), (0, 0)))

    def test_orientation(self):
        assert not SQUARE.is_counter_clockwise
        assert Polygon(tuple(reversed(SQUARE.points))).is_counter_clockwise
        assert abs(SQUARE.signed_area) == pytest.approx(100.0)

    def test_convex_vertices_skip_reflex_corner(self):
        convex = L_SHAPE.convex_vertices()
        assert Point(4, 4) not in convex
        assert len(convex) == 5

    def test_bounding_box(self):
        box = bounding_box(L_SHAPE)
        assert box == BoundingBox(0, 10, 0, 10)
        assert box.intersects(BoundingBox(10, 12, 10, 12))
        assert not box.intersects(BoundingBox(11, 12, 0, 1))


class TestPredicates:

    def test_distance_is_symmetric(self):
        a, b = Point(1, 2), Point(4, 6)
        assert distance(a, b) == pytest.approx(5.0)
        assert distance(a, b) == distance(b, a)

    def test_crossing_segments(self):
        assert segments_intersect((0, 0), (10, 10), (0, 10), (10, 0))

    def test_parallel_segments(self):
        assert not segments_intersect((0, 0), (10, 0), (0, 1), (10, 1))

    def test_touching_endpoint_counts(self):
        assert segments_intersect((0, 0), (5, 5), (5, 5), (10, 0))

    def test_collinear_overlap_and_gap(self):
        assert segments_intersect((0, 0), (5, 0), (3, 0), (8, 0))
        assert not segments_intersect((0, 0), (2, 0), (3, 0), (8, 0))

    def test_point_in_polygon(self):
        assert point_in_polygon((5, 5), SQUARE)
        assert not point_in_polygon((15, 5), SQUARE)

    def test_point_in_concave_polygon(self):
        assert point_in_polygon((2, 8), L_SHAPE)
        assert not point_in_polygon((7, 7), L_SHAPE)

    def test_point_on_boundary(self):
        assert point_on_boundary((0, 5), SQUARE)
        assert point_on_boundary((10, 10), SQUARE)
        assert not point_on_boundary((5, 5), SQUARE)


class TestSegmentCrossesPolygon:

    def test_straight_through(self):
        assert segment_crosses_polygon((-5, 5), (15, 5), SQUARE)

    def test_touching_a_corner_is_clear(self):
        assert not segment_crosses_polygon((-5, 5), (5, 15), SQUARE)

    def test_running_along_an_edge_is_clear(self):
        assert not segment_crosses_polygon((-5, 10), (15, 10), SQUARE)

    def test_diagonal_between_corners_is_blocked(self):
        assert segment_crosses_polygon((0, 0), (10, 10), SQUARE)

    def test_segment_inside_is_blocked(self):
        assert segment_crosses_polygon((2, 2), (8, 3), SQUARE)

    def test_segment_outside_is_clear(self):
        assert not segment_crosses_polygon((-5, -5), (-1, 20), SQUARE)

    def test_clipping_a_corner_away_from_midpoint(self):
        # Midpoint (5, 14) is outside, but the segment cuts the top-left corner
        assert segment_crosses_polygon((-5, 4), (15, 24), SQUARE)

    def test_bridging_a_concave_notch(self):
        # Both endpoints are corners of the L; the segment runs through open space
        assert not segment_crosses_polygon((10, 4), (4, 10), L_SHAPE)
        assert segment_crosses_polygon((10, 4), (0, 10), L_SHAPE)


class TestSegmentBlocked:

    HALVES = (Polygon(((0, 0), (0, 10), (5, 10), (5, 0))), Polygon(((5, 0), (5, 10), (10, 10), (10, 0))))

    def test_seam_between_touching_polygons_is_blocked(self):
        assert segment_blocked((5, -5), (5, 15), self.HALVES)
        assert segment_blocked((5, 0), (5, 10), self.HALVES)

    def test_each_half_alone_leaves_the_seam_open(self):
        for half in self.HALVES:
            assert not segment_blocked((5, -5), (5, 15), (half,))

    def test_outer_edge_of_combined_wall_is_clear(self):
        assert not segment_blocked((-5, 10), (15, 10), self.HALVES)
        assert not segment_blocked((0, 0), (0, 10), self.HALVES)

    def test_crossing_either_half_is_blocked(self):
        assert segment_blocked((-5, 5), (15, 5), self.HALVES)
        assert segment_blocked((2, 2), (3, 3), self.HALVES)


class TestInflate:

    def test_zero_radius_is_identity(self):
        assert inflate(SQUARE, 0) is SQUARE

    def test_negative_radius_raises(self):
        with pytest.raises(ValueError):
            inflate(SQUARE, -1)

    @pytest.mark.parametrize('polygon', [SQUARE, Polygon(tuple(reversed(SQUARE.points)))])
    def test_square_grows_by_radius_on_every_side(self, polygon):
        inflated = inflate(polygon, 1.0)
        assert inflated.bounding_box == BoundingBox(-1, 11, -1, 11)
        assert len(inflated) == 4

    def test_inflated_convex_polygon_contains_original(self):
        triangle = Polygon(((0, 0), (6, 0), (3, 5)))
        inflated = inflate(triangle, 0.5)
        assert len(inflated.convex_vertices()) == len(inflated)
        for p in triangle.points:
            assert point_in_polygon(p, inflated)
            assert not point_on_boundary(p, inflated)

    def test_edges_move_out_by_radius(self):
        inflated = inflate(SQUARE, 2.0)
        for p in inflated.points:
            assert max(-p.x, p.x - 10, -p.y, p.y - 10) == pytest.approx(2.0)

    def test_sharp_corner_is_bevelled(self):
        spike = Polygon(((0, 0), (100, 1), (0, 2)))
        inflated = inflate(spike, 1.0)
        assert len(inflated) == 4
        for p in spike.points:
            assert point_in_polygon(p, inflated)
        tip_extent = max(p.x for p in inflated.points)
        assert tip_extent < 100 + 1.0 + 1e-6
        assert math.isfinite(tip_extent)
