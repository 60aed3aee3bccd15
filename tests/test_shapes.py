"""Unit tests for host-side shape descriptions.

These tests need no Taichi fields: shape objects are plain dataclasses
validated on construction.
"""

import math

import pytest

from lumen2d.geometry.shapes import (
    Circle,
    ConvexPolygon,
    Difference,
    HalfPlane,
    Intersect,
    ShapeKind,
    Union,
    difference,
    intersect,
    rectangle,
    regular_polygon,
    shape_depth,
    shape_node_count,
    union,
)


class TestPrimitiveValidation:
    """Configuration errors are reported at construction time."""

    def test_circle_rejects_non_positive_radius(self):
        with pytest.raises(ValueError):
            Circle((0.0, 0.0), 0.0)
        with pytest.raises(ValueError):
            Circle((0.0, 0.0), -1.0)

    def test_circle_rejects_non_finite_center(self):
        with pytest.raises(ValueError):
            Circle((math.nan, 0.0), 1.0)

    def test_half_plane_normalizes_normal(self):
        plane = HalfPlane((1.0, 2.0), (0.0, 5.0))
        assert plane.normal == pytest.approx((0.0, 1.0))

    def test_half_plane_rejects_zero_normal(self):
        with pytest.raises(ValueError):
            HalfPlane((0.0, 0.0), (0.0, 0.0))

    def test_polygon_needs_two_vertices(self):
        with pytest.raises(ValueError):
            ConvexPolygon(((0.0, 0.0),))
        with pytest.raises(ValueError):
            ConvexPolygon(())

    def test_two_vertex_polygon_allowed(self):
        segment = ConvexPolygon(((0.0, -1.0), (0.0, 1.0)))
        assert len(segment.vertices) == 2

    def test_combinator_rejects_non_shape(self):
        with pytest.raises(TypeError):
            Union(Circle((0.0, 0.0), 1.0), "circle")


class TestShapeBuilders:
    """Tests for the combinator helpers and polygon builders."""

    def test_combinator_kinds(self):
        a = Circle((0.0, 0.0), 1.0)
        b = Circle((1.0, 0.0), 1.0)
        assert isinstance(union(a, b), Union)
        assert isinstance(intersect(a, b), Intersect)
        assert isinstance(difference(a, b), Difference)
        assert intersect(a, b).kind == ShapeKind.INTERSECT

    def test_regular_polygon_is_counter_clockwise(self):
        hexagon = regular_polygon((0.0, 0.0), 1.0, 6)
        vertices = hexagon.vertices
        area = 0.0
        for i, (x0, y0) in enumerate(vertices):
            x1, y1 = vertices[(i + 1) % len(vertices)]
            area += x0 * y1 - x1 * y0
        assert area > 0.0
        assert len(vertices) == 6

    def test_regular_polygon_validation(self):
        with pytest.raises(ValueError):
            regular_polygon((0.0, 0.0), 1.0, 2)
        with pytest.raises(ValueError):
            regular_polygon((0.0, 0.0), 0.0, 3)

    def test_rectangle_orders_corners(self):
        rect = rectangle(1.0, 1.0, 0.0, 0.0)
        assert rect.vertices == ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))

    def test_depth_and_node_count(self):
        a = Circle((0.0, 0.0), 1.0)
        tree = union(intersect(a, a), a)
        assert shape_depth(a) == 0
        assert shape_depth(tree) == 2
        assert shape_node_count(tree) == 5

    def test_depth_of_non_shape(self):
        with pytest.raises(TypeError):
            shape_depth(42)
