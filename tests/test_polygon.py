"""Unit tests for convex polygon intersection and containment.

Tests cover:
- Edge crossings from outside and inside
- Outward edge normals
- Rays through vertices and along edges (single, stable result)
- Degenerate two-vertex polygons
- Vertex pool bookkeeping
"""

import numpy as np
import pytest


def _shoot(shape, origin, direction):
    from lumen2d.geometry.csg import add_shape, intersect_rays

    root = add_shape(shape)
    t, normals = intersect_rays(root, [origin], [direction])
    return t[0], normals[0]


class TestPolygonIntersection:
    """Tests for ray/polygon intersection."""

    def test_hit_square_from_outside(self):
        from lumen2d.geometry.shapes import rectangle

        t, n = _shoot(rectangle(0.0, 0.0, 1.0, 1.0), (-1.0, 0.5), (1.0, 0.0))
        assert t == pytest.approx(1.0)
        assert n == pytest.approx([-1.0, 0.0])

    def test_hit_square_from_inside(self):
        from lumen2d.geometry.shapes import rectangle

        t, n = _shoot(rectangle(0.0, 0.0, 1.0, 1.0), (0.5, 0.5), (1.0, 0.0))
        assert t == pytest.approx(0.5)
        assert n == pytest.approx([1.0, 0.0])

    def test_miss(self):
        from lumen2d.geometry.shapes import rectangle

        t, _ = _shoot(rectangle(0.0, 0.0, 1.0, 1.0), (-1.0, 2.0), (1.0, 0.0))
        assert t < 0.0

    def test_triangle_outward_normals(self):
        from lumen2d.geometry.shapes import ConvexPolygon

        triangle = ConvexPolygon(((0.0, 0.0), (2.0, 0.0), (0.0, 2.0)))
        t, n = _shoot(triangle, (2.0, 2.0), (-1.0, -1.0))
        assert t == pytest.approx(1.0)
        assert n == pytest.approx([np.sqrt(0.5), np.sqrt(0.5)])

    def test_ray_through_vertices_hits_once(self):
        """A diagonal through two corners resolves to the nearer corner."""
        from lumen2d.geometry.shapes import rectangle

        t, n = _shoot(rectangle(0.0, 0.0, 1.0, 1.0), (-1.0, -1.0), (1.0, 1.0))
        assert t == pytest.approx(1.0)
        assert np.linalg.norm(n) == pytest.approx(1.0, abs=1e-9)

    def test_ray_grazing_edge(self):
        """A ray running along an edge does not crash or double count."""
        from lumen2d.geometry.shapes import rectangle

        t, n = _shoot(rectangle(0.0, 0.0, 1.0, 1.0), (-1.0, 0.0), (1.0, 0.0))
        assert np.isfinite(t)
        if t > 0.0:
            assert t == pytest.approx(1.0)
            assert np.linalg.norm(n) == pytest.approx(1.0, abs=1e-9)

    def test_segment_polygon(self):
        from lumen2d.geometry.shapes import ConvexPolygon

        segment = ConvexPolygon(((0.0, -1.0), (0.0, 1.0)))
        t, n = _shoot(segment, (-1.0, 0.0), (1.0, 0.0))
        assert t == pytest.approx(1.0)
        assert abs(n[0]) == pytest.approx(1.0)

    def test_normals_are_unit_length(self):
        from lumen2d.geometry.csg import add_shape, intersect_rays
        from lumen2d.geometry.shapes import regular_polygon

        root = add_shape(regular_polygon((0.0, 0.0), 1.0, 7, rotation=0.3))
        rng = np.random.default_rng(4)
        origins = rng.uniform(-2.0, 2.0, size=(400, 2))
        angles = rng.uniform(0.0, 2.0 * np.pi, size=400)
        directions = np.stack([np.cos(angles), np.sin(angles)], axis=1)
        t, normals = intersect_rays(root, origins, directions)
        hits = t > 0.0
        assert hits.any()
        assert np.allclose(np.linalg.norm(normals[hits], axis=1), 1.0, atol=1e-9)


class TestPolygonContainment:
    """Tests for inside_polygon through the arena."""

    def test_square_containment(self):
        from lumen2d.geometry.csg import add_shape, contains_points
        from lumen2d.geometry.shapes import rectangle

        root = add_shape(rectangle(0.0, 0.0, 1.0, 1.0))
        rng = np.random.default_rng(5)
        points = rng.uniform(-0.5, 1.5, size=(500, 2))
        expected = np.all((points > 0.0) & (points < 1.0), axis=1)
        assert np.array_equal(contains_points(root, points), expected)

    def test_edge_point_is_not_inside(self):
        from lumen2d.geometry.csg import add_shape, contains_points
        from lumen2d.geometry.shapes import rectangle

        root = add_shape(rectangle(0.0, 0.0, 1.0, 1.0))
        assert not contains_points(root, [[0.0, 0.5]])[0]

    def test_segment_has_no_interior(self):
        from lumen2d.geometry.csg import add_shape, contains_points
        from lumen2d.geometry.shapes import ConvexPolygon

        root = add_shape(ConvexPolygon(((0.0, -1.0), (0.0, 1.0))))
        assert not contains_points(root, [[0.0, 0.0], [0.1, 0.0], [-0.1, 0.0]]).any()


class TestVertexPool:
    """Tests for the shared polygon vertex pool."""

    def test_vertices_are_appended(self):
        from lumen2d.geometry.csg import add_shape
        from lumen2d.geometry.polygon import get_polygon_vertex_count
        from lumen2d.geometry.shapes import rectangle, regular_polygon

        add_shape(rectangle(0.0, 0.0, 1.0, 1.0))
        add_shape(regular_polygon((0.0, 0.0), 1.0, 5))
        assert get_polygon_vertex_count() == 9

    def test_clear_shapes_resets_pool(self):
        from lumen2d.geometry.csg import add_shape, clear_shapes, get_shape_node_count
        from lumen2d.geometry.polygon import get_polygon_vertex_count
        from lumen2d.geometry.shapes import rectangle

        add_shape(rectangle(0.0, 0.0, 1.0, 1.0))
        clear_shapes()
        assert get_polygon_vertex_count() == 0
        assert get_shape_node_count() == 0
