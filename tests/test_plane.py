"""Unit tests for half-plane intersection and containment."""

import numpy as np
import pytest


def _shoot(shape, origin, direction):
    from lumen2d.geometry.csg import add_shape, intersect_rays

    root = add_shape(shape)
    t, normals = intersect_rays(root, [origin], [direction])
    return t[0], normals[0]


class TestHalfPlaneIntersection:
    """Tests for ray/half-plane intersection."""

    def test_hit_from_outside(self):
        from lumen2d.geometry.shapes import HalfPlane

        t, n = _shoot(HalfPlane((0.0, 0.0), (0.0, 1.0)), (0.0, 2.0), (0.0, -1.0))
        assert t == pytest.approx(2.0)
        assert n == pytest.approx([0.0, 1.0])

    def test_hit_from_inside_keeps_fixed_normal(self):
        from lumen2d.geometry.shapes import HalfPlane

        t, n = _shoot(HalfPlane((0.0, 0.0), (0.0, 1.0)), (0.0, -1.0), (0.0, 0.5))
        assert t == pytest.approx(2.0)
        assert n == pytest.approx([0.0, 1.0])

    def test_parallel_ray_misses(self):
        from lumen2d.geometry.shapes import HalfPlane

        t, _ = _shoot(HalfPlane((0.0, 0.0), (0.0, 1.0)), (0.0, 1.0), (1.0, 0.0))
        assert t < 0.0

    def test_plane_behind_ray_misses(self):
        from lumen2d.geometry.shapes import HalfPlane

        t, _ = _shoot(HalfPlane((0.0, 0.0), (0.0, 1.0)), (0.0, 1.0), (0.0, 1.0))
        assert t < 0.0

    def test_oblique_plane(self):
        from lumen2d.geometry.shapes import HalfPlane

        t, n = _shoot(HalfPlane((1.0, 1.0), (1.0, 1.0)), (0.0, 0.0), (1.0, 0.0))
        assert t == pytest.approx(2.0)
        assert n == pytest.approx([np.sqrt(0.5), np.sqrt(0.5)])


class TestHalfPlaneContainment:
    """Inside means the negative side of the plane."""

    def test_containment_matches_sign(self):
        from lumen2d.geometry.csg import add_shape, contains_points
        from lumen2d.geometry.shapes import HalfPlane

        plane = HalfPlane((0.2, -0.1), (0.6, 0.8))
        root = add_shape(plane)
        rng = np.random.default_rng(3)
        points = rng.uniform(-2.0, 2.0, size=(500, 2))
        inside = contains_points(root, points)
        signed = (points - np.array(plane.point)) @ np.array(plane.normal)
        assert np.array_equal(inside, signed < 0.0)
