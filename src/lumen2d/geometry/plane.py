"""Half-plane primitive.

A half-plane is the region behind a line through ``point`` with unit
outward ``normal``. Rays crossing the line hit it from either side, and the
returned normal is always the fixed outward normal.
"""

import taichi as ti
import taichi.math as tm

from lumen2d.core.ray import EPSILON, vec2


@ti.func
def hit_half_plane(origin: vec2, direction: vec2, point: vec2, normal: vec2):
    """Intersect a ray with the boundary line of a half-plane.

    Solves (origin + t * direction - point) . normal = 0. Rays with
    |direction . normal| < EPSILON are treated as parallel and miss.

    Returns:
        Tuple (t, normal). t is -1 on a miss.
    """
    hit_t = -1.0
    denom = tm.dot(direction, normal)
    if ti.abs(denom) >= EPSILON:
        t = tm.dot(point - origin, normal) / denom
        if t > EPSILON:
            hit_t = t
    return hit_t, normal


@ti.func
def inside_half_plane(p: vec2, point: vec2, normal: vec2) -> ti.i32:
    """1 if p lies strictly on the negative side of the line."""
    return ti.select(tm.dot(p - point, normal) < 0.0, 1, 0)
