"""Convex polygon primitive.

Polygon vertices live in a shared Taichi field; each polygon node refers to
a contiguous slice ``[start, start + count)`` in counter-clockwise order.
Edges run from vertex i to vertex (i + 1) mod count, and the interior lies
to the left of every edge.

An edge is a crossing candidate when its two endpoints fall on opposite
sides of the ray's supporting line. The side test is half-open (positive
versus non-positive), so a ray passing exactly through a shared vertex is
never counted twice with different parameters.
"""

import taichi as ti
import taichi.math as tm

from lumen2d.core.ray import EPSILON, cross2, perp, vec2

MAX_POLYGON_VERTICES = 4096

polygon_vertices = ti.Vector.field(2, dtype=ti.f64, shape=MAX_POLYGON_VERTICES)
num_polygon_vertices = ti.field(dtype=ti.i32, shape=())


def clear_polygon_vertices() -> None:
    """Reset the vertex pool."""
    num_polygon_vertices[None] = 0


def add_polygon_vertices(vertices: tuple[tuple[float, float], ...]) -> int:
    """Append a polygon's vertices to the pool.

    Args:
        vertices: Counter-clockwise vertex list.

    Returns:
        Index of the first stored vertex.

    Raises:
        RuntimeError: If the vertex pool would overflow.
    """
    start = num_polygon_vertices[None]
    if start + len(vertices) > MAX_POLYGON_VERTICES:
        raise RuntimeError(
            f"Maximum number of polygon vertices ({MAX_POLYGON_VERTICES}) exceeded"
        )
    for k, (x, y) in enumerate(vertices):
        polygon_vertices[start + k] = [x, y]
    num_polygon_vertices[None] = start + len(vertices)
    return start


def get_polygon_vertex_count() -> int:
    """Get the number of vertices stored in the pool."""
    return int(num_polygon_vertices[None])


@ti.func
def hit_polygon(origin: vec2, direction: vec2, start: ti.i32, count: ti.i32):
    """Intersect a ray with a convex polygon's edges.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction (need not be unit length).
        start: Index of the first vertex in the pool.
        count: Number of vertices (>= 2).

    Returns:
        Tuple (t, normal) for the closest crossing with t > EPSILON; t is
        -1 on a miss. The normal is the edge's outward unit normal.
    """
    best_t = -1.0
    best_normal = vec2(0.0, 0.0)

    for k in range(count):
        a = polygon_vertices[start + k]
        b = polygon_vertices[start + (k + 1) % count]
        side_a = cross2(direction, a - origin)
        side_b = cross2(direction, b - origin)

        if (side_a > 0.0) != (side_b > 0.0):
            edge = b - a
            denom = cross2(direction, edge)
            if ti.abs(denom) > EPSILON * tm.sqrt(tm.dot(edge, edge)):
                t = cross2(a - origin, edge) / denom
                if t > EPSILON and (best_t < 0.0 or t < best_t):
                    best_t = t
                    best_normal = tm.normalize(perp(edge))

    return best_t, best_normal


@ti.func
def inside_polygon(p: vec2, start: ti.i32, count: ti.i32) -> ti.i32:
    """1 if p lies strictly left of every edge, 0 otherwise."""
    inside = 1
    for k in range(count):
        a = polygon_vertices[start + k]
        b = polygon_vertices[start + (k + 1) % count]
        if cross2(b - a, p - a) <= 0.0:
            inside = 0
    return inside
