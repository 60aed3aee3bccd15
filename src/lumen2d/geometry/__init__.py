"""Geometry module for 2-D shape primitives and boolean composition.

Components:
    shapes: Immutable host-side shape descriptions and combinators
    circle: Circle primitive with robust ray-circle intersection
    plane: Half-plane primitive
    polygon: Convex polygon primitive and the shared vertex pool
    csg: Node arena and stack-based evaluation of shape trees

Every shape supports two queries, implemented as Taichi functions:

    t, normal = intersect_shape(root, origin, direction)
    inside = shape_contains(root, point)

A miss is reported as t = -1. Normals are unit length and point out of the
shape's region; the tracer orients them against the incoming ray.

Only the shape descriptions are imported here; ``polygon`` and ``csg``
declare Taichi fields and must be imported after ``lumen2d.init()``.
"""

from .shapes import (
    Circle,
    ConvexPolygon,
    Difference,
    HalfPlane,
    Intersect,
    Shape,
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

__all__ = [
    "Shape",
    "ShapeKind",
    "Circle",
    "HalfPlane",
    "ConvexPolygon",
    "Union",
    "Intersect",
    "Difference",
    "union",
    "intersect",
    "difference",
    "regular_polygon",
    "rectangle",
    "shape_depth",
    "shape_node_count",
]
