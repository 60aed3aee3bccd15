"""Host-side shape descriptions.

Shapes form a closed set of immutable value types. Primitives are
Circle, HalfPlane and ConvexPolygon; Union, Intersect and Difference combine
two child shapes into a tree. Each combinator owns its children, so a shape
is a finite tree with no sharing.

Shapes are plain Python data. ``lumen2d.geometry.csg.add_shape`` compiles a
shape into the Taichi node arena where kernels intersect it.

Example:
    >>> from lumen2d.geometry.shapes import Circle, intersect, shape_depth
    >>> lens = intersect(Circle((0.4, 0.5), 0.2), Circle((0.6, 0.5), 0.2))
    >>> shape_depth(lens)
    1
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Union as TypingUnion

Point = tuple[float, float]


class ShapeKind(IntEnum):
    """Node kind tag stored in the shape arena."""

    CIRCLE = 0
    HALF_PLANE = 1
    POLYGON = 2
    UNION = 3
    INTERSECT = 4
    DIFFERENCE = 5


def _check_children(shape) -> None:
    for child in (shape.a, shape.b):
        if not isinstance(child, PRIMITIVES + COMBINATORS):
            raise TypeError(f"{type(shape).__name__} child is not a shape: {child!r}")


def _check_point(name: str, p: Point) -> tuple[float, float]:
    if len(p) != 2:
        raise ValueError(f"{name} must have 2 components, got {len(p)}")
    x, y = float(p[0]), float(p[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"{name} = {p} must be finite")
    return x, y


@dataclass(frozen=True)
class Circle:
    """A disc given by center and radius.

    Raises:
        ValueError: If the radius is not positive or values are non-finite.
    """

    center: Point
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _check_point("center", self.center))
        if not math.isfinite(self.radius) or self.radius <= 0.0:
            raise ValueError(f"Circle radius = {self.radius} must be positive")

    kind = ShapeKind.CIRCLE


@dataclass(frozen=True)
class HalfPlane:
    """The half-plane behind a line, facing along its outward normal.

    The normal is normalized on construction. Points with
    (p - point) . normal < 0 are inside.

    Raises:
        ValueError: If the normal has zero length or values are non-finite.
    """

    point: Point
    normal: Point

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", _check_point("point", self.point))
        nx, ny = _check_point("normal", self.normal)
        norm = math.hypot(nx, ny)
        if norm < 1e-12:
            raise ValueError("HalfPlane normal must be non-zero")
        object.__setattr__(self, "normal", (nx / norm, ny / norm))

    kind = ShapeKind.HALF_PLANE


@dataclass(frozen=True)
class ConvexPolygon:
    """A convex polygon with counter-clockwise vertex order.

    Convexity and winding are preconditions and are not checked; a polygon
    needs at least 2 vertices.

    Raises:
        ValueError: If fewer than 2 vertices are given or values are
            non-finite.
    """

    vertices: tuple[Point, ...]

    def __post_init__(self) -> None:
        vertices = tuple(
            _check_point(f"vertices[{i}]", v) for i, v in enumerate(self.vertices)
        )
        if len(vertices) < 2:
            raise ValueError(
                f"ConvexPolygon needs at least 2 vertices, got {len(vertices)}"
            )
        object.__setattr__(self, "vertices", vertices)

    kind = ShapeKind.POLYGON


@dataclass(frozen=True)
class Union:
    """Points inside either child."""

    a: Shape
    b: Shape

    def __post_init__(self) -> None:
        _check_children(self)

    kind = ShapeKind.UNION


@dataclass(frozen=True)
class Intersect:
    """Points inside both children."""

    a: Shape
    b: Shape

    def __post_init__(self) -> None:
        _check_children(self)

    kind = ShapeKind.INTERSECT


@dataclass(frozen=True)
class Difference:
    """Points inside the first child and outside the second."""

    a: Shape
    b: Shape

    def __post_init__(self) -> None:
        _check_children(self)

    kind = ShapeKind.DIFFERENCE


Shape = TypingUnion[Circle, HalfPlane, ConvexPolygon, Union, Intersect, Difference]

PRIMITIVES = (Circle, HalfPlane, ConvexPolygon)
COMBINATORS = (Union, Intersect, Difference)


def union(a: Shape, b: Shape) -> Union:
    """Combine two shapes into their union."""
    return Union(a, b)


def intersect(a: Shape, b: Shape) -> Intersect:
    """Combine two shapes into their intersection."""
    return Intersect(a, b)


def difference(a: Shape, b: Shape) -> Difference:
    """Subtract shape b from shape a."""
    return Difference(a, b)


def regular_polygon(
    center: Point, radius: float, sides: int, rotation: float = 0.0
) -> ConvexPolygon:
    """Build a regular polygon with counter-clockwise winding.

    Args:
        center: Center of the circumscribed circle.
        radius: Circumradius.
        sides: Number of sides (>= 3).
        rotation: Angle of the first vertex in radians.

    Raises:
        ValueError: If sides < 3 or radius is not positive.
    """
    if sides < 3:
        raise ValueError(f"A regular polygon needs at least 3 sides, got {sides}")
    if radius <= 0.0:
        raise ValueError(f"radius = {radius} must be positive")
    cx, cy = center
    step = 2.0 * math.pi / sides
    vertices = []
    for i in range(sides):
        angle = rotation + i * step
        vertices.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return ConvexPolygon(tuple(vertices))


def rectangle(x0: float, y0: float, x1: float, y1: float) -> ConvexPolygon:
    """Axis-aligned rectangle between two corners, wound counter-clockwise."""
    left, right = min(x0, x1), max(x0, x1)
    bottom, top = min(y0, y1), max(y0, y1)
    return ConvexPolygon(((left, bottom), (right, bottom), (right, top), (left, top)))


def shape_depth(shape: Shape) -> int:
    """Height of a shape tree; a primitive has depth 0."""
    if isinstance(shape, PRIMITIVES):
        return 0
    if isinstance(shape, COMBINATORS):
        return 1 + max(shape_depth(shape.a), shape_depth(shape.b))
    raise TypeError(f"Not a shape: {shape!r}")


def shape_node_count(shape: Shape) -> int:
    """Number of arena nodes a shape compiles to."""
    if isinstance(shape, PRIMITIVES):
        return 1
    if isinstance(shape, COMBINATORS):
        return 1 + shape_node_count(shape.a) + shape_node_count(shape.b)
    raise TypeError(f"Not a shape: {shape!r}")
