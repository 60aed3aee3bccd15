"""Shape arena and constructive solid geometry evaluation.

Shapes are compiled into a flat node arena stored in Taichi fields. Nodes
are written in post-order, so every subtree occupies a contiguous index
range ``[node_first[root], root]`` and a combinator's right child is always
``root - 1``. Containment walks that range with a small explicit stack
instead of recursing: primitives push their own result and combinators pop
two child results and push the combined one.

Ray intersection steps through the primitive crossings of the range in ray
order and keeps the first one every ancestor accepts:
    - Union: every child crossing counts
    - Intersect: a child crossing counts only if its point is inside the
      other child
    - Difference: crossings of the first child count when outside the
      second; crossings of the second child count when inside the first and
      carry the reversed normal

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.geometry.csg import add_shape, contains_points
    >>> from lumen2d.geometry.shapes import Circle, intersect
    >>> root = add_shape(intersect(Circle((0.0, 0.0), 1.0), Circle((1.0, 0.0), 1.0)))
    >>> contains_points(root, [[0.5, 0.0], [2.0, 0.0]])
    array([ True, False])
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from lumen2d.core.ray import vec2
from lumen2d.geometry.circle import hit_circle, inside_circle
from lumen2d.geometry.plane import hit_half_plane, inside_half_plane
from lumen2d.geometry.polygon import (
    MAX_POLYGON_VERTICES,
    add_polygon_vertices,
    clear_polygon_vertices,
    get_polygon_vertex_count,
    hit_polygon,
    inside_polygon,
)
from lumen2d.geometry.shapes import (
    COMBINATORS,
    Circle,
    ConvexPolygon,
    HalfPlane,
    Shape,
    ShapeKind,
    shape_depth,
    shape_node_count,
)

# Maximum height of a shape tree; bounds the evaluation stack
MAX_SHAPE_DEPTH = 15
SHAPE_STACK_SIZE = MAX_SHAPE_DEPTH + 1

MAX_SHAPE_NODES = 4096

_CIRCLE = int(ShapeKind.CIRCLE)
_HALF_PLANE = int(ShapeKind.HALF_PLANE)
_POLYGON = int(ShapeKind.POLYGON)
_UNION = int(ShapeKind.UNION)
_INTERSECT = int(ShapeKind.INTERSECT)
_DIFFERENCE = int(ShapeKind.DIFFERENCE)

# Node storage: Structure of Arrays layout
# Circle params: (cx, cy, radius, 0); half-plane params: (px, py, nx, ny)
node_kind = ti.field(dtype=ti.i32, shape=MAX_SHAPE_NODES)
node_first = ti.field(dtype=ti.i32, shape=MAX_SHAPE_NODES)
node_params = ti.Vector.field(4, dtype=ti.f64, shape=MAX_SHAPE_NODES)
node_vertex_start = ti.field(dtype=ti.i32, shape=MAX_SHAPE_NODES)
node_vertex_count = ti.field(dtype=ti.i32, shape=MAX_SHAPE_NODES)
num_nodes = ti.field(dtype=ti.i32, shape=())


def clear_shapes() -> None:
    """Clear the node arena and the polygon vertex pool."""
    num_nodes[None] = 0
    clear_polygon_vertices()


def get_shape_node_count() -> int:
    """Get the number of nodes in the arena."""
    return int(num_nodes[None])


def _count_vertices(shape: Shape) -> int:
    if isinstance(shape, ConvexPolygon):
        return len(shape.vertices)
    if isinstance(shape, COMBINATORS):
        return _count_vertices(shape.a) + _count_vertices(shape.b)
    return 0


def _write_node(
    kind: int,
    first: int,
    params: tuple[float, float, float, float],
    vstart: int = 0,
    vcount: int = 0,
) -> int:
    idx = num_nodes[None]
    node_kind[idx] = kind
    node_first[idx] = first
    node_params[idx] = list(params)
    node_vertex_start[idx] = vstart
    node_vertex_count[idx] = vcount
    num_nodes[None] = idx + 1
    return idx


def _emit(shape: Shape) -> int:
    first = num_nodes[None]
    if isinstance(shape, Circle):
        cx, cy = shape.center
        return _write_node(_CIRCLE, first, (cx, cy, shape.radius, 0.0))
    if isinstance(shape, HalfPlane):
        px, py = shape.point
        nx, ny = shape.normal
        return _write_node(_HALF_PLANE, first, (px, py, nx, ny))
    if isinstance(shape, ConvexPolygon):
        vstart = add_polygon_vertices(shape.vertices)
        return _write_node(_POLYGON, first, (0.0, 0.0, 0.0, 0.0), vstart, len(shape.vertices))
    _emit(shape.a)
    _emit(shape.b)
    return _write_node(int(shape.kind), first, (0.0, 0.0, 0.0, 0.0))


def add_shape(shape: Shape) -> int:
    """Compile a shape tree into the arena.

    Args:
        shape: The shape to compile.

    Returns:
        The arena index of the shape's root node.

    Raises:
        ValueError: If the tree is deeper than MAX_SHAPE_DEPTH.
        RuntimeError: If the node arena or vertex pool would overflow.
        TypeError: If the argument is not a shape.
    """
    depth = shape_depth(shape)
    if depth > MAX_SHAPE_DEPTH:
        raise ValueError(
            f"Shape tree depth {depth} exceeds the maximum of {MAX_SHAPE_DEPTH}"
        )
    if num_nodes[None] + shape_node_count(shape) > MAX_SHAPE_NODES:
        raise RuntimeError(f"Maximum number of shape nodes ({MAX_SHAPE_NODES}) exceeded")
    if get_polygon_vertex_count() + _count_vertices(shape) > MAX_POLYGON_VERTICES:
        raise RuntimeError(
            f"Maximum number of polygon vertices ({MAX_POLYGON_VERTICES}) exceeded"
        )
    return _emit(shape)


# =============================================================================
# Primitive Dispatch
# =============================================================================


@ti.func
def _hit_primitive(k: ti.i32, origin: vec2, direction: vec2):
    kind = node_kind[k]
    params = node_params[k]
    t = -1.0
    normal = vec2(0.0, 0.0)
    if kind == _CIRCLE:
        t, normal = hit_circle(origin, direction, vec2(params[0], params[1]), params[2])
    elif kind == _HALF_PLANE:
        t, normal = hit_half_plane(
            origin, direction, vec2(params[0], params[1]), vec2(params[2], params[3])
        )
    elif kind == _POLYGON:
        t, normal = hit_polygon(origin, direction, node_vertex_start[k], node_vertex_count[k])
    return t, normal


@ti.func
def _inside_primitive(k: ti.i32, p: vec2) -> ti.i32:
    kind = node_kind[k]
    params = node_params[k]
    inside = 0
    if kind == _CIRCLE:
        inside = inside_circle(p, vec2(params[0], params[1]), params[2])
    elif kind == _HALF_PLANE:
        inside = inside_half_plane(p, vec2(params[0], params[1]), vec2(params[2], params[3]))
    elif kind == _POLYGON:
        inside = inside_polygon(p, node_vertex_start[k], node_vertex_count[k])
    return inside


# =============================================================================
# Tree Evaluation
# =============================================================================


@ti.func
def shape_contains(root: ti.i32, p: vec2) -> ti.i32:
    """1 if p lies strictly inside the shape rooted at ``root``.

    Union is a logical OR of the children, Intersect an AND, Difference
    ``a and not b``.
    """
    stack = ti.Vector([0 for _ in range(SHAPE_STACK_SIZE)], dt=ti.i32)
    sp = 0
    for k in range(node_first[root], root + 1):
        kind = node_kind[k]
        value = 0
        if kind <= _POLYGON:
            value = _inside_primitive(k, p)
        else:
            b = stack[sp - 1]
            a = stack[sp - 2]
            sp -= 2
            if kind == _UNION:
                value = ti.select(a == 1 or b == 1, 1, 0)
            elif kind == _INTERSECT:
                value = ti.select(a == 1 and b == 1, 1, 0)
            else:
                value = ti.select(a == 1 and b == 0, 1, 0)
        stack[sp] = value
        sp += 1
    return stack[0]


@ti.func
def _nearest_crossing(first: ti.i32, root: ti.i32, origin: vec2, direction: vec2):
    """Nearest primitive boundary crossing in ``[first, root]``.

    Returns (t, normal, k); k is -1 when no primitive is crossed. Ties keep
    the lower node index.
    """
    best_t = -1.0
    best_n = vec2(0.0, 0.0)
    best_k = -1
    for k in range(first, root + 1):
        if node_kind[k] <= _POLYGON:
            t, normal = _hit_primitive(k, origin, direction)
            if t > 0.0 and (best_k < 0 or t < best_t):
                best_t = t
                best_n = normal
                best_k = k
    return best_t, best_n, best_k


@ti.func
def _accept_crossing(root: ti.i32, k: ti.i32, p: vec2):
    """Check a crossing of primitive ``k`` at ``p`` against every ancestor.

    Walks from ``root`` down to ``k``. Returns (ok, flip) where ``flip`` is
    1 when the crossing lies on an odd number of Difference cutters and its
    normal must be reversed.
    """
    ok = 1
    flip = 0
    node = root
    while node != k:
        kind = node_kind[node]
        right = node - 1
        left = node_first[right] - 1
        in_right = k >= node_first[right]
        if kind == _INTERSECT:
            ok = shape_contains(ti.select(in_right, left, right), p)
        elif kind == _DIFFERENCE:
            if in_right:
                ok = shape_contains(left, p)
                flip = 1 - flip
            else:
                ok = 1 - shape_contains(right, p)
        if ok == 0:
            break
        node = ti.select(in_right, right, left)
    return ok, flip


@ti.func
def intersect_shape(root: ti.i32, origin: vec2, direction: vec2):
    """Intersect a ray with the shape rooted at ``root``.

    Primitive crossings are visited in ray order. Each one is tested against
    the combinator rules of every ancestor and the first accepted crossing is
    the hit, so a child's farther crossings are still found when its nearest
    one is cut away.

    Args:
        root: Arena index of the shape's root node.
        origin: The starting point of the ray.
        direction: The ray direction (need not be unit length).

    Returns:
        Tuple (t, normal) for the closest valid boundary crossing with
        t > EPSILON; t is -1 on a miss. The normal is unit length and points
        out of the shape's region.
    """
    first = node_first[root]
    t = -1.0
    normal = vec2(0.0, 0.0)
    offset = 0.0
    # Convex primitives cross a line at most twice
    for _ in range(2 * (root - first + 1)):
        step, n, k = _nearest_crossing(first, root, origin + offset * direction, direction)
        if k < 0:
            break
        offset += step
        ok, flip = _accept_crossing(root, k, origin + offset * direction)
        if ok == 1:
            t = offset
            normal = n
            if flip == 1:
                normal = -n
            break
    return t, normal


# =============================================================================
# Host-side Batch Queries
# =============================================================================


@ti.kernel
def _contains_kernel(
    root: ti.i32,
    points: ti.types.ndarray(dtype=ti.f64, ndim=2),
    out: ti.types.ndarray(dtype=ti.i32, ndim=1),
):
    for i in range(points.shape[0]):
        out[i] = shape_contains(root, vec2(points[i, 0], points[i, 1]))


@ti.kernel
def _intersect_kernel(
    root: ti.i32,
    origins: ti.types.ndarray(dtype=ti.f64, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f64, ndim=2),
    out_t: ti.types.ndarray(dtype=ti.f64, ndim=1),
    out_normals: ti.types.ndarray(dtype=ti.f64, ndim=2),
):
    for i in range(origins.shape[0]):
        t, normal = intersect_shape(
            root,
            vec2(origins[i, 0], origins[i, 1]),
            vec2(directions[i, 0], directions[i, 1]),
        )
        out_t[i] = t
        out_normals[i, 0] = normal.x
        out_normals[i, 1] = normal.y


def _as_points(values: npt.ArrayLike, name: str) -> npt.NDArray[np.float64]:
    array = np.ascontiguousarray(np.asarray(values, dtype=np.float64).reshape(-1, 2))
    if not np.all(np.isfinite(array)):
        raise ValueError(f"{name} must be finite")
    return array


def contains_points(root: int, points: npt.ArrayLike) -> npt.NDArray[np.bool_]:
    """Evaluate containment of many points against one shape.

    Args:
        root: Arena index returned by add_shape.
        points: Array-like of shape (N, 2).

    Returns:
        Boolean array of shape (N,).
    """
    pts = _as_points(points, "points")
    out = np.zeros(pts.shape[0], dtype=np.int32)
    if pts.shape[0] > 0:
        _contains_kernel(root, pts, out)
    return out.astype(bool)


def intersect_rays(
    root: int, origins: npt.ArrayLike, directions: npt.ArrayLike
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Intersect many rays with one shape.

    Args:
        root: Arena index returned by add_shape.
        origins: Array-like of shape (N, 2).
        directions: Array-like of shape (N, 2).

    Returns:
        Tuple (t, normals): t has shape (N,) with -1 for misses, normals
        has shape (N, 2).

    Raises:
        ValueError: If origins and directions differ in length.
    """
    o = _as_points(origins, "origins")
    d = _as_points(directions, "directions")
    if o.shape != d.shape:
        raise ValueError(f"origins {o.shape} and directions {d.shape} must match")
    out_t = np.full(o.shape[0], -1.0, dtype=np.float64)
    out_n = np.zeros_like(o)
    if o.shape[0] > 0:
        _intersect_kernel(root, o, d, out_t, out_n)
    return out_t, out_n
