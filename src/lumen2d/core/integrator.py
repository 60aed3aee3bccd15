"""Recursive radiance tracer and stratified pixel sampler.

This module computes the radiance arriving along a ray in a 2-D scene lit
only by emissive materials. At every hit the surface's emission is added,
then light is split between a reflected and a refracted child ray:

    L = T * (emissive + r * L_reflected + (1 - r) * L_refracted)

where r is the mirror reflectivity (opaque materials) or the Schlick
reflectance (refractive materials), and T is the Beer-Lambert transmittance
of the path when the ray travelled inside a medium to reach the hit.

Taichi functions cannot recurse, so the recursion is evaluated with an
explicit depth-first stack. Each entry carries a ray, its depth and the
product of every weight on the path from the root; the emission of each hit
is scaled by that product. The sum equals the recursive formula exactly.

Key features:
    - Normal orientation by the sign of direction . normal
    - Refraction with total internal reflection forcing full reflectance
    - Child rays offset by BIAS off the surface (outward for reflection,
      inward for refraction)
    - Depth cutoff at max_depth; the partial radiance is returned
    - Stratified sampling: sample i of n uses angle 2 pi (i + u_i) / n

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.geometry.shapes import Circle
    >>> from lumen2d.scene.manager import SceneManager
    >>> from lumen2d.core.integrator import trace_ray
    >>> scene = SceneManager()
    >>> scene.add_emitter(Circle((1.0, 0.0), 0.5), emissive=(10.0, 10.0, 10.0))
    0
    >>> trace_ray((0.0, 0.0), (1.0, 0.0))
    (10.0, 10.0, 10.0)
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from lumen2d.core.ray import color3, normalize, vec2
from lumen2d.materials.optics import beer_lambert, reflect, refract, schlick_reflectance
from lumen2d.scene.intersection import SceneHitRecord, intersect_scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Default recursion depth (number of reflection/refraction bounces)
MAX_DEPTH = 3

# Largest supported depth; bounds the tracer stack
MAX_DEPTH_LIMIT = 8

# Child ray offset along the oriented normal
BIAS = 1e-4

# Default number of angular samples per pixel
DEFAULT_SAMPLES = 64

# Background radiance for rays that escape the scene
BACKGROUND_COLOR = (0.0, 0.0, 0.0)

# Depth-first evaluation pushes at most one extra entry per level
TRACE_STACK_SIZE = MAX_DEPTH_LIMIT + 2


@ti.dataclass
class Interaction:
    """Optical response of a surface hit.

    Attributes:
        sign: +1 when the ray hits the outside of the shape, -1 when it hits
            from inside.
        normal: Unit normal oriented against the incoming ray.
        branches: 1 if child rays are spawned at this hit, 0 otherwise.
        reflectance: Weight of the reflected child ray.
        refracted: 1 if a refracted child ray is spawned.
        reflect_origin: Origin of the reflected ray (offset outward).
        reflect_direction: Unit direction of the reflected ray.
        refract_origin: Origin of the refracted ray (offset inward).
        refract_direction: Unit direction of the refracted ray.
        transmittance: Beer-Lambert factor applied to everything gathered
            at this hit.
    """

    sign: ti.f64
    normal: vec2
    branches: ti.i32
    reflectance: ti.f64
    refracted: ti.i32
    reflect_origin: vec2
    reflect_direction: vec2
    refract_origin: vec2
    refract_direction: vec2
    transmittance: color3


def _check_max_depth(max_depth: int) -> None:
    if not 0 <= max_depth <= MAX_DEPTH_LIMIT:
        raise ValueError(f"max_depth = {max_depth} must be in [0, {MAX_DEPTH_LIMIT}]")


# =============================================================================
# Surface Interaction
# =============================================================================


@ti.func
def shade_hit(
    rec: SceneHitRecord, direction: vec2, depth: ti.i32, max_depth: ti.i32
) -> Interaction:
    """Compute the reflection/refraction split at a hit.

    Args:
        rec: The scene hit (must have hit == 1).
        direction: Direction of the incoming ray; normalized here.
        depth: Depth of the incoming ray.
        max_depth: Depth at which child rays are no longer spawned.

    Returns:
        The Interaction describing the child rays and the transmittance.
    """
    d = normalize(direction)
    sign = 1.0
    if tm.dot(d, rec.normal) >= 0.0:
        sign = -1.0
    n = rec.normal * sign

    branches = 0
    reflectance = rec.reflectivity
    refracted = 0
    refract_direction = vec2(0.0, 0.0)

    if depth < max_depth and (rec.reflectivity > 0.0 or rec.eta > 0.0):
        branches = 1
        if rec.eta > 0.0:
            # Leaving the medium goes from eta to 1, entering from 1 to eta
            ratio = 1.0 / rec.eta
            eta_from = 1.0
            eta_to = rec.eta
            if sign < 0.0:
                ratio = rec.eta
                eta_from = rec.eta
                eta_to = 1.0

            ok, transmitted = refract(d, n, ratio)
            if ok == 1:
                refracted = 1
                refract_direction = normalize(transmitted)
                cos_incident = -tm.dot(d, n)
                cos_transmitted = -tm.dot(refract_direction, n)
                reflectance = schlick_reflectance(
                    cos_incident, cos_transmitted, eta_from, eta_to
                )
            else:
                reflectance = 1.0

    transmittance = color3(1.0, 1.0, 1.0)
    if sign < 0.0:
        transmittance = beer_lambert(rec.absorption, rec.distance)

    return Interaction(
        sign=sign,
        normal=n,
        branches=branches,
        reflectance=reflectance,
        refracted=refracted,
        reflect_origin=rec.point + n * BIAS,
        reflect_direction=reflect(d, n),
        refract_origin=rec.point - n * BIAS,
        refract_direction=refract_direction,
        transmittance=transmittance,
    )


# =============================================================================
# Tracing Core
# =============================================================================


@ti.func
def trace(origin: vec2, direction: vec2, depth: ti.i32, max_depth: ti.i32) -> color3:
    """Trace a ray and return the radiance arriving along it.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction (need not be unit length).
        depth: Depth of this ray; 0 for primary rays.
        max_depth: Depth beyond which no child rays are spawned.

    Returns:
        The radiance (RGB). Black when nothing is hit.
    """
    stack_ox = ti.Vector([0.0 for _ in range(TRACE_STACK_SIZE)], dt=ti.f64)
    stack_oy = ti.Vector([0.0 for _ in range(TRACE_STACK_SIZE)], dt=ti.f64)
    stack_dx = ti.Vector([0.0 for _ in range(TRACE_STACK_SIZE)], dt=ti.f64)
    stack_dy = ti.Vector([0.0 for _ in range(TRACE_STACK_SIZE)], dt=ti.f64)
    stack_wr = ti.Vector([0.0 for _ in range(TRACE_STACK_SIZE)], dt=ti.f64)
    stack_wg = ti.Vector([0.0 for _ in range(TRACE_STACK_SIZE)], dt=ti.f64)
    stack_wb = ti.Vector([0.0 for _ in range(TRACE_STACK_SIZE)], dt=ti.f64)
    stack_depth = ti.Vector([0 for _ in range(TRACE_STACK_SIZE)], dt=ti.i32)

    radiance = color3(BACKGROUND_COLOR[0], BACKGROUND_COLOR[1], BACKGROUND_COLOR[2])

    stack_ox[0] = origin.x
    stack_oy[0] = origin.y
    stack_dx[0] = direction.x
    stack_dy[0] = direction.y
    stack_wr[0] = 1.0
    stack_wg[0] = 1.0
    stack_wb[0] = 1.0
    stack_depth[0] = depth
    sp = 1

    while sp > 0:
        sp -= 1
        o = vec2(stack_ox[sp], stack_oy[sp])
        d = vec2(stack_dx[sp], stack_dy[sp])
        weight = color3(stack_wr[sp], stack_wg[sp], stack_wb[sp])
        ray_depth = stack_depth[sp]

        rec = intersect_scene(o, d)
        if rec.hit == 1:
            hit = shade_hit(rec, d, ray_depth, max_depth)
            weight *= hit.transmittance
            radiance += weight * rec.emissive

            if hit.branches == 1:
                if hit.refracted == 1:
                    w = weight * (1.0 - hit.reflectance)
                    stack_ox[sp] = hit.refract_origin.x
                    stack_oy[sp] = hit.refract_origin.y
                    stack_dx[sp] = hit.refract_direction.x
                    stack_dy[sp] = hit.refract_direction.y
                    stack_wr[sp] = w.x
                    stack_wg[sp] = w.y
                    stack_wb[sp] = w.z
                    stack_depth[sp] = ray_depth + 1
                    sp += 1
                if hit.reflectance > 0.0:
                    w = weight * hit.reflectance
                    stack_ox[sp] = hit.reflect_origin.x
                    stack_oy[sp] = hit.reflect_origin.y
                    stack_dx[sp] = hit.reflect_direction.x
                    stack_dy[sp] = hit.reflect_direction.y
                    stack_wr[sp] = w.x
                    stack_wg[sp] = w.y
                    stack_wb[sp] = w.z
                    stack_depth[sp] = ray_depth + 1
                    sp += 1

    return radiance


@ti.func
def stratified_direction(i: ti.i32, n: ti.i32, u: ti.f64) -> vec2:
    """Direction of angular sample i of n with jitter u in [0, 1).

    The angle is 2 pi (i + u) / n, so sample i stays inside stratum i.
    """
    angle = 2.0 * math.pi * (ti.cast(i, ti.f64) + u) / ti.cast(n, ti.f64)
    return vec2(tm.cos(angle), tm.sin(angle))


@ti.func
def _sanitize(color: color3) -> color3:
    """Clamp negative values and replace NaN/Inf with zero."""
    result = tm.max(color, color3(0.0, 0.0, 0.0))
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _trace_kernel(
    rays: ti.types.ndarray(dtype=ti.f64, ndim=2),
    depth: ti.i32,
    max_depth: ti.i32,
    out: ti.types.ndarray(dtype=ti.f64, ndim=2),
):
    for k in range(rays.shape[0]):
        color = trace(
            vec2(rays[k, 0], rays[k, 1]), vec2(rays[k, 2], rays[k, 3]), depth, max_depth
        )
        for c in ti.static(range(3)):
            out[k, c] = color[c]


@ti.kernel
def _shade_kernel(
    ray: ti.types.ndarray(dtype=ti.f64, ndim=1),
    depth: ti.i32,
    max_depth: ti.i32,
    out: ti.types.ndarray(dtype=ti.f64, ndim=1),
):
    for _ in range(1):
        o = vec2(ray[0], ray[1])
        d = vec2(ray[2], ray[3])
        rec = intersect_scene(o, d)
        out[0] = ti.cast(rec.hit, ti.f64)
        if rec.hit == 1:
            hit = shade_hit(rec, d, depth, max_depth)
            out[1] = hit.sign
            out[2] = ti.cast(hit.branches, ti.f64)
            out[3] = hit.reflectance
            out[4] = ti.cast(hit.refracted, ti.f64)
            out[5] = hit.normal.x
            out[6] = hit.normal.y
            out[7] = hit.reflect_origin.x
            out[8] = hit.reflect_origin.y
            out[9] = hit.reflect_direction.x
            out[10] = hit.reflect_direction.y
            out[11] = hit.refract_origin.x
            out[12] = hit.refract_origin.y
            out[13] = hit.refract_direction.x
            out[14] = hit.refract_direction.y
            for c in ti.static(range(3)):
                out[15 + c] = hit.transmittance[c]
                out[18 + c] = rec.emissive[c]
            out[21] = rec.point.x
            out[22] = rec.point.y


@ti.kernel
def _sample_kernel(
    points: ti.types.ndarray(dtype=ti.f64, ndim=2),
    jitter: ti.types.ndarray(dtype=ti.f64, ndim=2),
    max_depth: ti.i32,
    out: ti.types.ndarray(dtype=ti.f64, ndim=2),
):
    for k in range(points.shape[0]):
        p = vec2(points[k, 0], points[k, 1])
        n = jitter.shape[1]
        total = color3(0.0, 0.0, 0.0)
        for s in range(n):
            total += trace(p, stratified_direction(s, n, jitter[k, s]), 0, max_depth)
        color = _sanitize(total / ti.cast(n, ti.f64))
        for c in ti.static(range(3)):
            out[k, c] = color[c]


@ti.kernel
def _render_rows_kernel(
    out: ti.types.ndarray(dtype=ti.f64, ndim=3),
    jitter: ti.types.ndarray(dtype=ti.f64, ndim=3),
    row_start: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
):
    width = out.shape[1]
    n = jitter.shape[2]
    for r, i in ti.ndrange(out.shape[0], width):
        p = vec2(
            ti.cast(i, ti.f64) / ti.cast(width, ti.f64),
            ti.cast(row_start + r, ti.f64) / ti.cast(height, ti.f64),
        )
        total = color3(0.0, 0.0, 0.0)
        for s in range(n):
            total += trace(p, stratified_direction(s, n, jitter[r, i, s]), 0, max_depth)
        color = _sanitize(total / ti.cast(n, ti.f64))
        for c in ti.static(range(3)):
            out[r, i, c] = color[c]


# =============================================================================
# Public Tracing API
# =============================================================================


def _as_vec2(value, name: str) -> tuple[float, float]:
    x, y = (float(c) for c in value)
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"{name} must be finite, got ({x}, {y})")
    return x, y


def trace_ray(
    origin: tuple[float, float],
    direction: tuple[float, float],
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace a single ray from Python.

    Args:
        origin: Ray origin as (x, y).
        direction: Ray direction as (x, y); need not be unit length.
        depth: Starting depth of the ray.
        max_depth: Depth beyond which no child rays are spawned.

    Returns:
        Tuple of (R, G, B) radiance.

    Raises:
        ValueError: If max_depth is outside [0, MAX_DEPTH_LIMIT], depth is
            negative, or the ray is not finite.
    """
    _check_max_depth(max_depth)
    if depth < 0:
        raise ValueError(f"depth = {depth} must be non-negative")
    ray = np.array([[*_as_vec2(origin, "origin"), *_as_vec2(direction, "direction")]])
    out = np.zeros((1, 3), dtype=np.float64)
    _trace_kernel(ray, depth, max_depth, out)
    return (float(out[0, 0]), float(out[0, 1]), float(out[0, 2]))


def trace_rays(
    origins: npt.ArrayLike, directions: npt.ArrayLike, max_depth: int = MAX_DEPTH
) -> npt.NDArray[np.float64]:
    """Trace many primary rays in parallel.

    Args:
        origins: Array-like of shape (N, 2).
        directions: Array-like of shape (N, 2).
        max_depth: Depth beyond which no child rays are spawned.

    Returns:
        Radiance array of shape (N, 3).

    Raises:
        ValueError: If max_depth is out of range or the shapes differ.
    """
    _check_max_depth(max_depth)
    o = np.asarray(origins, dtype=np.float64).reshape(-1, 2)
    d = np.asarray(directions, dtype=np.float64).reshape(-1, 2)
    if o.shape != d.shape:
        raise ValueError(f"origins {o.shape} and directions {d.shape} must match")
    rays = np.ascontiguousarray(np.concatenate([o, d], axis=1))
    out = np.zeros((rays.shape[0], 3), dtype=np.float64)
    if rays.shape[0] > 0:
        _trace_kernel(rays, 0, max_depth, out)
    return out


def shade_ray(
    origin: tuple[float, float],
    direction: tuple[float, float],
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> dict | None:
    """Resolve a ray's first hit and report the surface interaction.

    Useful for inspecting how the tracer splits energy at a surface.

    Args:
        origin: Ray origin as (x, y).
        direction: Ray direction as (x, y).
        depth: Depth of the ray.
        max_depth: Depth beyond which no child rays are spawned.

    Returns:
        None on a miss, otherwise a dictionary with keys ``point``,
        ``normal`` (oriented), ``sign``, ``branches``, ``reflectance``,
        ``refracted``, ``reflected_ray`` and ``refracted_ray`` (each an
        (origin, direction) pair; ``refracted_ray`` is None when no
        refraction happens), ``transmittance`` and ``emissive``.

    Raises:
        ValueError: If max_depth is outside [0, MAX_DEPTH_LIMIT].
    """
    _check_max_depth(max_depth)
    ray = np.array([*_as_vec2(origin, "origin"), *_as_vec2(direction, "direction")])
    out = np.zeros(23, dtype=np.float64)
    _shade_kernel(ray, depth, max_depth, out)
    if out[0] == 0.0:
        return None

    refracted = bool(out[4])
    return {
        "point": (float(out[21]), float(out[22])),
        "normal": (float(out[5]), float(out[6])),
        "sign": int(out[1]),
        "branches": bool(out[2]),
        "reflectance": float(out[3]),
        "refracted": refracted,
        "reflected_ray": (
            (float(out[7]), float(out[8])),
            (float(out[9]), float(out[10])),
        ),
        "refracted_ray": (
            ((float(out[11]), float(out[12])), (float(out[13]), float(out[14])))
            if refracted
            else None
        ),
        "transmittance": tuple(float(c) for c in out[15:18]),
        "emissive": tuple(float(c) for c in out[18:21]),
    }


def sample_pixel(
    x: float,
    y: float,
    jitter: npt.ArrayLike,
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance gathered at a scene point.

    Traces one ray per jitter value, in angle order, and averages them.

    Args:
        x: Scene x coordinate.
        y: Scene y coordinate.
        jitter: N uniform draws in [0, 1), one per angular stratum.
        max_depth: Depth beyond which no child rays are spawned.

    Returns:
        Tuple of (R, G, B) mean radiance.

    Raises:
        ValueError: If jitter is empty or outside [0, 1), or max_depth is
            out of range.
    """
    _check_max_depth(max_depth)
    u = np.ascontiguousarray(np.asarray(jitter, dtype=np.float64).reshape(1, -1))
    if u.shape[1] == 0:
        raise ValueError("jitter must contain at least one sample")
    if np.any(u < 0.0) or np.any(u >= 1.0):
        raise ValueError("jitter values must lie in [0, 1)")
    points = np.array([[float(x), float(y)]])
    out = np.zeros((1, 3), dtype=np.float64)
    _sample_kernel(points, u, max_depth, out)
    return (float(out[0, 0]), float(out[0, 1]), float(out[0, 2]))


def render_rows(
    out: npt.NDArray[np.float64],
    jitter: npt.NDArray[np.float64],
    row_start: int,
    height: int,
    max_depth: int = MAX_DEPTH,
) -> None:
    """Render a band of image rows in place.

    Pixel (i, row_start + r) samples the scene point
    (i / width, (row_start + r) / height).

    Args:
        out: Float64 array of shape (rows, width, 3), written in place.
        jitter: Float64 array of shape (rows, width, samples).
        row_start: Image row of out[0].
        height: Full image height.
        max_depth: Depth beyond which no child rays are spawned.

    Raises:
        ValueError: If the array shapes disagree or max_depth is out of range.
    """
    _check_max_depth(max_depth)
    if out.ndim != 3 or out.shape[2] != 3:
        raise ValueError(f"out must have shape (rows, width, 3), got {out.shape}")
    if jitter.ndim != 3 or jitter.shape[:2] != out.shape[:2] or jitter.shape[2] == 0:
        raise ValueError(
            f"jitter shape {jitter.shape} does not match output shape {out.shape}"
        )
    if out.dtype != np.float64 or not out.flags.c_contiguous:
        raise ValueError("out must be a C-contiguous float64 array")
    _render_rows_kernel(
        out, np.ascontiguousarray(jitter, dtype=np.float64), row_start, height, max_depth
    )
