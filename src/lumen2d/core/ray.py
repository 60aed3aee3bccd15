"""Ray data structure and 2-D vector utilities.

This module provides the Ray dataclass, the 2-D point/direction and RGB
color vector types, and the vector helpers used by every kernel. Colors are
plain 3-vectors: addition, element-wise multiplication (attenuation) and
scalar multiplication come from Taichi's vector arithmetic. Nothing here
clamps; clamping to bytes happens only at the image sink.

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.core.ray import Ray, ray_at, vec2
    >>> # Inside a Taichi kernel:
    >>> # ray = Ray(origin=vec2(0.0, 0.0), direction=vec2(1.0, 0.0))
    >>> # point = ray_at(ray, 0.5)
"""

import taichi as ti
import taichi.math as tm

# All geometry and radiance is carried in 64-bit floats
vec2 = ti.types.vector(2, ti.f64)
color3 = ti.types.vector(3, ti.f64)

# Parameter tolerance for accepting intersections and rejecting parallel rays
EPSILON = 1e-6


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec2).
        direction: The direction vector (vec2). Not required to be unit
            length; intersection parameters are multiples of it.
    """

    origin: vec2
    direction: vec2


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec2:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec2, direction: vec2) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec2, b: vec2) -> ti.f64:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross2(a: vec2, b: vec2) -> ti.f64:
    """Compute the scalar 2-D cross product a.x * b.y - a.y * b.x.

    Positive when b lies counter-clockwise from a.
    """
    return a.x * b.y - a.y * b.x


@ti.func
def length(v: vec2) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return tm.sqrt(tm.dot(v, v))


@ti.func
def length_squared(v: vec2) -> ti.f64:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec2) -> vec2:
    """Normalize a vector to unit length.

    Returns the zero vector unchanged instead of dividing by zero.
    """
    result = vec2(0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > 0.0:
        result = v / tm.sqrt(len_sq)
    return result


@ti.func
def perp(v: vec2) -> vec2:
    """Rotate a vector by -90 degrees.

    For a counter-clockwise polygon edge this points away from the interior.
    """
    return vec2(v.y, -v.x)


@ti.func
def direction_from_angle(angle: ti.f64) -> vec2:
    """Unit direction at the given angle (radians) from the +x axis."""
    return vec2(tm.cos(angle), tm.sin(angle))
