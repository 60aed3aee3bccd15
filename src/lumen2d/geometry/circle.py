"""Circle primitive with robust ray-circle intersection.

The ray-circle intersection solves |origin + t * direction - center|^2 = r^2
with the numerically stable quadratic formula from Ray Tracing Gems, which
avoids catastrophic cancellation when b^2 is nearly equal to 4ac.

Primitive functions return ``(t, normal)`` where ``t < 0`` signals a miss.
The normal is the outward radial unit vector regardless of which side the
ray came from; the tracer orients it.

Example:
    >>> # Inside a Taichi kernel:
    >>> # t, n = hit_circle(origin, direction, vec2(0.5, 0.5), 0.1)
    >>> # if t > 0.0: ...
"""

import taichi as ti
import taichi.math as tm

from lumen2d.core.ray import EPSILON, vec2


@ti.func
def _solve_quadratic_robust(h: ti.f64, a: ti.f64, c: ti.f64, sqrt_d: ti.f64):
    """Solve a*t^2 + 2*h*t + c = 0 with the stable formulation.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of the reduced discriminant h^2 - a*c.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0
    if ti.abs(q) < 1e-300:
        # h and the discriminant both vanish: one double root
        t0 = -h / a
        t1 = t0
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_circle(origin: vec2, direction: vec2, center: vec2, radius: ti.f64):
    """Intersect a ray with a circle.

    Picks the smaller root greater than EPSILON; when both roots are at or
    behind EPSILON there is no hit.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction (need not be unit length).
        center: Circle center.
        radius: Circle radius.

    Returns:
        Tuple (t, normal). t is -1 on a miss.
    """
    oc = origin - center
    a = tm.dot(direction, direction)
    h = tm.dot(direction, oc)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = h * h - a * c

    hit_t = -1.0
    normal = vec2(0.0, 0.0)

    if discriminant >= 0.0 and a > 0.0:
        t0, t1 = _solve_quadratic_robust(h, a, c, tm.sqrt(discriminant))
        if t0 > EPSILON:
            hit_t = t0
        elif t1 > EPSILON:
            hit_t = t1

        if hit_t > 0.0:
            point = origin + hit_t * direction
            normal = tm.normalize(point - center)

    return hit_t, normal


@ti.func
def inside_circle(p: vec2, center: vec2, radius: ti.f64) -> ti.i32:
    """1 if p lies strictly inside the circle, 0 otherwise."""
    d = p - center
    return ti.select(tm.dot(d, d) < radius * radius, 1, 0)
