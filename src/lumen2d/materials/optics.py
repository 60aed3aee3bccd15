"""Optics functions for specular light transport.

Key physics:
    - Mirror reflection about a surface normal
    - Snell's law for refraction, with total internal reflection when the
      transmitted angle does not exist
    - Schlick's approximation for Fresnel reflectance at a dielectric
      interface
    - Beer-Lambert exponential attenuation through an absorbing medium

All functions are Taichi functions for use inside kernels.

Example:
    >>> # Inside a Taichi kernel:
    >>> # ok, transmitted = refract(direction, normal, 1.0 / 1.5)
    >>> # if ok == 1:
    >>> #     r = schlick_reflectance(cos_i, cos_t, 1.0, 1.5)
"""

import taichi as ti
import taichi.math as tm

from lumen2d.core.ray import color3, vec2


@ti.func
def reflect(incident: vec2, normal: vec2) -> vec2:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction (unit length).
        normal: The surface normal (unit length). Either orientation works.

    Returns:
        incident - 2 * dot(incident, normal) * normal.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec2, normal: vec2, eta: ti.f64):
    """Refract an incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction (unit length).
        normal: The surface normal (unit length), oriented against the
            incident direction so that dot(incident, normal) <= 0.
        eta: Ratio of refractive indices, n_from / n_to.

    Returns:
        A tuple (ok, direction). ok is 0 on total internal reflection, in
        which case direction is the zero vector; otherwise ok is 1 and
        direction is the unit transmitted direction.
    """
    ok = 0
    result = vec2(0.0, 0.0)
    idotn = tm.dot(incident, normal)
    k = 1.0 - eta * eta * (1.0 - idotn * idotn)
    if k >= 0.0:
        ok = 1
        result = eta * incident - (eta * idotn + tm.sqrt(k)) * normal
    return ok, result


@ti.func
def schlick_reflectance(
    cos_incident: ti.f64,
    cos_transmitted: ti.f64,
    eta_from: ti.f64,
    eta_to: ti.f64,
) -> ti.f64:
    """Compute Fresnel reflectance using Schlick's approximation.

    Entering a denser medium uses the incident angle; leaving one uses the
    transmitted angle, which keeps the approximation symmetric across the
    interface.

    Args:
        cos_incident: Cosine between the incident ray and the oriented normal.
        cos_transmitted: Cosine between the transmitted ray and the
            reversed oriented normal.
        eta_from: Refractive index on the incident side.
        eta_to: Refractive index on the transmitted side.

    Returns:
        The reflectance in [0, 1].
    """
    r0 = (eta_from - eta_to) / (eta_from + eta_to)
    r0 = r0 * r0
    a = 1.0 - cos_transmitted
    if eta_from < eta_to:
        a = 1.0 - cos_incident
    a = tm.clamp(a, 0.0, 1.0)
    aa = a * a
    return r0 + (1.0 - r0) * aa * aa * a


@ti.func
def beer_lambert(absorption: color3, distance: ti.f64) -> color3:
    """Per-channel transmittance exp(-absorption * distance).

    Each channel lies in (0, 1]; it is exactly 1 where absorption or
    distance is zero.
    """
    return ti.exp(-absorption * distance)
