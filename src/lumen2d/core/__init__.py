"""Core rendering module.

This module contains the fundamental building blocks for 2-D light transport:

Components:
    ray: Ray data structure, vec2/color3 types and vector utilities
    integrator: Recursive radiance tracer and stratified pixel sampler
    renderer: Pixel loop, seeded per-row RNG streams and render settings

The tracer evaluates emission, specular reflection, refraction and
Beer-Lambert absorption up to a bounded recursion depth. The sampler
integrates incoming radiance over all directions at a point.
"""

from .ray import (
    Ray,
    color3,
    cross2,
    direction_from_angle,
    dot,
    length,
    length_squared,
    make_ray,
    normalize,
    perp,
    ray_at,
    vec2,
)

# Note: integrator and renderer are NOT imported here because they declare
# Taichi fields on import. Import them after lumen2d.init(), e.g.:
#   from lumen2d.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "color3",
    "dot",
    "cross2",
    "length",
    "length_squared",
    "normalize",
    "perp",
    "direction_from_angle",
]
