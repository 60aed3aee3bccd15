"""2-D light transport renderer built on Taichi.

This package renders a flat scene of analytic shapes lit only by emissive
materials, with specular reflection, refraction and Beer-Lambert absorption:
- Analytic ray/shape intersection (circles, half-planes, convex polygons)
- Boolean shape composition (union, intersection, difference)
- Recursive reflection/refraction with Schlick reflectance splitting
- Stratified angular sampling per pixel

Subpackages:
    core: Vector types, the recursive tracer, the pixel sampler and renderer
    geometry: Shape descriptions, primitive intersection and the CSG arena
    materials: Material registry and optics functions
    scene: Entity storage, nearest-hit resolution and the scene builder
    preview: Image sink, PNG export and matplotlib preview

Taichi must be initialized before any module holding fields is imported.
Use ``lumen2d.init()``, which forces 64-bit floating point.
"""

import taichi as ti

__version__ = "0.1.0"


def init(arch=None, *, random_seed: int = 0, debug: bool = False) -> None:
    """Initialize the Taichi runtime for rendering.

    Args:
        arch: Taichi backend (e.g. ``ti.cpu``, ``ti.gpu``). Defaults to CPU.
        random_seed: Seed for Taichi's internal RNG.
        debug: Enable Taichi debug mode (bounds checking).
    """
    if arch is None:
        arch = ti.cpu
    ti.init(arch=arch, default_fp=ti.f64, random_seed=random_seed, debug=debug)
