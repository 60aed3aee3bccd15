"""Materials module for surface and medium properties.

Components:
    material: Material dataclass and the Taichi field registry
    optics: Reflection, refraction, Schlick reflectance and Beer-Lambert
        transmittance

A single material model covers every surface in the scene. Emission is
added unconditionally, opaque surfaces reflect with a fixed reflectivity and
refractive surfaces split energy between reflection and transmission with
Schlick's approximation. Absorption attenuates light that travelled inside
a shape.

The optics functions hold no state and may be imported before Taichi is
initialized. The material registry declares fields, so import
``lumen2d.materials.material`` only after ``lumen2d.init()``.
"""

from .optics import beer_lambert, reflect, refract, schlick_reflectance

__all__ = [
    "reflect",
    "refract",
    "schlick_reflectance",
    "beer_lambert",
]
