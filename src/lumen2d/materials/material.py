"""Material model and GPU-side material registry.

A material carries everything the tracer needs at a surface:

    - emissive: Radiance emitted by the surface (RGB, unbounded)
    - reflectivity: Mirror reflectance in [0, 1] for opaque materials
    - eta: Refractive index; 0 marks an opaque, non-refractive material
    - absorption: Beer-Lambert coefficients (RGB) of the enclosed medium

For refractive materials (eta > 0) the reflectivity is replaced at each hit
by the Schlick reflectance of the interface.

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.materials.material import Material, add_material
    >>> glass = Material(reflectivity=0.2, eta=1.5, absorption=(4.0, 4.0, 1.0))
    >>> material_id = add_material(glass)
"""

import math
from dataclasses import dataclass

import taichi as ti

from lumen2d.core.ray import color3

# Common refractive indices
GLASS_ETA = 1.5
WATER_ETA = 1.33


def _check_rgb(name: str, value: tuple[float, float, float]) -> None:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    for component in value:
        if not math.isfinite(component) or component < 0.0:
            raise ValueError(
                f"{name} component {component} must be finite and non-negative"
            )


@dataclass(frozen=True)
class Material:
    """Surface and medium properties of an entity.

    Attributes:
        emissive: Emitted radiance as (R, G, B). Values may exceed 1.
        reflectivity: Mirror reflectance in [0, 1].
        eta: Refractive index. 0 means opaque; > 0 enables refraction.
        absorption: Absorption coefficients as (R, G, B), applied to light
            travelling inside the shape.

    Raises:
        ValueError: If any component is out of range or non-finite.
    """

    emissive: tuple[float, float, float] = (0.0, 0.0, 0.0)
    reflectivity: float = 0.0
    eta: float = 0.0
    absorption: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        _check_rgb("emissive", self.emissive)
        _check_rgb("absorption", self.absorption)
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"reflectivity = {self.reflectivity} must be in [0, 1]")
        if not math.isfinite(self.eta) or self.eta < 0.0:
            raise ValueError(f"eta = {self.eta} must be finite and >= 0")

    @property
    def is_refractive(self) -> bool:
        """Whether the material refracts light (eta > 0)."""
        return self.eta > 0.0

    @property
    def is_emissive(self) -> bool:
        """Whether the material emits any light."""
        return any(c > 0.0 for c in self.emissive)


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATERIALS = 256

material_emissive = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_reflectivity = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_eta = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_absorption = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Add a material to the registry.

    Args:
        material: The validated material to store.

    Returns:
        The material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_emissive[idx] = list(material.emissive)
    material_reflectivity[idx] = material.reflectivity
    material_eta[idx] = material.eta
    material_absorption[idx] = list(material.absorption)
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_emissive(material_id: ti.i32) -> color3:
    """Get the emitted radiance of a material."""
    return material_emissive[material_id]


@ti.func
def get_reflectivity(material_id: ti.i32) -> ti.f64:
    """Get the mirror reflectivity of a material."""
    return material_reflectivity[material_id]


@ti.func
def get_eta(material_id: ti.i32) -> ti.f64:
    """Get the refractive index of a material (0 when opaque)."""
    return material_eta[material_id]


@ti.func
def get_absorption(material_id: ti.i32) -> color3:
    """Get the Beer-Lambert absorption coefficients of a material."""
    return material_absorption[material_id]
