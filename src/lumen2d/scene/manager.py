"""Scene manager for building entity/material scenes.

This module provides the high-level scene construction API. It coordinates
the shape arena, the material registry and the entity list so a scene can
be described with plain Python shape objects and materials.

The SceneManager maintains:
- A material_id space backed by the material registry fields
- Python-side records of every material and entity for inspection
- Convenience methods for the common emitter, mirror and glass entities
- A sealed flag: once a render starts the scene is read-only

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.geometry.shapes import Circle
    >>> from lumen2d.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_emitter(Circle((0.3, 0.3), 0.1), emissive=(2.0, 2.0, 2.0))
    0
    >>> scene.add_glass(Circle((0.6, 0.6), 0.15), absorption=(4.0, 4.0, 1.0))
    1
"""

import logging
from dataclasses import dataclass

from lumen2d.geometry.csg import add_shape
from lumen2d.geometry.shapes import Shape
from lumen2d.materials.material import GLASS_ETA, Material
from lumen2d.materials.material import add_material as _register_material
from lumen2d.scene.intersection import add_entity as _register_entity
from lumen2d.scene.intersection import clear_scene

logger = logging.getLogger(__name__)

RGB = tuple[float, float, float]

# The manager whose data currently fills the scene fields
_active_scene: "SceneManager | None" = None


def get_active_scene() -> "SceneManager | None":
    """Get the manager that last built or cleared the scene fields."""
    return _active_scene


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID.
        material: The material's properties.
    """

    material_id: int
    material: Material


@dataclass
class EntityInfo:
    """Information about an entity in the scene.

    Attributes:
        entity_index: The index in the entity storage fields.
        shape: The shape description the entity was built from.
        shape_root: The arena index of the compiled shape.
        material_id: The material ID assigned to the entity.
    """

    entity_index: int
    shape: Shape
    shape_root: int
    material_id: int


class SceneManager:
    """Builder for a scene of entities, each a shape with a material.

    Only one scene is active at a time: the manager drives module-level
    Taichi fields, and constructing a new manager clears them. While the
    active scene is sealed for rendering, building or clearing another
    manager raises RuntimeError; call clear() on the sealed scene first.

    Attributes:
        materials: MaterialInfo for all registered materials.
        entities: EntityInfo for all entities, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> mirror = scene.add_material(Material(reflectivity=0.9))
        >>> scene.add_entity(Circle((0.5, 0.5), 0.1), mirror)
        0
        >>> scene.seal()
        >>> scene.is_sealed
        True
    """

    def __init__(self) -> None:
        """Initialize an empty, unsealed scene."""
        self.materials: list[MaterialInfo] = []
        self.entities: list[EntityInfo] = []
        self._sealed = False
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        global _active_scene
        active = _active_scene
        if active is not None and active is not self and active.is_sealed:
            raise RuntimeError(
                "Another scene is sealed for rendering; call its clear() first"
            )
        clear_scene()
        _active_scene = self
        self.materials.clear()
        self.entities.clear()
        self._sealed = False

    def clear(self) -> None:
        """Clear the entire scene and make it editable again."""
        self._clear_all()

    def seal(self) -> None:
        """Freeze the scene. Further additions raise RuntimeError.

        Raises:
            RuntimeError: If another manager has since replaced this
                scene's data in the scene fields.
        """
        if _active_scene is not self:
            raise RuntimeError("Scene is no longer active; another SceneManager replaced it")
        if not self._sealed:
            logger.debug(
                "Sealed scene with %d entities and %d materials",
                len(self.entities),
                len(self.materials),
            )
        self._sealed = True

    @property
    def is_sealed(self) -> bool:
        """Whether the scene has been sealed for rendering."""
        return self._sealed

    def _check_mutable(self) -> None:
        if self._sealed:
            raise RuntimeError("Scene is sealed; call clear() before modifying it")

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(
        self,
        material: Material | None = None,
        *,
        emissive: RGB = (0.0, 0.0, 0.0),
        reflectivity: float = 0.0,
        eta: float = 0.0,
        absorption: RGB = (0.0, 0.0, 0.0),
    ) -> int:
        """Register a material.

        Args:
            material: A prebuilt Material. When omitted, one is built from
                the keyword arguments.
            emissive: Emitted radiance as (R, G, B).
            reflectivity: Mirror reflectance in [0, 1].
            eta: Refractive index; 0 for opaque materials.
            absorption: Beer-Lambert coefficients as (R, G, B).

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the scene is sealed or the registry is full.
            ValueError: If the material parameters are invalid.
        """
        self._check_mutable()
        if material is None:
            material = Material(
                emissive=tuple(emissive),
                reflectivity=reflectivity,
                eta=eta,
                absorption=tuple(absorption),
            )
        material_id = _register_material(material)
        self.materials.append(MaterialInfo(material_id=material_id, material=material))
        return material_id

    def get_material_count(self) -> int:
        """Get the number of registered materials."""
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Entity Management
    # =========================================================================

    def add_entity(self, shape: Shape, material: Material | int) -> int:
        """Add an entity built from a shape and a material.

        Args:
            shape: The entity's shape (primitive or combinator tree).
            material: A Material, registered on the fly, or the ID of an
                already registered material.

        Returns:
            The index of the added entity.

        Raises:
            RuntimeError: If the scene is sealed or a capacity is exceeded.
            ValueError: If the material ID is invalid or the shape tree is
                too deep.
            TypeError: If ``shape`` is not a shape.
        """
        self._check_mutable()
        if isinstance(material, Material):
            material_id = self.add_material(material)
        else:
            material_id = int(material)
            if not 0 <= material_id < len(self.materials):
                raise ValueError(f"Invalid material_id: {material_id}")

        shape_root = add_shape(shape)
        entity_index = _register_entity(shape_root, material_id)
        self.entities.append(
            EntityInfo(
                entity_index=entity_index,
                shape=shape,
                shape_root=shape_root,
                material_id=material_id,
            )
        )
        logger.debug(
            "Added entity %d: %s with material %d (root node %d)",
            entity_index,
            type(shape).__name__,
            material_id,
            shape_root,
        )
        return entity_index

    def get_entity_count(self) -> int:
        """Get the number of entities in the scene."""
        return len(self.entities)

    def get_entity_info(self, entity_index: int) -> EntityInfo | None:
        """Get information about an entity by index, or None if not found."""
        if 0 <= entity_index < len(self.entities):
            return self.entities[entity_index]
        return None

    # =========================================================================
    # Convenience Methods
    # =========================================================================

    def add_emitter(self, shape: Shape, emissive: RGB) -> int:
        """Add an opaque light source.

        Args:
            shape: The emitter's shape.
            emissive: Emitted radiance as (R, G, B); may exceed 1.

        Returns:
            The index of the added entity.
        """
        return self.add_entity(shape, Material(emissive=tuple(emissive)))

    def add_mirror(
        self,
        shape: Shape,
        reflectivity: float = 0.9,
        emissive: RGB = (0.0, 0.0, 0.0),
    ) -> int:
        """Add an opaque mirror.

        Args:
            shape: The mirror's shape.
            reflectivity: Mirror reflectance in [0, 1].
            emissive: Optional self-emission as (R, G, B).

        Returns:
            The index of the added entity.
        """
        return self.add_entity(
            shape, Material(emissive=tuple(emissive), reflectivity=reflectivity)
        )

    def add_glass(
        self,
        shape: Shape,
        eta: float = GLASS_ETA,
        absorption: RGB = (0.0, 0.0, 0.0),
        emissive: RGB = (0.0, 0.0, 0.0),
    ) -> int:
        """Add a refractive body.

        The interface reflectance comes from Schlick's approximation, so no
        reflectivity is given here.

        Args:
            shape: The body's shape; should be closed for absorption to make
                sense.
            eta: Refractive index (> 0). Default is 1.5 (typical glass).
            absorption: Beer-Lambert coefficients of the medium as (R, G, B).
            emissive: Optional self-emission as (R, G, B).

        Returns:
            The index of the added entity.

        Raises:
            ValueError: If eta is not positive.
        """
        if eta <= 0.0:
            raise ValueError(f"eta = {eta} must be positive for a refractive body")
        return self.add_entity(
            shape,
            Material(emissive=tuple(emissive), eta=eta, absorption=tuple(absorption)),
        )
