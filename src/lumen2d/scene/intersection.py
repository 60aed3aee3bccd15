"""Scene-level entity intersection testing.

This module stores the scene's entities and resolves a ray against all of
them, returning the nearest hit merged with the owning entity's material.

Each entity pairs a compiled shape (a root index into the shape arena) with
a material ID. Entities live in Taichi fields for kernel access. The nearest
hit is chosen by Euclidean distance from the ray origin.

Entity order does not change which surface a ray sees, with one deliberate
exception: when two entities' boundaries coincide exactly at the hit
distance, the entity added first wins. The strict comparison keeps that
case repeatable instead of leaving it to kernel scheduling.

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.geometry.csg import add_shape
    >>> from lumen2d.geometry.shapes import Circle
    >>> from lumen2d.materials.material import Material, add_material
    >>> from lumen2d.scene.intersection import add_entity, clear_scene
    >>> clear_scene()
    >>> root = add_shape(Circle((0.5, 0.5), 0.1))
    >>> add_entity(root, add_material(Material(emissive=(1.0, 1.0, 1.0))))
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from lumen2d.core.ray import color3, length, vec2
from lumen2d.geometry.csg import clear_shapes, get_shape_node_count, intersect_shape
from lumen2d.materials.material import (
    clear_materials,
    get_absorption,
    get_emissive,
    get_eta,
    get_material_count,
    get_reflectivity,
)


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any entity, 0 on a miss.
        t: Ray parameter of the hit. Only valid if hit == 1.
        point: The hit point. Only valid if hit == 1.
        normal: Unit normal pointing out of the entity's shape. Not oriented
            toward the ray; the tracer resolves orientation.
        distance: Euclidean distance from the ray origin to the hit point.
        emissive: The entity's emitted radiance.
        reflectivity: The entity's mirror reflectivity.
        eta: The entity's refractive index (0 when opaque).
        absorption: The entity's Beer-Lambert coefficients.
    """

    hit: ti.i32
    t: ti.f64
    point: vec2
    normal: vec2
    distance: ti.f64
    emissive: color3
    reflectivity: ti.f64
    eta: ti.f64
    absorption: color3


# Maximum number of entities supported in the scene
MAX_ENTITIES = 1024

entity_shape_roots = ti.field(dtype=ti.i32, shape=MAX_ENTITIES)
entity_material_ids = ti.field(dtype=ti.i32, shape=MAX_ENTITIES)
num_entities = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all entities together with the shape arena and materials.

    Resets the counts to zero. The field data is not cleared but will be
    overwritten when new entries are added.
    """
    num_entities[None] = 0
    clear_shapes()
    clear_materials()


def add_entity(shape_root: int, material_id: int) -> int:
    """Add an entity to the scene.

    Args:
        shape_root: Arena index returned by add_shape.
        material_id: ID returned by add_material.

    Returns:
        The index of the added entity.

    Raises:
        ValueError: If the shape root or material ID is not registered.
        RuntimeError: If the maximum number of entities is exceeded.
    """
    if not 0 <= shape_root < get_shape_node_count():
        raise ValueError(f"Invalid shape root: {shape_root}")
    if not 0 <= material_id < get_material_count():
        raise ValueError(f"Invalid material_id: {material_id}")

    idx = num_entities[None]
    if idx >= MAX_ENTITIES:
        raise RuntimeError(f"Maximum number of entities ({MAX_ENTITIES}) exceeded")
    entity_shape_roots[idx] = shape_root
    entity_material_ids[idx] = material_id
    num_entities[None] = idx + 1
    return idx


def get_entity_count() -> int:
    """Get the number of entities in the scene."""
    return int(num_entities[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=-1.0,
        point=vec2(0.0, 0.0),
        normal=vec2(0.0, 0.0),
        distance=0.0,
        emissive=color3(0.0, 0.0, 0.0),
        reflectivity=0.0,
        eta=0.0,
        absorption=color3(0.0, 0.0, 0.0),
    )


@ti.func
def intersect_scene(origin: vec2, direction: vec2) -> SceneHitRecord:
    """Test a ray against all entities in the scene.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction (need not be unit length).

    Returns:
        A SceneHitRecord for the entity hit closest to the origin, or a miss
        record if no entity was hit.
    """
    result = _make_miss_record()
    for e in range(num_entities[None]):
        t, normal = intersect_shape(entity_shape_roots[e], origin, direction)
        if t > 0.0:
            point = origin + t * direction
            distance = length(point - origin)
            if result.hit == 0 or distance < result.distance:
                material_id = entity_material_ids[e]
                result = SceneHitRecord(
                    hit=1,
                    t=t,
                    point=point,
                    normal=normal,
                    distance=distance,
                    emissive=get_emissive(material_id),
                    reflectivity=get_reflectivity(material_id),
                    eta=get_eta(material_id),
                    absorption=get_absorption(material_id),
                )
    return result


# =============================================================================
# Host-side Batch Query
# =============================================================================


@ti.kernel
def _intersect_scene_kernel(
    origins: ti.types.ndarray(dtype=ti.f64, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f64, ndim=2),
    out_hit: ti.types.ndarray(dtype=ti.i32, ndim=1),
    out_geometry: ti.types.ndarray(dtype=ti.f64, ndim=2),
    out_material: ti.types.ndarray(dtype=ti.f64, ndim=2),
):
    for i in range(origins.shape[0]):
        rec = intersect_scene(
            vec2(origins[i, 0], origins[i, 1]),
            vec2(directions[i, 0], directions[i, 1]),
        )
        out_hit[i] = rec.hit
        out_geometry[i, 0] = rec.t
        out_geometry[i, 1] = rec.point.x
        out_geometry[i, 2] = rec.point.y
        out_geometry[i, 3] = rec.normal.x
        out_geometry[i, 4] = rec.normal.y
        out_geometry[i, 5] = rec.distance
        for c in ti.static(range(3)):
            out_material[i, c] = rec.emissive[c]
            out_material[i, 5 + c] = rec.absorption[c]
        out_material[i, 3] = rec.reflectivity
        out_material[i, 4] = rec.eta


def intersect_scene_rays(
    origins: npt.ArrayLike, directions: npt.ArrayLike
) -> dict[str, npt.NDArray]:
    """Resolve many rays against the scene from Python.

    Args:
        origins: Array-like of shape (N, 2).
        directions: Array-like of shape (N, 2).

    Returns:
        Dictionary of arrays keyed by SceneHitRecord field name. ``hit`` is
        boolean with shape (N,); ``point``/``normal`` have shape (N, 2);
        ``emissive``/``absorption`` have shape (N, 3).

    Raises:
        ValueError: If origins and directions differ in shape.
    """
    o = np.ascontiguousarray(np.asarray(origins, dtype=np.float64).reshape(-1, 2))
    d = np.ascontiguousarray(np.asarray(directions, dtype=np.float64).reshape(-1, 2))
    if o.shape != d.shape:
        raise ValueError(f"origins {o.shape} and directions {d.shape} must match")

    n = o.shape[0]
    out_hit = np.zeros(n, dtype=np.int32)
    out_geometry = np.zeros((n, 6), dtype=np.float64)
    out_material = np.zeros((n, 8), dtype=np.float64)
    if n > 0:
        _intersect_scene_kernel(o, d, out_hit, out_geometry, out_material)

    return {
        "hit": out_hit.astype(bool),
        "t": out_geometry[:, 0],
        "point": out_geometry[:, 1:3],
        "normal": out_geometry[:, 3:5],
        "distance": out_geometry[:, 5],
        "emissive": out_material[:, 0:3],
        "reflectivity": out_material[:, 3],
        "eta": out_material[:, 4],
        "absorption": out_material[:, 5:8],
    }
