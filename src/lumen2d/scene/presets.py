"""Ready-made demonstration scenes.

Every preset lives in the unit square: pixel (i, j) of a W x H render
samples the scene point (i / W, j / H), so y grows downward in the image.

Presets:
    emitter: A single glowing disc
    lens: A biconvex glass lens (Intersect of two discs) in front of a light
    prism: A tinted triangular prism lit from the side
    csg: A glass ring (Difference) beside a capsule-like light (Union)
    mirror: Two lights over a mirror floor with a mirror block

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.scene.presets import create_preset
    >>> scene = create_preset("lens")
    >>> scene.get_entity_count()
    2
"""

import math
from collections.abc import Callable

from lumen2d.geometry.shapes import (
    Circle,
    HalfPlane,
    difference,
    intersect,
    rectangle,
    regular_polygon,
    union,
)
from lumen2d.materials.material import GLASS_ETA, WATER_ETA
from lumen2d.scene.manager import SceneManager

# Light colors (radiance; may exceed 1)
WHITE_LIGHT = (2.0, 2.0, 2.0)
WARM_LIGHT = (3.0, 2.4, 1.6)
COOL_LIGHT = (1.2, 1.8, 3.0)


def create_emitter_scene() -> SceneManager:
    """A single emissive disc in the middle of the frame."""
    scene = SceneManager()
    scene.add_emitter(Circle((0.5, 0.5), 0.1), emissive=WHITE_LIGHT)
    return scene


def create_lens_scene() -> SceneManager:
    """A light shining through a biconvex glass lens.

    The lens is the Intersect of two discs of radius 0.2 whose centers are
    0.2 apart, so it spans x in [0.55, 0.75].
    """
    scene = SceneManager()
    scene.add_emitter(Circle((0.2, 0.5), 0.08), emissive=WARM_LIGHT)
    lens = intersect(Circle((0.55, 0.5), 0.2), Circle((0.75, 0.5), 0.2))
    scene.add_glass(lens, eta=GLASS_ETA, absorption=(0.5, 0.5, 0.5))
    return scene


def create_prism_scene() -> SceneManager:
    """A tinted triangular prism beside a light."""
    scene = SceneManager()
    scene.add_emitter(Circle((0.2, 0.3), 0.06), emissive=WHITE_LIGHT)
    prism = regular_polygon((0.6, 0.55), 0.2, 3, rotation=-0.5 * math.pi)
    scene.add_glass(prism, eta=GLASS_ETA, absorption=(4.0, 4.0, 1.0))
    return scene


def create_csg_scene() -> SceneManager:
    """A glass ring and a union-built light exercising every combinator."""
    scene = SceneManager()
    capsule = union(
        union(Circle((0.25, 0.3), 0.06), Circle((0.25, 0.5), 0.06)),
        rectangle(0.19, 0.3, 0.31, 0.5),
    )
    scene.add_emitter(capsule, emissive=COOL_LIGHT)
    ring = difference(Circle((0.65, 0.5), 0.2), Circle((0.65, 0.5), 0.12))
    scene.add_glass(ring, eta=WATER_ETA, absorption=(0.0, 1.0, 2.0))
    return scene


def create_mirror_scene() -> SceneManager:
    """Two lights above a mirror floor, with a mirror block in between."""
    scene = SceneManager()
    scene.add_emitter(Circle((0.3, 0.3), 0.05), emissive=WARM_LIGHT)
    scene.add_emitter(Circle((0.7, 0.3), 0.05), emissive=COOL_LIGHT)
    # Floor occupies y > 0.8
    scene.add_mirror(HalfPlane((0.0, 0.8), (0.0, -1.0)), reflectivity=0.8)
    scene.add_mirror(rectangle(0.45, 0.45, 0.55, 0.65), reflectivity=0.95)
    return scene


PRESETS: dict[str, Callable[[], SceneManager]] = {
    "emitter": create_emitter_scene,
    "lens": create_lens_scene,
    "prism": create_prism_scene,
    "csg": create_csg_scene,
    "mirror": create_mirror_scene,
}


def create_preset(name: str) -> SceneManager:
    """Build a preset scene by name.

    Args:
        name: One of the keys of PRESETS.

    Returns:
        A populated, unsealed SceneManager.

    Raises:
        ValueError: If the preset name is unknown.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown preset {name!r}; choose from {', '.join(sorted(PRESETS))}"
        ) from None
    return factory()
