"""Scene module for entity storage, hit resolution and scene building.

Components:
    intersection: Entity fields, SceneHitRecord and nearest-hit resolution
    manager: SceneManager builder with material/entity bookkeeping
    presets: Ready-made demonstration scenes

A scene is an ordered list of entities, each a shape with a material. Ray
queries resolve to the entity whose hit point is nearest to the ray origin
and return that hit merged with the entity's material fields.

Every submodule declares or drives Taichi fields, so import them after
``lumen2d.init()``:

    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.scene.presets import create_preset
"""
