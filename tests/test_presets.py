"""Tests for the preset scenes."""

import numpy as np
import pytest


class TestPresets:
    """Every preset builds and renders."""

    @pytest.mark.parametrize(
        "name, entities",
        [("emitter", 1), ("lens", 2), ("prism", 2), ("csg", 2), ("mirror", 4)],
    )
    def test_entity_counts(self, name, entities):
        from lumen2d.scene.intersection import get_entity_count
        from lumen2d.scene.presets import create_preset

        scene = create_preset(name)
        assert scene.get_entity_count() == entities
        assert get_entity_count() == entities
        assert not scene.is_sealed

    def test_every_preset_is_listed(self):
        from lumen2d.scene.presets import PRESETS

        assert sorted(PRESETS) == ["csg", "emitter", "lens", "mirror", "prism"]

    def test_unknown_preset(self):
        from lumen2d.scene.presets import create_preset

        with pytest.raises(ValueError, match="Unknown preset"):
            create_preset("cornell")

    def test_lens_preset_contains_its_midpoint(self):
        from lumen2d.geometry.csg import contains_points
        from lumen2d.scene.presets import create_lens_scene

        scene = create_lens_scene()
        lens = scene.get_entity_info(1)
        inside = contains_points(lens.shape_root, [[0.65, 0.5], [0.5, 0.5], [0.8, 0.5]])
        assert inside.tolist() == [True, False, False]

    @pytest.mark.parametrize("name", ["lens", "csg", "mirror"])
    def test_small_render_is_finite(self, name):
        from lumen2d.core.renderer import RenderConfig, Renderer
        from lumen2d.scene.presets import create_preset

        renderer = Renderer(create_preset(name), RenderConfig(width=8, height=8, samples=8))
        image = renderer.render()
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)
        assert image.any()
