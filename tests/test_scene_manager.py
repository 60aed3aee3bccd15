"""Unit tests for the SceneManager.

Tests cover:
- Material registration and lookup
- Entity addition with a Material or a material ID
- Convenience methods (add_emitter, add_mirror, add_glass)
- Sealing and clearing
"""

import pytest


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_add_material_from_keywords(self, fresh_scene):
        mat_id = fresh_scene.add_material(emissive=(1.0, 1.0, 1.0))
        assert mat_id == 0
        assert fresh_scene.get_material_count() == 1
        info = fresh_scene.get_material_info(mat_id)
        assert info.material.emissive == (1.0, 1.0, 1.0)

    def test_add_prebuilt_material(self, fresh_scene):
        from lumen2d.materials.material import Material

        glass = Material(eta=1.5, absorption=(1.0, 1.0, 0.5))
        mat_id = fresh_scene.add_material(glass)
        assert fresh_scene.get_material_info(mat_id).material is glass

    def test_invalid_material_parameters(self, fresh_scene):
        with pytest.raises(ValueError):
            fresh_scene.add_material(reflectivity=2.0)
        assert fresh_scene.get_material_count() == 0

    def test_unknown_material_info(self, fresh_scene):
        assert fresh_scene.get_material_info(0) is None
        assert fresh_scene.get_material_info(-1) is None


class TestEntityAddition:
    """Tests for adding entities."""

    def test_add_entity_with_material(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle
        from lumen2d.materials.material import Material

        idx = fresh_scene.add_entity(Circle((0.5, 0.5), 0.1), Material(reflectivity=0.5))
        assert idx == 0
        assert fresh_scene.get_entity_count() == 1
        assert fresh_scene.get_material_count() == 1

    def test_shared_material_id(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle, rectangle

        mat_id = fresh_scene.add_material(reflectivity=0.9)
        fresh_scene.add_entity(Circle((0.2, 0.2), 0.1), mat_id)
        fresh_scene.add_entity(rectangle(0.5, 0.5, 0.6, 0.6), mat_id)
        assert fresh_scene.get_material_count() == 1
        assert fresh_scene.get_entity_info(1).material_id == mat_id

    def test_invalid_material_id(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle

        with pytest.raises(ValueError):
            fresh_scene.add_entity(Circle((0.5, 0.5), 0.1), 3)

    def test_non_shape_rejected(self, fresh_scene):
        mat_id = fresh_scene.add_material()
        with pytest.raises(TypeError):
            fresh_scene.add_entity("circle", mat_id)

    def test_entity_info_tracks_shape(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle, union

        shape = union(Circle((0.0, 0.0), 1.0), Circle((1.0, 0.0), 1.0))
        idx = fresh_scene.add_emitter(shape, emissive=(1.0, 1.0, 1.0))
        info = fresh_scene.get_entity_info(idx)
        assert info.shape is shape
        assert info.shape_root == 2
        assert fresh_scene.get_entity_info(5) is None


class TestConvenienceMethods:
    """Tests for add_emitter, add_mirror and add_glass."""

    def test_add_emitter(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle

        idx = fresh_scene.add_emitter(Circle((0.5, 0.5), 0.1), emissive=(3.0, 2.0, 1.0))
        material = fresh_scene.get_material_info(fresh_scene.get_entity_info(idx).material_id)
        assert material.material.emissive == (3.0, 2.0, 1.0)

    def test_add_mirror(self, fresh_scene):
        from lumen2d.geometry.shapes import rectangle

        idx = fresh_scene.add_mirror(rectangle(0.0, 0.0, 0.1, 1.0))
        info = fresh_scene.get_material_info(fresh_scene.get_entity_info(idx).material_id)
        assert info.material.reflectivity == pytest.approx(0.9)
        assert not info.material.is_refractive

    def test_add_glass(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle
        from lumen2d.materials.material import GLASS_ETA

        idx = fresh_scene.add_glass(Circle((0.5, 0.5), 0.2), absorption=(4.0, 4.0, 1.0))
        info = fresh_scene.get_material_info(fresh_scene.get_entity_info(idx).material_id)
        assert info.material.eta == pytest.approx(GLASS_ETA)
        assert info.material.absorption == (4.0, 4.0, 1.0)

    def test_add_glass_rejects_non_positive_eta(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle

        with pytest.raises(ValueError):
            fresh_scene.add_glass(Circle((0.5, 0.5), 0.2), eta=0.0)


class TestSealing:
    """A sealed scene is read-only until cleared."""

    def test_sealed_scene_rejects_changes(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle

        fresh_scene.add_emitter(Circle((0.5, 0.5), 0.1), emissive=(1.0, 1.0, 1.0))
        fresh_scene.seal()
        assert fresh_scene.is_sealed
        with pytest.raises(RuntimeError):
            fresh_scene.add_material()
        with pytest.raises(RuntimeError):
            fresh_scene.add_emitter(Circle((0.2, 0.2), 0.1), emissive=(1.0, 1.0, 1.0))
        assert fresh_scene.get_entity_count() == 1

    def test_clear_unseals(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle
        from lumen2d.scene.intersection import get_entity_count

        fresh_scene.add_emitter(Circle((0.5, 0.5), 0.1), emissive=(1.0, 1.0, 1.0))
        fresh_scene.seal()
        fresh_scene.clear()
        assert not fresh_scene.is_sealed
        assert fresh_scene.get_entity_count() == 0
        assert get_entity_count() == 0
        assert fresh_scene.add_emitter(Circle((0.5, 0.5), 0.1), emissive=(1.0, 1.0, 1.0)) == 0

    def test_new_scene_blocked_while_sealed(self, fresh_scene):
        from lumen2d.geometry.shapes import Circle
        from lumen2d.scene.intersection import get_entity_count
        from lumen2d.scene.manager import SceneManager, get_active_scene

        fresh_scene.add_emitter(Circle((0.5, 0.5), 0.1), emissive=(1.0, 1.0, 1.0))
        fresh_scene.seal()
        with pytest.raises(RuntimeError, match="sealed"):
            SceneManager()
        # The sealed scene's data is untouched
        assert get_entity_count() == 1
        assert get_active_scene() is fresh_scene

        fresh_scene.clear()
        other = SceneManager()
        assert get_active_scene() is other
        assert other.add_emitter(Circle((0.2, 0.2), 0.1), emissive=(1.0, 1.0, 1.0)) == 0

    def test_replaced_scene_cannot_be_sealed(self, fresh_scene):
        from lumen2d.scene.manager import SceneManager

        SceneManager()
        with pytest.raises(RuntimeError, match="no longer active"):
            fresh_scene.seal()
        assert not fresh_scene.is_sealed
