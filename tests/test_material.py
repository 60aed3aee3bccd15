"""Unit tests for the material model and registry.

Tests cover:
- Validation of emissive, reflectivity, eta and absorption
- Registry IDs, counts and clearing
- GPU-side accessors
- Registry capacity
"""

import math

import pytest
import taichi as ti


class TestMaterialValidation:
    """Tests for Material construction."""

    def test_defaults_are_black_opaque(self):
        from lumen2d.materials.material import Material

        m = Material()
        assert m.emissive == (0.0, 0.0, 0.0)
        assert m.reflectivity == 0.0
        assert not m.is_refractive
        assert not m.is_emissive

    def test_emissive_may_exceed_one(self):
        from lumen2d.materials.material import Material

        m = Material(emissive=(10.0, 5.0, 2.0))
        assert m.is_emissive

    def test_reflectivity_range(self):
        from lumen2d.materials.material import Material

        Material(reflectivity=0.0)
        Material(reflectivity=1.0)
        with pytest.raises(ValueError):
            Material(reflectivity=1.5)
        with pytest.raises(ValueError):
            Material(reflectivity=-0.1)

    def test_negative_components_rejected(self):
        from lumen2d.materials.material import Material

        with pytest.raises(ValueError):
            Material(emissive=(-1.0, 0.0, 0.0))
        with pytest.raises(ValueError):
            Material(absorption=(0.0, -0.5, 0.0))

    def test_non_finite_rejected(self):
        from lumen2d.materials.material import Material

        with pytest.raises(ValueError):
            Material(emissive=(math.inf, 0.0, 0.0))
        with pytest.raises(ValueError):
            Material(eta=math.nan)

    def test_wrong_component_count(self):
        from lumen2d.materials.material import Material

        with pytest.raises(ValueError):
            Material(emissive=(1.0, 1.0))

    def test_eta_marks_refraction(self):
        from lumen2d.materials.material import GLASS_ETA, Material

        assert Material(eta=GLASS_ETA).is_refractive
        with pytest.raises(ValueError):
            Material(eta=-1.0)


class TestMaterialRegistry:
    """Tests for the Taichi-side material storage."""

    def test_ids_are_sequential(self):
        from lumen2d.materials.material import Material, add_material, get_material_count

        assert add_material(Material()) == 0
        assert add_material(Material(reflectivity=0.5)) == 1
        assert get_material_count() == 2

    def test_clear_resets_count(self):
        from lumen2d.materials.material import (
            Material,
            add_material,
            clear_materials,
            get_material_count,
        )

        add_material(Material())
        clear_materials()
        assert get_material_count() == 0
        assert add_material(Material()) == 0

    def test_accessors_read_back_fields(self):
        from lumen2d.materials.material import (
            Material,
            add_material,
            get_absorption,
            get_emissive,
            get_eta,
            get_reflectivity,
        )

        add_material(Material())
        material_id = add_material(
            Material(
                emissive=(1.0, 2.0, 3.0),
                reflectivity=0.25,
                eta=1.33,
                absorption=(0.1, 0.2, 0.3),
            )
        )
        out = ti.field(dtype=ti.f64, shape=8)

        @ti.kernel
        def read_kernel(mid: ti.i32):
            e = get_emissive(mid)
            a = get_absorption(mid)
            for c in ti.static(range(3)):
                out[c] = e[c]
                out[3 + c] = a[c]
            out[6] = get_reflectivity(mid)
            out[7] = get_eta(mid)

        read_kernel(material_id)
        assert out.to_numpy() == pytest.approx([1.0, 2.0, 3.0, 0.1, 0.2, 0.3, 0.25, 1.33])

    def test_capacity(self):
        from lumen2d.materials.material import MAX_MATERIALS, Material, add_material

        m = Material()
        for _ in range(MAX_MATERIALS):
            add_material(m)
        with pytest.raises(RuntimeError):
            add_material(m)
