"""Pytest configuration for lumen2d tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.

Modules that declare Taichi fields are imported inside the tests, after the
session fixture has run.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear entities, shapes and materials around each test.

    The active SceneManager is cleared as well, so a scene sealed by one
    test's renderer does not block the next test from building its own.
    """
    from lumen2d.scene.intersection import clear_scene
    from lumen2d.scene.manager import get_active_scene

    def _reset():
        scene = get_active_scene()
        if scene is not None:
            scene.clear()
        clear_scene()

    _reset()
    yield
    _reset()


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from lumen2d.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()
