"""Pytest configuration for raytrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def single_sphere_scene():
    """A unit red dielectric sphere at the origin lit from straight above."""
    from raytrace.lights.sphere_light import RadiometricEmission
    from raytrace.scene.manager import Scene

    scene = Scene(ambient=(0.1, 0.1, 0.1))
    scene.add_sphere(center=(0.0, 0.0, 0.0), radius=1.0, diffuse=(1.0, 0.0, 0.0), roughness=0.5)
    scene.set_light(center=(0.0, 10.0, 0.0), radius=0.1, emission=RadiometricEmission(flux=3000.0))
    return scene
