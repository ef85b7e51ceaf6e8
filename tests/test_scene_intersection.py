"""Unit tests for kernel-side scene storage and closest-hit queries.

Tests cover:
- Uploading scenes (missing light, capacity)
- Nearest hit among several spheres regardless of insertion order
- Light hits reporting the emitted radiance
- Tie-break between coincident spheres
"""

import numpy as np
import pytest
import taichi as ti

from raytrace.geometry.sphere import IntersectionKind
from raytrace.lights.sphere_light import RadiometricEmission
from raytrace.scene.manager import Scene


def _scene(spheres, light_center=(0.0, 100.0, 0.0), light_radius=1.0):
    """Build a scene from (center, radius, diffuse) triples plus a distant light."""
    scene = Scene(ambient=(0.0, 0.0, 0.0))
    for center, radius, diffuse in spheres:
        scene.add_sphere(center=center, radius=radius, diffuse=diffuse)
    scene.set_light(
        center=light_center, radius=light_radius, emission=RadiometricEmission(flux=100.0)
    )
    return scene


def _closest(scene, origin, direction):
    """Trace one ray through a scene and return (kind, point, diffuse, radiance)."""
    from raytrace.core.ray import make_ray
    from raytrace.scene.intersection import SceneData

    data = SceneData(scene)
    kind = ti.field(dtype=ti.i32, shape=())
    vectors = ti.Vector.field(3, dtype=ti.f32, shape=5)
    vectors[0] = origin
    vectors[1] = direction

    @ti.kernel
    def test_kernel():
        record = data.closest_hit(make_ray(vectors[0], vectors[1]))
        kind[None] = record.kind
        vectors[2] = record.point
        vectors[3] = record.material.diffuse
        vectors[4] = record.radiance

    test_kernel()
    v = vectors.to_numpy()
    return kind[None], v[2], v[3], v[4]


class TestSceneData:
    """Tests for uploading scenes."""

    def test_scene_without_light_raises(self):
        from raytrace.scene.intersection import SceneData

        scene = Scene()
        scene.add_sphere(center=(0, 0, 0), radius=1.0, diffuse=(1, 1, 1))

        with pytest.raises(ValueError):
            SceneData(scene)

    def test_reload_over_capacity_raises(self):
        from raytrace.scene.intersection import SceneData

        data = SceneData(_scene([((0, 0, 0), 1.0, (1, 1, 1))]))
        bigger = _scene([((0, 0, 0), 1.0, (1, 1, 1)), ((3, 0, 0), 1.0, (1, 1, 1))])

        with pytest.raises(ValueError):
            data.load(bigger)

    def test_empty_scene_still_has_light(self):
        """Test a scene with only a light uploads and can be hit."""
        kind, _, _, radiance = _closest(_scene([]), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))

        assert kind == IntersectionKind.HIT_LIGHT
        expected = 100.0 / (4.0 * np.pi) / np.pi
        assert np.allclose(radiance, expected, rtol=1e-5)


class TestClosestHit:
    """Tests for SceneData.closest_hit."""

    def test_miss_everything(self):
        scene = _scene([((0, 0, 0), 1.0, (1, 0, 0))])

        kind, _, _, _ = _closest(scene, (0.0, 0.0, 5.0), (0.0, 0.0, 1.0))

        assert kind == IntersectionKind.MISS

    @pytest.mark.parametrize("reverse", [False, True])
    def test_nearest_of_two_spheres(self, reverse):
        """Test the nearer sphere wins whatever the insertion order."""
        spheres = [((0, 0, 0), 1.0, (1, 0, 0)), ((0, 0, -5), 1.0, (0, 1, 0))]
        if reverse:
            spheres.reverse()

        kind, point, diffuse, _ = _closest(_scene(spheres), (0.0, 0.0, 5.0), (0.0, 0.0, -1.0))

        assert kind == IntersectionKind.HIT_SURFACE
        assert np.allclose(diffuse, [1.0, 0.0, 0.0])
        assert point[2] == pytest.approx(1.0, abs=1e-3)

    def test_light_hit_reports_radiance(self):
        scene = _scene([((0, 0, 0), 1.0, (1, 0, 0))], light_center=(0.0, 10.0, 0.0))

        kind, point, _, radiance = _closest(scene, (0.0, 2.0, 0.0), (0.0, 1.0, 0.0))

        assert kind == IntersectionKind.HIT_LIGHT
        assert point[1] == pytest.approx(9.0, abs=1e-3)
        assert np.allclose(radiance, scene.light.emitted_radiance, rtol=1e-5)

    def test_sphere_occludes_light(self):
        """Test a sphere between the origin and the light is reported instead."""
        scene = _scene([((0, 5, 0), 1.0, (0, 0, 1))], light_center=(0.0, 10.0, 0.0))

        kind, _, diffuse, _ = _closest(scene, (0.0, 2.0, 0.0), (0.0, 1.0, 0.0))

        assert kind == IntersectionKind.HIT_SURFACE
        assert np.allclose(diffuse, [0.0, 0.0, 1.0])

    def test_coincident_spheres_keep_first(self):
        """Test equal distances are resolved in favor of the earlier sphere."""
        spheres = [((0, 0, 0), 1.0, (1, 0, 0)), ((0, 0, 0), 1.0, (0, 1, 0))]

        _, _, diffuse, _ = _closest(_scene(spheres), (0.0, 0.0, 5.0), (0.0, 0.0, -1.0))

        assert np.allclose(diffuse, [1.0, 0.0, 0.0])
