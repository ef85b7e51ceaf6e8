"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Safe normalization and reflection
- Orthonormal basis construction
"""

import numpy as np
import pytest
import taichi as ti

# Unit normals covering both helper-axis branches and the axis directions
TEST_NORMALS = np.array(
    [
        [0.0, 0.0, 1.0],
        [0.0, 0.0, -1.0],
        [1.0, 0.0, 0.0],
        [-1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.95, 0.3, 0.0],
        [0.89, 0.1, 0.44],
        [0.3, -0.5, 0.8],
        [-0.6, 0.64, -0.48],
    ],
    dtype=np.float32,
)
TEST_NORMALS /= np.linalg.norm(TEST_NORMALS, axis=1, keepdims=True)


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from raytrace.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        from raytrace.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2]) < 1e-6


class TestVectorUtilities:
    """Tests for normalization and reflection."""

    def test_normalize_safe_unit_length(self):
        """Test normalize_safe returns a unit vector."""
        from raytrace.core.ray import normalize_safe, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize_safe(vec3(3.0, 0.0, 4.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.6) < 1e-6
        assert abs(r[2] - 0.8) < 1e-6

    def test_normalize_safe_zero_vector(self):
        """Test normalize_safe maps the zero vector to zero instead of NaN."""
        from raytrace.core.ray import normalize_safe, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize_safe(vec3(0.0, 0.0, 0.0))

        test_kernel()
        r = result[None]
        assert not np.any(np.isnan(r.to_numpy()))
        assert abs(r[0]) < 1e-12 and abs(r[1]) < 1e-12 and abs(r[2]) < 1e-12

    def test_reflect_mirror(self):
        """Test reflect mirrors a 45 degree incident vector."""
        from raytrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(vec3(1.0, -1.0, 0.0))
            result[None] = reflect(incident, vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        s = 1.0 / np.sqrt(2.0)
        assert abs(r[0] - s) < 1e-6
        assert abs(r[1] - s) < 1e-6
        assert abs(r[2]) < 1e-6

    @pytest.mark.parametrize("normal_index", range(len(TEST_NORMALS)))
    def test_reflect_properties(self, normal_index):
        """Test dot(reflect(i, n), n) == -dot(i, n) and |reflect(i, n)| == 1."""
        from raytrace.core.ray import reflect

        rng = np.random.default_rng(normal_index)
        incident = rng.normal(size=3).astype(np.float32)
        incident /= np.linalg.norm(incident)

        normal_field = ti.field(dtype=ti.math.vec3, shape=())
        incident_field = ti.field(dtype=ti.math.vec3, shape=())
        result = ti.field(dtype=ti.math.vec3, shape=())
        normal_field[None] = TEST_NORMALS[normal_index].tolist()
        incident_field[None] = incident.tolist()

        @ti.kernel
        def test_kernel():
            result[None] = reflect(incident_field[None], normal_field[None])

        test_kernel()
        r = result[None].to_numpy()
        n = TEST_NORMALS[normal_index]
        assert abs(np.dot(r, n) + np.dot(incident, n)) < 1e-5
        assert abs(np.linalg.norm(r) - 1.0) < 1e-5


class TestOrthonormalBasis:
    """Tests for build_orthonormal_basis and local_to_world."""

    def test_basis_properties(self):
        """Test unit length, mutual orthogonality and cross(t, b) == n."""
        from raytrace.core.ray import build_orthonormal_basis

        count = len(TEST_NORMALS)
        normals = ti.Vector.field(3, dtype=ti.f32, shape=count)
        tangents = ti.Vector.field(3, dtype=ti.f32, shape=count)
        bitangents = ti.Vector.field(3, dtype=ti.f32, shape=count)
        normals.from_numpy(TEST_NORMALS)

        @ti.kernel
        def test_kernel():
            for i in range(count):
                t, b = build_orthonormal_basis(normals[i])
                tangents[i] = t
                bitangents[i] = b

        test_kernel()
        t_all = tangents.to_numpy()
        b_all = bitangents.to_numpy()
        for n, t, b in zip(TEST_NORMALS, t_all, b_all):
            assert abs(np.linalg.norm(t) - 1.0) < 1e-5
            assert abs(np.linalg.norm(b) - 1.0) < 1e-5
            assert abs(np.dot(t, b)) < 1e-5
            assert abs(np.dot(t, n)) < 1e-5
            assert abs(np.dot(b, n)) < 1e-5
            assert np.allclose(np.cross(t, b), n, atol=1e-5)

    def test_basis_is_deterministic(self):
        """Test the same normal always yields the same frame."""
        from raytrace.core.ray import build_orthonormal_basis, vec3

        results = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            for i in range(2):
                t, _b = build_orthonormal_basis(ti.math.normalize(vec3(0.2, 0.3, 0.9)))
                results[i] = t

        test_kernel()
        r = results.to_numpy()
        assert np.array_equal(r[0], r[1])

    def test_local_to_world_maps_z_to_normal(self):
        """Test the local z-axis maps onto the normal."""
        from raytrace.core.ray import build_orthonormal_basis, local_to_world, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            n = ti.math.normalize(vec3(1.0, 1.0, 0.0))
            t, b = build_orthonormal_basis(n)
            result[None] = local_to_world(vec3(0.0, 0.0, 1.0), t, b, n)

        test_kernel()
        r = result[None]
        s = 1.0 / np.sqrt(2.0)
        assert abs(r[0] - s) < 1e-6
        assert abs(r[1] - s) < 1e-6
        assert abs(r[2]) < 1e-6
