"""Unit tests for direction sampling and PDFs.

Tests cover:
- GGX half-vector sampling and its PDF
- Importance-sampling consistency of the single-sample GGX estimator
- Uniform hemisphere sampling
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestGGXSampling:
    """Tests for ggx_direction and sample_ggx."""

    def test_head_on_sample_reflects_normal(self):
        """Test u1 = 0 gives the normal as half vector and mirrors the view."""
        from raytrace.core.sampling import ggx_direction
        from raytrace.materials.microfacet import vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        pdf = ti.field(dtype=ti.f32, shape=())
        valid = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 0.0, 1.0)
            view = ti.math.normalize(vec3(0.5, 0.0, 1.0))
            d, p, ok = ggx_direction(0.0, 0.25, view, n, 0.5)
            direction[None] = d
            pdf[None] = p
            valid[None] = ok

        test_kernel()
        view = np.array([0.5, 0.0, 1.0]) / np.linalg.norm([0.5, 0.0, 1.0])
        expected = np.array([-view[0], 0.0, view[2]])
        assert valid[None] == 1
        assert np.allclose(direction[None].to_numpy(), expected, atol=1e-5)
        # D(1) * 1 / (4 * VoH) with VoH = view.z
        alpha = 0.25
        expected_pdf = (1.0 / (math.pi * alpha * alpha)) / (4.0 * view[2] + 1e-6)
        assert abs(pdf[None] - expected_pdf) / expected_pdf < 1e-4

    def test_samples_are_unit_and_valid_ones_above_horizon(self):
        """Test sampled directions are unit length and valid ones face the normal."""
        from raytrace.core.rng import seed_stream
        from raytrace.core.sampling import sample_ggx
        from raytrace.materials.microfacet import vec3

        n = 4096
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        pdfs = ti.field(dtype=ti.f32, shape=n)
        valid = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                normal = ti.math.normalize(vec3(0.2, 0.9, -0.3))
                view = ti.math.normalize(vec3(0.9, 0.3, 0.1))
                d, p, ok, _rng = sample_ggx(view, normal, 0.6, seed_stream(1, i, 0))
                directions[i] = d
                pdfs[i] = p
                valid[i] = ok

        test_kernel()
        d = directions.to_numpy()
        ok = valid.to_numpy() == 1
        normal = np.array([0.2, 0.9, -0.3]) / np.linalg.norm([0.2, 0.9, -0.3])
        assert np.allclose(np.linalg.norm(d, axis=1), 1.0, atol=1e-4)
        assert ok.any()
        assert np.all(d[ok] @ normal > -1e-6)
        assert np.all(pdfs.to_numpy()[ok] > 0.0)
        # Oblique view: some reflections fall below the horizon
        assert not ok.all()

    def test_importance_sampling_consistency(self):
        """Test the mean of BRDF * NoL / pdf for a smooth metal converges to 1.

        With metallic 1 and white albedo F = 1, and for a near-specular lobe
        the directional albedo under uniform unit illumination is close to 1.
        """
        from raytrace.core.rng import seed_stream
        from raytrace.core.sampling import ggx_sample_weight
        from raytrace.materials.microfacet import Material, vec3

        trials = 20000
        total = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            for i in range(trials):
                normal = vec3(0.0, 0.0, 1.0)
                material = Material(diffuse=vec3(1.0, 1.0, 1.0), metallic=1.0, roughness=0.1)
                rng = seed_stream(9, i, 0)
                weight, _d, _rng = ggx_sample_weight(normal, normal, material, rng)
                total[None] += weight / trials

        test_kernel()
        mean = total[None].to_numpy()
        assert np.allclose(mean, 1.0, rtol=0.03)

    def test_invalid_sample_has_zero_weight(self):
        """Test a reflection below the horizon contributes nothing."""
        from raytrace.core.rng import seed_stream
        from raytrace.core.sampling import ggx_sample_weight, sample_ggx
        from raytrace.materials.microfacet import Material, vec3

        n = 2048
        weights = ti.Vector.field(3, dtype=ti.f32, shape=n)
        valid = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                normal = vec3(0.0, 0.0, 1.0)
                view = ti.math.normalize(vec3(1.0, 0.0, 0.05))
                material = Material(diffuse=vec3(1.0, 1.0, 1.0), metallic=1.0, roughness=0.9)
                rng = seed_stream(2, i, 0)
                _d, _p, ok, _r = sample_ggx(view, normal, material.roughness, rng)
                w, _d2, _r2 = ggx_sample_weight(view, normal, material, rng)
                valid[i] = ok
                weights[i] = w

        test_kernel()
        invalid = valid.to_numpy() == 0
        assert invalid.any()
        assert np.all(weights.to_numpy()[invalid] == 0.0)


class TestUniformHemisphere:
    """Tests for uniform hemisphere sampling."""

    @pytest.mark.parametrize("normal", [(0.0, 0.0, 1.0), (1.0, 0.0, 0.0), (0.0, -1.0, 0.0)])
    def test_directions_in_hemisphere(self, normal):
        """Test directions are unit length and on the normal's side."""
        from raytrace.core.rng import seed_stream
        from raytrace.core.sampling import UNIFORM_HEMISPHERE_PDF, sample_uniform_hemisphere
        from raytrace.materials.microfacet import vec3

        n = 4096
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        pdfs = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel(nx: ti.f32, ny: ti.f32, nz: ti.f32):
            for i in range(n):
                rng = seed_stream(4, i, 0)
                d, p, _ok, _rng = sample_uniform_hemisphere(vec3(nx, ny, nz), rng)
                directions[i] = d
                pdfs[i] = p

        test_kernel(*normal)
        d = directions.to_numpy()
        assert np.allclose(np.linalg.norm(d, axis=1), 1.0, atol=1e-4)
        assert np.all(d @ np.array(normal) >= -1e-6)
        assert np.allclose(pdfs.to_numpy(), UNIFORM_HEMISPHERE_PDF)
        assert abs(UNIFORM_HEMISPHERE_PDF - 1.0 / (2.0 * math.pi)) < 1e-12

    def test_cosine_is_uniform(self):
        """Test cos(theta) is uniform on [0, 1] (mean 1/2)."""
        from raytrace.core.sampling import uniform_hemisphere_direction
        from raytrace.materials.microfacet import vec3

        n = 64
        cosines = ti.field(dtype=ti.f32, shape=(n, n))

        @ti.kernel
        def test_kernel():
            for i, j in cosines:
                u = (i + 0.5) / n
                v = (j + 0.5) / n
                d = uniform_hemisphere_direction(u, v, vec3(0.0, 0.0, 1.0))
                cosines[i, j] = d.z

        test_kernel()
        assert abs(cosines.to_numpy().mean() - 0.5) < 1e-3

    def test_monte_carlo_cosine_integral(self):
        """Test sum(NoL / pdf) / N estimates the cosine integral pi."""
        from raytrace.core.rng import seed_stream
        from raytrace.core.sampling import sample_uniform_hemisphere
        from raytrace.materials.microfacet import vec3

        trials = 20000
        total = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            for i in range(trials):
                normal = vec3(0.0, 1.0, 0.0)
                d, p, ok, _rng = sample_uniform_hemisphere(normal, seed_stream(6, i, 0))
                if ok == 1:
                    total[None] += ti.math.dot(d, normal) / p / trials

        test_kernel()
        assert abs(total[None] - math.pi) / math.pi < 0.02
