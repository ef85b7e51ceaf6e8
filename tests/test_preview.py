"""Tests for the preview module.

This module tests preview/export and preview/display including:
- RGBA buffer to Pillow image conversion
- PNG export
- RMSE computation
- Matplotlib figures, drawn on the non-interactive Agg backend

Note: show() is patched out so no window is ever opened.
"""

import numpy as np
import pytest
from PIL import Image as PILImage

from raytrace.preview.export import compute_rmse, rgba_to_image, save_png


@pytest.fixture
def pyplot(monkeypatch):
    """Matplotlib on the Agg backend with show() recording its calls."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    calls = []
    monkeypatch.setattr(plt, "show", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(plt, "show_calls", calls, raising=False)
    yield plt
    plt.close("all")


def _gradient(width=6, height=4):
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = np.arange(width, dtype=np.uint8)[None, :] * 40
    rgba[..., 1] = np.arange(height, dtype=np.uint8)[:, None] * 60
    rgba[..., 3] = 255
    return rgba


class TestExport:
    """Tests for rgba_to_image and save_png."""

    def test_bytes_become_rgba_image(self):
        rgba = _gradient()

        image = rgba_to_image(rgba.tobytes(), 6, 4)

        assert image.mode == "RGBA"
        assert image.size == (6, 4)
        # Row 0 of the buffer is the top row of the image
        assert image.getpixel((5, 0)) == (200, 0, 0, 255)
        assert image.getpixel((0, 3)) == (0, 180, 0, 255)

    def test_size_mismatch_raises(self):
        with pytest.raises(ValueError):
            rgba_to_image(bytes(10), 2, 2)

    def test_save_png_round_trip(self, tmp_path):
        rgba = _gradient()
        path = tmp_path / "out.png"

        save_png(rgba, 6, 4, path)

        with PILImage.open(path) as image:
            assert np.array_equal(np.asarray(image.convert("RGBA")), rgba)


class TestRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self):
        rgba = _gradient()

        assert compute_rmse(rgba, rgba) == 0.0

    def test_constant_offset(self):
        a = np.zeros((2, 2, 3))
        b = np.full((2, 2, 3), 0.5)

        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2)), np.zeros((3, 2)))


class TestDisplay:
    """Tests for the Matplotlib helpers (non-interactive backend)."""

    def test_show_comparison_returns_rmse(self, pyplot):
        from raytrace.preview.display import show_comparison

        a = _gradient()
        b = a.copy()
        b[..., :3] = 0

        rmse = show_comparison(a, b, labels=("light", "brdf"))

        expected = np.sqrt(np.mean((a[..., :3].astype(np.float64) / 255.0) ** 2))
        assert rmse == pytest.approx(expected)
        assert len(pyplot.show_calls) == 1

    def test_show_preview_draws_render(self, pyplot):
        from raytrace.camera.pinhole import Camera
        from raytrace.core.integrator import RenderContext
        from raytrace.lights.sphere_light import RadiometricEmission
        from raytrace.preview.display import show_preview
        from raytrace.scene.manager import Scene

        scene = Scene()
        scene.set_light(center=(0, 10, 0), radius=1.0, emission=RadiometricEmission(flux=1.0))
        context = RenderContext(scene, Camera(resolution=(4, 3)))
        context.render()

        show_preview(context, block=False)

        assert pyplot.show_calls == [{"block": False}]
        assert "16 SPP" in pyplot.gca().get_title()
