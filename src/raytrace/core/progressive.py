"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around a RenderContext that supports:
- Progressive rendering that refines over time
- Progress callbacks for UI updates
- Easy reset and re-render functionality

Every pass adds settings.samples_per_pixel samples per pixel; passes use
distinct stream seeds, so the running average keeps converging.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.core.integrator import RenderContext
    >>> from raytrace.core.progressive import ProgressiveRenderer
    >>> from raytrace.scene.presets import create_three_spheres_scene
    >>>
    >>> scene, camera = create_three_spheres_scene()
    >>> renderer = ProgressiveRenderer(RenderContext(scene, camera))
    >>> renderer.render(8)  # 8 passes
    >>> renderer.save_png("spheres.png")
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from raytrace.core.integrator import RenderContext
from raytrace.preview.export import save_png

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (completed_passes, target_passes)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates passes over time.

    Attributes:
        context: The wrapped render context.
    """

    def __init__(self, context: RenderContext) -> None:
        self.context = context

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.context.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.context.height

    @property
    def pass_count(self) -> int:
        """Get the number of passes rendered since the last reset."""
        return self.context.pass_count

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return self.context.sample_count

    def reset(self) -> None:
        """Reset the accumulator for a new render."""
        self.context.reset()

    def render(self, num_passes: int = 1, callback: ProgressCallback | None = None) -> None:
        """Render passes with an optional progress callback.

        Args:
            num_passes: Number of passes to add.
            callback: Optional callback function called after each pass.
                Receives (completed_passes, target_passes).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} passes")
            >>> renderer.render(16, callback=progress)
        """
        for current, target in self.render_progressive(num_passes):
            if callback is not None:
                callback(current, target)

    def render_progressive(self, num_passes: int = 1) -> Generator[tuple[int, int], None, None]:
        """Render passes, yielding progress after each one.

        Args:
            num_passes: Number of passes to add.

        Yields:
            Tuple of (completed_passes, target_passes).
        """
        if num_passes <= 0:
            return

        target = self.pass_count + num_passes
        while self.pass_count < target:
            self.context.render(1)
            yield (self.pass_count, target)

    def _require_samples(self) -> None:
        if self.pass_count == 0:
            raise RuntimeError("Nothing rendered yet. Call render() first.")

    def get_image_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the tone-mapped image as an array of shape (height, width, 4).

        Raises:
            RuntimeError: If no pass has been rendered.
        """
        self._require_samples()
        return self.context.rgba_array()

    def rgba_buffer(self) -> bytes:
        """Get the tone-mapped image as a flat RGBA byte buffer.

        Raises:
            RuntimeError: If no pass has been rendered.
        """
        self._require_samples()
        return self.context.rgba_buffer()

    def save_png(self, filepath: str | Path) -> None:
        """Save the rendered image to a PNG file.

        Raises:
            RuntimeError: If no pass has been rendered.
        """
        buffer = self.rgba_buffer()
        save_png(buffer, self.width, self.height, filepath)
        logger.debug("Saved after %d passes (%d spp)", self.pass_count, self.sample_count)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
