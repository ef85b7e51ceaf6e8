"""Image export for rendered RGBA buffers.

The render core hands out a flat RGBA byte buffer (row-major, row 0 at the
top, four 8-bit channels per pixel). This module turns such a buffer into a
Pillow image and writes it as PNG.

Example:
    >>> from raytrace.preview.export import save_png
    >>> context.render()
    >>> save_png(context.rgba_buffer(), context.width, context.height, "output.png")
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Bytes per RGBA pixel
CHANNELS = 4


def rgba_to_image(
    rgba: bytes | npt.NDArray[np.uint8], width: int, height: int
) -> PILImage.Image:
    """Wrap an RGBA buffer in a Pillow image.

    Args:
        rgba: Flat RGBA bytes or a uint8 array holding width * height * 4 values.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        An RGBA Pillow image.

    Raises:
        ValueError: If the buffer size does not match the dimensions.
    """
    expected = width * height * CHANNELS
    data = np.frombuffer(rgba, dtype=np.uint8) if isinstance(rgba, bytes) else rgba
    if data.size != expected:
        raise ValueError(
            f"RGBA buffer holds {data.size} bytes, expected {expected} for {width}x{height}"
        )
    pixels = np.ascontiguousarray(data, dtype=np.uint8).reshape(height, width, CHANNELS)
    return PILImage.fromarray(pixels)


def save_png(
    rgba: bytes | npt.NDArray[np.uint8],
    width: int,
    height: int,
    filepath: str | Path,
) -> None:
    """Save an RGBA buffer as a PNG file.

    Args:
        rgba: Flat RGBA bytes or a uint8 array holding width * height * 4 values.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the buffer size does not match the dimensions.
    """
    image = rgba_to_image(rgba, width, height)
    image.save(filepath, format="PNG")
    logger.info("Saved %dx%d image to %s", width, height, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating | np.integer],
    image_b: npt.NDArray[np.floating | np.integer],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
