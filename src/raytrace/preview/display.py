"""Matplotlib-based preview of rendered images.

Example:
    >>> from raytrace.preview.display import show_preview
    >>> context.render(4)
    >>> show_preview(context)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from raytrace.core.integrator import RenderContext


def show_preview(
    context: RenderContext,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display the current tone-mapped render as a Matplotlib figure.

    The sample count and tone mapper are shown in the title.

    Args:
        context: The render context to display.
        title: Custom title (default shows sample count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    rgba = context.rgba_array()

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(rgba)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {context.sample_count} SPP ({context.settings.tone_map})"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two RGBA renders side by side with their amplified difference.

    Useful to compare sampling strategies, which converge to the same image.

    Args:
        image_a: First RGBA image of shape (H, W, 4).
        image_b: Second RGBA image of shape (H, W, 4).
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two images' color channels, in [0, 1] units.
    """
    import matplotlib.pyplot as plt

    color_a = image_a[..., :3].astype(np.float64) / 255.0
    color_b = image_b[..., :3].astype(np.float64) / 255.0

    diff = color_a - color_b
    rmse = float(np.sqrt(np.mean(diff**2)))
    diff_amplified = np.clip(np.abs(diff) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(color_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(color_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
