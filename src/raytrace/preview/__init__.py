"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PNG export of RGBA buffers (Pillow)

Example:
    >>> from raytrace.preview import save_png, show_preview
    >>> context.render(4)
    >>> show_preview(context)
    >>> save_png(context.rgba_buffer(), context.width, context.height, "output.png")
"""

from raytrace.preview.display import show_comparison, show_preview
from raytrace.preview.export import compute_rmse, rgba_to_image, save_png

__all__ = [
    # Display functions
    "show_preview",
    "show_comparison",
    # Export functions
    "save_png",
    "rgba_to_image",
    "compute_rmse",
]
