#!/usr/bin/env python3
"""Render the three-sphere scene, or a scene loaded from JSON.

Usage:
    python examples/render_spheres.py [options]

Options:
    --width WIDTH         Image width in pixels (default: 800)
    --height HEIGHT       Image height in pixels (default: 600)
    --samples SAMPLES     Samples per pixel in each pass (default: 16)
    --passes PASSES       Number of accumulation passes (default: 4)
    --strategy STRATEGY   light, brdf or hemisphere (default: light)
    --tone-map METHOD     reinhard, aces or khronos (default: reinhard)
    --ev100 EV            Exposure value (default: 0)
    --seed SEED           Random seed (default: 0)
    --scene PATH          JSON scene file written by save_scene()
    --output OUTPUT       Output file path (default: spheres.png)
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python examples/render_spheres.py --width 400 --height 300 --samples 32 --tone-map aces
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the three-sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width", type=int, default=800, help="Image width in pixels (default: 800)"
    )
    parser.add_argument(
        "--height", type=int, default=600, help="Image height in pixels (default: 600)"
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=16,
        help="Samples per pixel in each pass (default: 16)",
    )
    parser.add_argument(
        "--passes",
        type=int,
        default=4,
        help="Number of accumulation passes (default: 4)",
    )
    parser.add_argument(
        "--strategy",
        choices=["light", "brdf", "hemisphere"],
        default="light",
        help="Direction sampling strategy (default: light)",
    )
    parser.add_argument(
        "--tone-map",
        choices=["reinhard", "aces", "khronos"],
        default="reinhard",
        help="Tone mapping operator (default: reinhard)",
    )
    parser.add_argument("--ev100", type=float, default=0.0, help="Exposure value (default: 0)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--scene", type=str, default=None, help="JSON scene file to render")
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def render_spheres(args: argparse.Namespace) -> Path:
    """Render the configured scene and save it to file.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raytrace.camera.pinhole import Camera
    from raytrace.core.integrator import RenderContext
    from raytrace.core.progressive import ProgressiveRenderer
    from raytrace.core.settings import RenderSettings, SamplingStrategy
    from raytrace.scene.manager import load_scene
    from raytrace.scene.presets import create_three_spheres_scene

    resolution = (args.width, args.height)
    scene, camera = create_three_spheres_scene(resolution=resolution)
    if args.scene is not None:
        scene = load_scene(args.scene)
        camera = Camera(resolution=resolution)

    settings = RenderSettings(
        samples_per_pixel=args.samples,
        strategy=SamplingStrategy[args.strategy.upper()],
        tone_map=args.tone_map,
        ev100=args.ev100,
        seed=args.seed,
    )
    renderer = ProgressiveRenderer(RenderContext(scene, camera, settings))

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not args.quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Progress: {current}/{target} passes "
                f"({renderer.sample_count} spp) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    renderer.render(args.passes, callback=progress_callback)
    if not args.quiet:
        print()  # Newline after progress

    output_file = Path(args.output)
    renderer.save_png(output_file)
    logger.info("Saved to %s in %.2fs", output_file.absolute(), time.time() - start_time)
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
    except Exception:
        ti.init(arch=ti.cpu)

    try:
        render_spheres(args)
        return 0
    except (OSError, ValueError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
