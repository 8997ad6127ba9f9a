#!/usr/bin/env python3
"""Render one of the demo sphere scenes.

This script builds a demo scene, renders it row band by row band with
progress output, and saves the result as a PNG.

Usage:
    python -m examples.render_spheres [options]

Options:
    --scene {three,random}  Scene to render (default: three)
    --width WIDTH           Image width in pixels (default: 400)
    --samples SAMPLES       Number of samples per pixel (default: 32)
    --depth DEPTH           Maximum bounce depth (default: 16)
    --seed SEED             Seed for scene generation and sampling (default: 0)
    --output OUTPUT         Output file path (default: spheres.png)
    --rows-per-batch ROWS   Image rows per progress update (default: 16)
    --cpu                   Force the CPU backend
    --quiet                 Suppress progress output

Example:
    python -m examples.render_spheres --scene random --width 320 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a demo sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("three", "random"),
        default="three",
        help="Scene to render (default: three)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=32,
        help="Number of samples per pixel (default: 32)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=16,
        help="Maximum bounce depth (default: 16)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for scene generation and sampling (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=16,
        help="Image rows per progress update (default: 16)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    scene: str = "three",
    width: int = 400,
    num_samples: int = 32,
    max_depth: int = 16,
    seed: int = 0,
    output_path: str = "spheres.png",
    rows_per_batch: int = 16,
    quiet: bool = False,
) -> Path:
    """Render a demo scene and save it to file.

    Args:
        scene: "three" for the three-spheres scene, "random" for the
            random-spheres scene.
        width: Image width in pixels.
        num_samples: Number of samples per pixel.
        max_depth: Maximum bounce depth.
        seed: Seed for the random-spheres scene generator.
        output_path: Output file path (PNG).
        rows_per_batch: Number of image rows rendered between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.spheretracer.camera.camera import Camera
    from src.spheretracer.preview.export import save_png
    from src.spheretracer.scene.demo_scenes import (
        create_random_spheres_scene,
        create_three_spheres_scene,
    )

    if scene == "random":
        world, config = create_random_spheres_scene(
            seed=seed, image_width=width, num_samples=num_samples, max_bounce_depth=max_depth
        )
    else:
        world, config = create_three_spheres_scene(
            image_width=width, num_samples=num_samples, max_bounce_depth=max_depth
        )

    camera = Camera(config)

    if not quiet:
        print(
            f"Rendering {scene} scene ({camera.image_width}x{camera.image_height}, "
            f"{len(world)} spheres, {num_samples} spp)..."
        )

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (done / total) * 100 if total > 0 else 0
            pixels_per_sec = done / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {done}/{total} pixels "
                f"({progress_pct:.1f}%) - {pixels_per_sec:.0f} px/s",
                end="",
                flush=True,
            )

    pixels = camera.render(world, rows_per_batch=rows_per_batch, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(pixels, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu, random_seed=args.seed)
    else:
        try:
            ti.init(arch=ti.gpu, random_seed=args.seed)
        except Exception:
            ti.init(arch=ti.cpu, random_seed=args.seed)

    try:
        render_spheres(
            scene=args.scene,
            width=args.width,
            num_samples=args.samples,
            max_depth=args.depth,
            seed=args.seed,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
