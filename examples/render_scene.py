#!/usr/bin/env python3
"""Render a preset 2-D scene.

This script renders one of the built-in preset scenes with stratified
angular sampling and saves the result as an 8-bit image.

Usage:
    python -m examples.render_scene [options]

Options:
    --preset NAME       Scene preset (default: lens)
    --width WIDTH       Image width in pixels (default: 512)
    --height HEIGHT     Image height in pixels (default: 512)
    --samples SAMPLES   Angular samples per pixel (default: 64)
    --max-depth DEPTH   Maximum reflection/refraction depth (default: 3)
    --seed SEED         Random seed (default: 0)
    --output OUTPUT     Output file path (default: out.png)
    --batch-rows ROWS   Rows per progress update (default: 16)
    --quiet             Suppress progress output
    --verbose           Enable debug logging
    --cpu               Force the CPU backend
    --show              Show a Matplotlib preview after rendering

Example:
    python -m examples.render_scene --preset prism --width 256 --height 256 --samples 32
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset 2-D scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--preset",
        type=str,
        default="lens",
        help="Scene preset: emitter, lens, prism, csg or mirror (default: lens)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=512,
        help="Image height in pixels (default: 512)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=64,
        help="Angular samples per pixel (default: 64)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=3,
        help="Maximum reflection/refraction depth (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="out.png",
        help="Output file path (default: out.png)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=16,
        help="Rows per progress update (default: 16)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show a Matplotlib preview after rendering",
    )
    return parser.parse_args(argv)


def render_scene(
    preset: str = "lens",
    width: int = 512,
    height: int = 512,
    samples: int = 64,
    max_depth: int = 3,
    seed: int = 0,
    output_path: str = "out.png",
    batch_rows: int = 16,
    quiet: bool = False,
    show: bool = False,
) -> Path:
    """Render a preset scene and save it to a file.

    Args:
        preset: Name of the preset scene.
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Angular samples per pixel.
        max_depth: Maximum reflection/refraction depth.
        seed: Random seed.
        output_path: Output file path.
        batch_rows: Number of rows rendered between progress updates.
        quiet: If True, suppress progress output.
        show: If True, display the result with Matplotlib.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from lumen2d.core.renderer import RenderConfig, Renderer
    from lumen2d.scene.presets import create_preset

    config = RenderConfig(
        width=width,
        height=height,
        samples=samples,
        max_depth=max_depth,
        seed=seed,
        rows_per_batch=batch_rows,
    )

    if not quiet:
        print(f"Creating '{preset}' scene ({width}x{height})...")
    scene = create_preset(preset)
    renderer = Renderer(scene, config)

    if not quiet:
        print(f"Rendering {samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            rows_per_sec = rows_done / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({progress_pct:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = renderer.save(output_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        from lumen2d.preview.display import show_preview

        show_preview(renderer, title=f"{preset} ({samples} samples)")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    import lumen2d

    # Use GPU if available, fall back to CPU
    if args.cpu:
        lumen2d.init(ti.cpu)
        if not args.quiet:
            print("Using CPU backend")
    else:
        try:
            lumen2d.init(ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except RuntimeError:
            lumen2d.init(ti.cpu)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_scene(
            preset=args.preset,
            width=args.width,
            height=args.height,
            samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            batch_rows=args.batch_rows,
            quiet=args.quiet,
            show=args.show,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
