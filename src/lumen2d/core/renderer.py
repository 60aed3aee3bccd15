"""Pixel loop, seeded random streams and render settings.

This module drives the stratified sampler over a whole image:
- Row-batched rendering with progress callbacks
- A generator variant that yields after each batch
- Reproducible per-row random streams independent of batching
- Conversion of the radiance image to an 8-bit image sink

Pixel (i, j) samples the scene point (i / width, j / height), with row j
counted from the top of the image. Each pixel consumes exactly ``samples``
uniform draws, one per angular stratum and in angle order. The draws for
row j come from ``numpy.random.default_rng([seed, j])``, so a pixel's value
depends only on the seed and its position, never on how rows are batched
or how the kernel is scheduled.

Example:
    >>> import lumen2d
    >>> lumen2d.init()
    >>> from lumen2d.core.renderer import RenderConfig, Renderer
    >>> from lumen2d.scene.presets import create_preset
    >>>
    >>> scene = create_preset("lens")
    >>> renderer = Renderer(scene, RenderConfig(width=256, height=256, samples=32))
    >>> renderer.render()
    >>> renderer.save("lens.png")
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

from lumen2d.core.integrator import (
    DEFAULT_SAMPLES,
    MAX_DEPTH,
    MAX_DEPTH_LIMIT,
    render_rows,
)
from lumen2d.preview.export import ImageSink
from lumen2d.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Largest supported image side
MAX_IMAGE_SIZE = 8192


@dataclass(frozen=True)
class RenderConfig:
    """Settings for a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Angular samples per pixel.
        max_depth: Maximum reflection/refraction depth.
        seed: Seed for the per-row random streams.
        rows_per_batch: Rows rendered per kernel launch. Only affects
            progress granularity, never the result.

    Raises:
        ValueError: If any setting is out of range.
    """

    width: int = 512
    height: int = 512
    samples: int = DEFAULT_SAMPLES
    max_depth: int = MAX_DEPTH
    seed: int = 0
    rows_per_batch: int = 16

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if not 1 <= value <= MAX_IMAGE_SIZE:
                raise ValueError(f"{name} = {value} must be in [1, {MAX_IMAGE_SIZE}]")
        if self.samples < 1:
            raise ValueError(f"samples = {self.samples} must be at least 1")
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(
                f"max_depth = {self.max_depth} must be in [0, {MAX_DEPTH_LIMIT}]"
            )
        if self.seed < 0:
            raise ValueError(f"seed = {self.seed} must be non-negative")
        if self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch = {self.rows_per_batch} must be at least 1")


def pixel_jitter(seed: int, row: int, width: int, samples: int) -> npt.NDArray[np.float64]:
    """Draw the stratum jitter for one image row.

    Args:
        seed: Render seed.
        row: Image row index.
        width: Image width in pixels.
        samples: Samples per pixel.

    Returns:
        Array of shape (width, samples) with values in [0, 1). Entry [i, s]
        is the draw for stratum s of pixel i.
    """
    rng = np.random.default_rng([seed, row])
    return rng.random((width, samples))


class Renderer:
    """Renders a sealed scene into a radiance image.

    Attributes:
        scene: The scene being rendered. Sealed on construction.
        config: The render settings.
    """

    def __init__(self, scene: SceneManager, config: RenderConfig | None = None) -> None:
        """Initialize the renderer and seal the scene.

        Args:
            scene: The scene to render.
            config: Render settings; defaults to RenderConfig().
        """
        self.scene = scene
        self.config = config if config is not None else RenderConfig()
        self.scene.seal()
        self._image = np.zeros((self.config.height, self.config.width, 3), dtype=np.float64)
        self._rows_done = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height

    @property
    def rows_done(self) -> int:
        """Number of rows rendered so far."""
        return self._rows_done

    @property
    def image(self) -> npt.NDArray[np.float64]:
        """The radiance image, float64 of shape (height, width, 3).

        Rows not yet rendered are black.
        """
        return self._image

    def reset(self) -> None:
        """Discard rendered rows so the next render starts over."""
        self._image.fill(0.0)
        self._rows_done = 0

    def _render_batch(self, row_start: int, row_stop: int) -> None:
        cfg = self.config
        jitter = np.stack(
            [
                pixel_jitter(cfg.seed, row, cfg.width, cfg.samples)
                for row in range(row_start, row_stop)
            ]
        )
        band = np.zeros((row_stop - row_start, cfg.width, 3), dtype=np.float64)
        render_rows(band, jitter, row_start, cfg.height, cfg.max_depth)
        self._image[row_start:row_stop] = band

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding progress after each batch.

        Yields:
            Tuple of (rows_done, height).
        """
        cfg = self.config
        if self._rows_done == 0:
            logger.info(
                "Rendering %dx%d with %d samples/pixel, max depth %d, seed %d",
                cfg.width,
                cfg.height,
                cfg.samples,
                cfg.max_depth,
                cfg.seed,
            )
        start = time.perf_counter()
        while self._rows_done < cfg.height:
            row_stop = min(self._rows_done + cfg.rows_per_batch, cfg.height)
            self._render_batch(self._rows_done, row_stop)
            self._rows_done = row_stop
            yield (self._rows_done, cfg.height)
        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.float64]:
        """Render the whole image.

        Args:
            callback: Optional function called after each batch with
                (rows_done, height).

        Returns:
            The radiance image.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(callback=progress)
        """
        for rows_done, total in self.render_progressive():
            if callback is not None:
                callback(rows_done, total)
        return self._image

    def to_sink(self) -> ImageSink:
        """Quantize the radiance image into an 8-bit image sink."""
        return ImageSink.from_radiance(self._image)

    def save(self, filepath: str | Path) -> Path:
        """Save the rendered image.

        Args:
            filepath: Destination path; the format follows the extension.

        Returns:
            The path written.
        """
        return self.to_sink().save(filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.config.samples}, rows_done={self.rows_done})"
        )
