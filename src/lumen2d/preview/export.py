"""Image sink and export utilities for rendered images.

The image sink is the only place radiance is clamped. Each channel of a
radiance value c becomes the byte clamp(round(c * 255), 0, 255), with
halves rounded away from zero. No gamma or tone mapping is applied, so a
saved file holds the linear radiance quantized to 8 bits.

Supported formats:
    - Any format Pillow writes, chosen by file extension (PNG by default)

Example:
    >>> import numpy as np
    >>> from lumen2d.preview.export import ImageSink
    >>> sink = ImageSink(2, 1)
    >>> sink.write_radiance(0, 0, (1.0, 0.5, 2.0))
    >>> sink.pixels[0, 0]
    array([255, 128, 255], dtype=uint8)
    >>> sink.save("tiny.png")
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def to_byte(value: float) -> int:
    """Quantize one radiance channel to a byte.

    Args:
        value: Linear radiance.

    Returns:
        clamp(round(value * 255), 0, 255).

    Raises:
        ValueError: If value is NaN.
    """
    if math.isnan(value):
        raise ValueError("Cannot quantize NaN radiance")
    scaled = value * 255.0
    if scaled >= 255.0:
        return 255
    if scaled <= 0.0:
        return 0
    return int(math.floor(scaled + 0.5))


def radiance_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a radiance image to bytes.

    Non-finite values are treated as 0 (NaN, -inf) or full scale (+inf).

    Args:
        image: Radiance array of shape (H, W, 3).

    Returns:
        Array of shape (H, W, 3) with dtype uint8.
    """
    scaled = np.nan_to_num(
        np.asarray(image, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0
    )
    return np.clip(np.floor(scaled * 255.0 + 0.5), 0.0, 255.0).astype(np.uint8)


class ImageSink:
    """A width x height grid of 8-bit RGB pixels.

    Pixel (x, y) is column x of row y, with row 0 at the top.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Create a black image.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
        self._width = width
        self._height = height
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)

    @classmethod
    def from_radiance(cls, image: npt.NDArray[np.floating]) -> ImageSink:
        """Build a sink from a whole radiance image of shape (H, W, 3)."""
        array = np.asarray(image)
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(f"Expected an image of shape (H, W, 3), got {array.shape}")
        sink = cls(array.shape[1], array.shape[0])
        sink._pixels[...] = radiance_to_uint8(array)
        return sink

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def pixels(self) -> npt.NDArray[np.uint8]:
        """Read-only view of the pixels, shape (height, width, 3)."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def _check_coords(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise ValueError(
                f"Pixel ({x}, {y}) is outside the {self._width}x{self._height} image"
            )

    def write(self, x: int, y: int, rgb: tuple[int, int, int]) -> None:
        """Store one pixel's bytes.

        Raises:
            ValueError: If the coordinates or any channel are out of range.
        """
        self._check_coords(x, y)
        if len(rgb) != 3 or any(not 0 <= int(c) <= 255 for c in rgb):
            raise ValueError(f"Pixel value {rgb} must be three bytes in [0, 255]")
        self._pixels[y, x] = [int(c) for c in rgb]

    def write_radiance(self, x: int, y: int, color: tuple[float, float, float]) -> None:
        """Quantize and store one pixel's radiance."""
        self.write(x, y, tuple(to_byte(float(c)) for c in color))

    def to_pil(self) -> PILImage.Image:
        """Convert to a Pillow RGB image."""
        return PILImage.fromarray(self._pixels)

    def save(self, filepath: str | Path) -> Path:
        """Save the image; the format follows the file extension.

        Args:
            filepath: Output file path (e.g. "out.png").

        Returns:
            The path written.
        """
        path = Path(filepath)
        self.to_pil().save(path)
        logger.info("Saved %dx%d image to %s", self._width, self._height, path)
        return path


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
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
