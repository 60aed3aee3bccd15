"""Matplotlib-based preview display for rendered images.

Radiance images are unbounded, so the preview can optionally compress them
before display. The saved image is never affected by these settings; it is
always the linear radiance quantized by the image sink.

Features:
    - Static preview window for a finished or partial render
    - Tone mapping (Reinhard, exposure-based)
    - Gamma correction
    - Side-by-side comparison with an amplified difference view

Example:
    >>> from lumen2d.preview.display import show_preview
    >>>
    >>> renderer.render()
    >>> show_preview(renderer, tone_map="reinhard")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt

from lumen2d.preview.export import compute_rmse

if TYPE_CHECKING:
    from lumen2d.core.renderer import Renderer


# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]


def tone_map_reinhard(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Args:
        image: Radiance array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1).
    """
    image = np.maximum(image, 0.0)
    return image / (1.0 + image)


def tone_map_exposure(
    image: npt.NDArray[np.floating],
    exposure: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Radiance array of shape (H, W, 3).
        exposure: Exposure value. Higher values brighten the image.

    Returns:
        Tone mapped image in [0, 1).
    """
    image = np.maximum(image, 0.0)
    return 1.0 - np.exp(-image * exposure)


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = 2.2,
) -> npt.NDArray[np.float64]:
    """Clamp to [0, 1] and raise to 1 / gamma."""
    if gamma == 1.0:
        return np.asarray(image, dtype=np.float64)
    if gamma <= 0.0:
        raise ValueError(f"gamma = {gamma} must be positive")
    return np.power(np.clip(image, 0.0, 1.0), 1.0 / gamma)


def process_image_for_display(
    image: npt.NDArray[np.floating],
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Process a radiance image for display.

    Applies the display pipeline:
    1. Tone mapping (optional)
    2. Gamma correction (optional)
    3. Clamping to [0, 1]

    Args:
        image: Radiance array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 1.0, matching the sink).
        exposure: Exposure value for exposure tone mapping.

    Returns:
        Processed image in [0, 1].

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = np.nan_to_num(np.array(image, dtype=np.float64), nan=0.0, posinf=1.0)

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    return np.clip(result, 0.0, 1.0)


def show_preview(
    renderer: Renderer,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    Args:
        renderer: The Renderer whose image to show.
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value.
        exposure: Exposure value for exposure tone mapping.
        title: Custom title (default shows resolution and samples).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(
        renderer.image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = (
            f"{renderer.width}x{renderer.height} - {renderer.config.samples} samples"
        )
        if renderer.rows_done < renderer.height:
            title += f" ({renderer.rows_done}/{renderer.height} rows)"
        if tone_map != "none":
            title += f" ({tone_map})"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
    *,
    labels: tuple[str, str] = ("A", "B"),
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two images side by side with their amplified difference.

    Args:
        image_a: First radiance image (H, W, 3).
        image_b: Second radiance image (H, W, 3).
        labels: Labels for the two images.
        tone_map: Tone mapping method to apply.
        gamma: Gamma correction value.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two images in display space.
    """
    import matplotlib.pyplot as plt

    display_a = process_image_for_display(image_a, tone_map=tone_map, gamma=gamma)
    display_b = process_image_for_display(image_b, tone_map=tone_map, gamma=gamma)
    rmse = compute_rmse(display_a, display_b)

    diff_amplified = np.clip(np.abs(display_a - display_b) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
