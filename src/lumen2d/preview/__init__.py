"""Preview module for output and visualization.

Components:
    export: Image sink (8-bit quantization) and Pillow-based file export
    display: Matplotlib-based preview and comparison

The image sink is the single place where radiance is clamped to bytes.
The Matplotlib preview can tone map and gamma correct for viewing without
affecting saved files.

Example:
    >>> from lumen2d.preview import ImageSink, show_preview
    >>>
    >>> renderer.render()
    >>> renderer.to_sink().save("out.png")
    >>> show_preview(renderer, tone_map="reinhard")
"""

from lumen2d.preview.display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_comparison,
    show_preview,
    tone_map_exposure,
    tone_map_reinhard,
)
from lumen2d.preview.export import (
    ImageSink,
    compute_rmse,
    radiance_to_uint8,
    to_byte,
)

__all__ = [
    # Image sink
    "ImageSink",
    "to_byte",
    "radiance_to_uint8",
    "compute_rmse",
    # Display functions
    "show_preview",
    "show_comparison",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
]
