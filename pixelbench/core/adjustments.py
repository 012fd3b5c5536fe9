# pixelbench/core/adjustments.py
# Brightness and contrast adjustment

from __future__ import annotations

import numpy as np

from .buffer import PixelBuffer, with_rgb
from .config import require_range


def adjustBrightness(buf: PixelBuffer, value: int = 0) -> PixelBuffer:
    """Add `value` (-255..255) to R,G,B with clamping."""
    require_range("adjustBrightness", "value", value, -255, 255)
    vals = buf.rgb().astype(np.int32) + int(value)
    return with_rgb(buf, np.clip(vals, 0, 255).astype(np.uint8))


def adjustContrast(buf: PixelBuffer, factor: float = 1.0) -> PixelBuffer:
    """Scale R,G,B around mid-grey: (v - 128) * factor + 128, clamped and truncated.
    factor is limited to [0.1, 10]; 1.0 leaves the image unchanged."""
    require_range("adjustContrast", "factor", factor, 0.1, 10.0)
    vals = (buf.rgb().astype(np.float64) - 128.0) * factor + 128.0
    return with_rgb(buf, np.clip(vals, 0, 255).astype(np.uint8))
