# pixelbench/core/histogram.py
# Histogram calculation, equalization and stretching
# Pure callables with no GUI dependencies - safe for headless testing and parallelism

from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np

from .buffer import WHITE, BLACK, PixelBuffer, color_tuple, with_rgb
from .config import require_positive, require_range

logger = logging.getLogger(__name__)

Histogram = np.ndarray  # int64, shape (256,)


def _bincount(values: np.ndarray) -> Histogram:
    return np.bincount(values.ravel(), minlength=256).astype(np.int64)


def calculateHistograms(buf: PixelBuffer) -> Tuple[Histogram, Histogram, Histogram, Histogram]:
    """Return the (R, G, B, Average) histograms. The average bin of a pixel is
    the truncated unweighted mean of its R,G,B."""
    px = buf.pixels
    return (
        _bincount(px[:, :, 0]),
        _bincount(px[:, :, 1]),
        _bincount(px[:, :, 2]),
        _bincount(buf.intensity()),
    )


def calculateChannelHistogram(buf: PixelBuffer, channel: int) -> Histogram:
    if not 0 <= channel < buf.channels:
        raise ValueError(f"calculateChannelHistogram: channel must be in [0, {buf.channels - 1}], got {channel}")
    return _bincount(buf.pixels[:, :, channel])


def cumulativeDistribution(hist: Histogram) -> np.ndarray:
    """Running sum of a histogram; the last entry equals the total count."""
    return np.cumsum(np.asarray(hist, dtype=np.int64))


def _equalizeLut(hist: Histogram, total: int) -> np.ndarray:
    cdf = cumulativeDistribution(hist)
    nz = cdf[cdf > 0]
    cdfMin = int(nz[0]) if nz.size else 0
    if total == cdfMin:
        # single-valued channel: nothing to spread
        return np.arange(256, dtype=np.uint8)
    # np.rint rounds half to even
    lut = np.rint((cdf - cdfMin) / float(total - cdfMin) * 255.0)
    return np.clip(lut, 0, 255).astype(np.uint8)


def equalizeHistogram(buf: PixelBuffer) -> PixelBuffer:
    """
    Per-channel histogram equalization:
        v -> round((cdf[v] - cdf_min) / (N - cdf_min) * 255)
    Channels are handled independently; alpha is passed through.
    """
    total = buf.length_in_pixels
    rgb = buf.rgb()
    out = np.empty_like(rgb)
    for c in range(3):
        lut = _equalizeLut(_bincount(rgb[:, :, c]), total)
        out[:, :, c] = lut[rgb[:, :, c]]
    return with_rgb(buf, out)


def stretchHistogram(buf: PixelBuffer, minOut: int = 0, maxOut: int = 255) -> PixelBuffer:
    """
    Linear contrast stretch of R,G,B from the global [min, max] to [minOut, maxOut].
    Returns an identical copy when the image holds a single value.
    """
    require_range("stretchHistogram", "minOut", minOut, 0, 255)
    require_range("stretchHistogram", "maxOut", maxOut, 0, 255)
    rgb = buf.rgb()
    lo = int(rgb.min()); hi = int(rgb.max())
    if lo == hi:
        return buf.copy()
    scale = (maxOut - minOut) / float(hi - lo)
    logger.debug("stretchHistogram: [%d, %d] -> [%d, %d]", lo, hi, minOut, maxOut)
    vals = (rgb.astype(np.float64) - lo) * scale + minOut
    return with_rgb(buf, np.clip(vals, 0, 255).astype(np.uint8))


def renderHistogram(
    hist: Histogram,
    height: int = 256,
    foreground: Sequence[int] = WHITE,
    background: Sequence[int] = BLACK,
) -> PixelBuffer:
    """Draw a histogram as vertical bars into a new (len(hist) x height) RGBA buffer.
    The tallest bin spans the full height."""
    height = require_positive("renderHistogram", "height", height)
    values = np.asarray(hist, dtype=np.float64)
    if values.size == 0:
        raise ValueError("renderHistogram: histogram is empty")
    peak = float(values.max())
    bars = np.zeros(values.size, dtype=np.int64) if peak <= 0 else (values / peak * height).astype(np.int64)

    fg = color_tuple(foreground, 4); bg = color_tuple(background, 4)
    out = np.empty((height, values.size, 4), dtype=np.uint8)
    out[:] = bg
    rows = np.arange(height)[:, None]
    filled = rows >= (height - bars[None, :])
    out[filled] = fg
    return PixelBuffer(values.size, height, 4, out)
