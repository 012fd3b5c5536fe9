# pixelbench/core/filters.py
# Convolution, order-statistic, edge-preserving and block filters
# Pure callables with no GUI dependencies - safe for headless testing and parallelism

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Sequence, Tuple, Union

import cv2
import numpy as np

from .buffer import PixelBuffer, with_gray, with_rgb
from .config import require_odd, require_positive
from .windows import integral, rect_sums

logger = logging.getLogger(__name__)

Kernel = Union[np.ndarray, Sequence[Sequence[float]]]

# Byte budget for one chunk of gathered median windows
_MEDIAN_BUDGET = 16 * 1024 * 1024


# --------------------- Convolution --------------------------------

class KernelPreset(str, Enum):
    GAUSSIAN_BLUR_3 = "gaussianBlur3x3"
    GAUSSIAN_BLUR_5 = "gaussianBlur5x5"
    PREWITT = "prewitt"
    SOBEL = "sobel"
    LAPLACIAN_4 = "laplacian4"
    LAPLACIAN_8 = "laplacian8"
    SHARPEN = "sharpen"
    EDGE_DETECT = "edgeDetect"
    EMBOSS = "emboss"


# preset -> (matrix, divisor, offset)
PRESETS: Dict[KernelPreset, Tuple[Tuple[Tuple[float, ...], ...], float, float]] = {
    KernelPreset.GAUSSIAN_BLUR_3: (
        ((1, 2, 1),
         (2, 4, 2),
         (1, 2, 1)), 16.0, 0.0),
    KernelPreset.GAUSSIAN_BLUR_5: (
        ((1, 4, 6, 4, 1),
         (4, 16, 24, 16, 4),
         (6, 24, 36, 24, 6),
         (4, 16, 24, 16, 4),
         (1, 4, 6, 4, 1)), 256.0, 0.0),
    KernelPreset.PREWITT: (
        ((-1, 0, 1),
         (-1, 0, 1),
         (-1, 0, 1)), 1.0, 128.0),
    KernelPreset.SOBEL: (
        ((-1, 0, 1),
         (-2, 0, 2),
         (-1, 0, 1)), 1.0, 128.0),
    KernelPreset.LAPLACIAN_4: (
        ((0, -1, 0),
         (-1, 4, -1),
         (0, -1, 0)), 1.0, 128.0),
    KernelPreset.LAPLACIAN_8: (
        ((-1, -1, -1),
         (-1, 8, -1),
         (-1, -1, -1)), 1.0, 128.0),
    KernelPreset.SHARPEN: (
        ((0, -1, 0),
         (-1, 5, -1),
         (0, -1, 0)), 1.0, 0.0),
    KernelPreset.EDGE_DETECT: (
        ((-1, -1, -1),
         (-1, 8, -1),
         (-1, -1, -1)), 1.0, 0.0),
    KernelPreset.EMBOSS: (
        ((-2, -1, 0),
         (-1, 1, 1),
         (0, 1, 2)), 1.0, 128.0),
}


def convolve(buf: PixelBuffer, kernel: Kernel, divisor: float = 1.0, offset: float = 0.0) -> PixelBuffer:
    """
    Correlate each colour channel with `kernel` (centre at size // 2), sampling
    outside the image by clamping coordinates. Each output channel is
        clamp(round(sum) / divisor + offset, 0, 255)
    truncated to a byte. Alpha is passed through.
    """
    k = np.asarray(kernel, dtype=np.float64)
    if k.ndim != 2 or k.size == 0:
        raise ValueError(f"convolve: kernel must be a non-empty 2-D matrix, got shape {k.shape}")
    if divisor == 0:
        raise ValueError("convolve: divisor must be non-zero")
    src = np.ascontiguousarray(buf.rgb(), dtype=np.float64)
    acc = cv2.filter2D(src, -1, k, borderType=cv2.BORDER_REPLICATE)
    vals = np.rint(acc) / float(divisor) + float(offset)
    return with_rgb(buf, np.clip(vals, 0, 255).astype(np.uint8))


def applyPreset(buf: PixelBuffer, preset: Union[KernelPreset, str]) -> PixelBuffer:
    try:
        key = KernelPreset(preset)
    except ValueError:
        raise ValueError(f"Unknown kernel preset: {preset}") from None
    matrix, divisor, offset = PRESETS[key]
    return convolve(buf, matrix, divisor, offset)


def sobelMagnitude(buf: PixelBuffer) -> PixelBuffer:
    """Per-channel Sobel gradient magnitude. The outer 1-pixel frame stays 0."""
    h, w = buf.height, buf.width
    out = np.zeros((h, w, 3), dtype=np.uint8)
    if h >= 3 and w >= 3:
        src = np.ascontiguousarray(buf.rgb(), dtype=np.float64)
        gx = cv2.Sobel(src, cv2.CV_64F, 1, 0, ksize=3)
        gy = cv2.Sobel(src, cv2.CV_64F, 0, 1, ksize=3)
        mag = np.clip(np.sqrt(gx * gx + gy * gy), 0, 255).astype(np.uint8)
        out[1:-1, 1:-1] = mag[1:-1, 1:-1]
    return with_rgb(buf, out)


# --------------------- Median -------------------------------------

def _median(values: np.ndarray) -> np.ndarray:
    """Median along the last axis; even counts average the two middle values."""
    n = values.shape[-1]
    mid = n // 2
    if n % 2 == 1:
        return np.partition(values, mid, axis=-1)[..., mid]
    # odd x odd windows never produce an even count; only direct callers reach this
    part = np.partition(values, (mid - 1, mid), axis=-1).astype(np.int32)
    return ((part[..., mid - 1] + part[..., mid]) // 2).astype(np.uint8)


def _bandRows(width: int, windowArea: int) -> int:
    """Rows per chunk so one gathered band of windows stays within _MEDIAN_BUDGET bytes."""
    return max(1, _MEDIAN_BUDGET // (width * 3 * windowArea))


def _medianWindow(buf: PixelBuffer, windowWidth: int, windowHeight: int) -> PixelBuffer:
    if windowWidth == 1 and windowHeight == 1:
        return buf.copy()
    ox, oy = windowWidth // 2, windowHeight // 2
    padded = cv2.copyMakeBorder(np.ascontiguousarray(buf.rgb()), oy, oy, ox, ox, cv2.BORDER_REPLICATE)
    # (H, W, 3, wh, ww) view of every window
    views = np.lib.stride_tricks.sliding_window_view(padded, (windowHeight, windowWidth), axis=(0, 1))
    out = np.empty((buf.height, buf.width, 3), dtype=np.uint8)
    n = windowWidth * windowHeight
    rows = _bandRows(buf.width, n)
    for y0 in range(0, buf.height, rows):
        band = views[y0:y0 + rows].reshape(-1, buf.width, 3, n)
        out[y0:y0 + rows] = _median(band)
    return with_rgb(buf, out)


def medianFilter(buf: PixelBuffer, windowSize: int = 3) -> PixelBuffer:
    """Per-channel median over a square odd window with clamped borders."""
    windowSize = require_odd("medianFilter", "windowSize", windowSize)
    if windowSize == 1:
        return buf.copy()
    if buf.width < windowSize or buf.height < windowSize:
        return _medianWindow(buf, windowSize, windowSize)
    # medianBlur replicates borders and is exact on odd uint8 windows
    out = cv2.medianBlur(np.ascontiguousarray(buf.rgb()), windowSize)
    return with_rgb(buf, out)


def medianFilterRect(buf: PixelBuffer, windowWidth: int, windowHeight: int) -> PixelBuffer:
    """Per-channel median over an odd windowWidth x windowHeight rectangle."""
    windowWidth = require_odd("medianFilterRect", "windowWidth", windowWidth)
    windowHeight = require_odd("medianFilterRect", "windowHeight", windowHeight)
    return _medianWindow(buf, windowWidth, windowHeight)


# --------------------- Kuwahara -----------------------------------

def _regionStats(tables, dx0: int, dx1: int, dy0: int, dy1: int):
    """Truncated per-channel mean and combined-channel squared deviation sum."""
    table, table2 = tables
    S, n = rect_sums(table, dx0, dx1, dy0, dy1)
    S2, _ = rect_sums(table2, dx0, dx1, dy0, dy1)
    safe = np.maximum(n, 1)[..., None]
    mean = S // safe
    # sum((v - m)^2) = S2 - 2*m*S + n*m^2, summed over channels
    dev = (S2 - 2 * mean * S + safe * mean * mean).sum(axis=-1)
    return mean, dev, n


def _pickRegion(means, variances) -> np.ndarray:
    """Mean colour of the lowest-variance region; the first region wins ties."""
    choice = np.argmin(np.stack(variances), axis=0)
    stacked = np.stack(means)
    picked = np.take_along_axis(stacked, choice[None, :, :, None], axis=0)[0]
    return picked.astype(np.uint8)


def kuwaharaFilter(buf: PixelBuffer, windowSize: int = 5) -> PixelBuffer:
    """
    Edge-preserving smoothing. Each pixel looks at four overlapping
    (r+1) x (r+1) quadrants (r = windowSize // 2) with clamped coordinates and
    takes the mean colour of the quadrant with the least combined RGB variance.
    """
    windowSize = require_odd("kuwaharaFilter", "windowSize", windowSize)
    r = windowSize // 2
    if r == 0:
        return buf.copy()
    h, w = buf.height, buf.width
    padded = cv2.copyMakeBorder(np.ascontiguousarray(buf.rgb()), r, r, r, r, cv2.BORDER_REPLICATE)
    p = padded.astype(np.int64)
    tables = (integral(p), integral(p * p))

    means, variances = [], []
    # top-left, top-right, bottom-left, bottom-right
    for dx0, dx1, dy0, dy1 in ((-r, 0, -r, 0), (0, r, -r, 0), (-r, 0, 0, r), (0, r, 0, r)):
        mean, dev, _ = _regionStats(tables, dx0, dx1, dy0, dy1)
        # equal counts in every quadrant, so the deviation sums compare directly
        means.append(mean[r:r + h, r:r + w])
        variances.append(dev[r:r + h, r:r + w])
    return with_rgb(buf, _pickRegion(means, variances))


def kuwaharaGeneralized(buf: PixelBuffer, regionSize: int = 3) -> PixelBuffer:
    """
    Kuwahara variant with four non-overlapping regionSize x regionSize regions
    around each pixel. Only pixels inside the image count, so regions can be
    empty at the borders; empty regions are never chosen.
    """
    s = require_positive("kuwaharaGeneralized", "regionSize", regionSize)
    p = buf.rgb().astype(np.int64)
    tables = (integral(p), integral(p * p))

    means, variances = [], []
    for dx0, dx1, dy0, dy1 in ((-s, -1, -s, -1), (0, s - 1, -s, -1), (-s, -1, 0, s - 1), (0, s - 1, 0, s - 1)):
        mean, dev, n = _regionStats(tables, dx0, dx1, dy0, dy1)
        var = np.full(n.shape, np.inf)
        filled = n > 0
        var[filled] = dev[filled] / n[filled]
        means.append(mean)
        variances.append(var)
    return with_rgb(buf, _pickRegion(means, variances))


# --------------------- Pixelization -------------------------------

def pixelizeRect(buf: PixelBuffer, blockWidth: int, blockHeight: int) -> PixelBuffer:
    """Replace each blockWidth x blockHeight block by its truncated mean colour.
    Blocks on the right and bottom edges may be smaller."""
    bw = require_positive("pixelizeRect", "blockWidth", blockWidth)
    bh = require_positive("pixelizeRect", "blockHeight", blockHeight)
    h, w = buf.height, buf.width
    ys = np.arange(0, h, bh)
    xs = np.arange(0, w, bw)
    heights = np.diff(np.append(ys, h))
    widths = np.diff(np.append(xs, w))
    rgb = buf.rgb().astype(np.int64)
    sums = np.add.reduceat(np.add.reduceat(rgb, ys, axis=0), xs, axis=1)
    counts = (heights[:, None] * widths[None, :])[..., None]
    avg = (sums // counts).astype(np.uint8)
    out = np.repeat(np.repeat(avg, heights, axis=0), widths, axis=1)
    return with_rgb(buf, out)


def pixelize(buf: PixelBuffer, blockSize: int = 10) -> PixelBuffer:
    blockSize = require_positive("pixelize", "blockSize", blockSize)
    return pixelizeRect(buf, blockSize, blockSize)


# --------------------- Predator pipeline --------------------------

def minRgb(buf: PixelBuffer) -> PixelBuffer:
    """Each pixel becomes the minimum of its R,G,B in all three channels."""
    return with_gray(buf, buf.rgb().min(axis=2))


def _thermalLut() -> np.ndarray:
    i = np.arange(256, dtype=np.int32)
    lut = np.zeros((256, 3), dtype=np.int32)
    # dark blue -> cyan
    band = i < 64
    lut[band, 1] = i[band] * 2
    lut[band, 2] = 64 + i[band] * 2
    # cyan -> green
    band = (i >= 64) & (i < 128)
    lut[band, 1] = 128 + (i[band] - 64) * 2
    lut[band, 2] = 192 - (i[band] - 64) * 3
    # green -> yellow
    band = (i >= 128) & (i < 192)
    lut[band, 0] = (i[band] - 128) * 4
    lut[band, 1] = 255
    # yellow -> red
    band = i >= 192
    lut[band, 0] = 255
    lut[band, 1] = 255 - (i[band] - 192) * 4
    return np.clip(lut, 0, 255).astype(np.uint8)


THERMAL_LUT = _thermalLut()


def thermalColorGrade(buf: PixelBuffer) -> PixelBuffer:
    """Map channel 0 (treated as grayscale) onto a blue-cyan-green-yellow-red ramp."""
    return with_rgb(buf, THERMAL_LUT[buf.pixels[:, :, 0]])


def pixelizedMinRgb(buf: PixelBuffer, pixelSize: int = 10) -> PixelBuffer:
    return minRgb(pixelize(buf, pixelSize))


def minRgbEdges(buf: PixelBuffer) -> PixelBuffer:
    return sobelMagnitude(minRgb(buf))


def predatorFilter(buf: PixelBuffer, pixelSize: int = 10, colorGrade: bool = False) -> PixelBuffer:
    """pixelize -> minRgb -> sobelMagnitude, optionally followed by the thermal ramp."""
    out = sobelMagnitude(pixelizedMinRgb(buf, pixelSize))
    if colorGrade:
        out = thermalColorGrade(out)
    return out
