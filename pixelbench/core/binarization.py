# pixelbench/core/binarization.py
# Global (histogram) and local (windowed) binarization algorithms
# Pure callables with no GUI dependencies - safe for headless testing and parallelism

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import cv2
import numpy as np

from .buffer import PixelBuffer, with_gray
from .config import FALLBACK_THRESHOLD, require_odd, require_range
from .histogram import calculateChannelHistogram, calculateHistograms
from .windows import local_mean_std

logger = logging.getLogger(__name__)

BinaryResult = Tuple[PixelBuffer, int]  # (0/255 buffer, selected threshold)


# --------------------- Internal helpers ---------------------------

def _binaryOutput(buf: PixelBuffer, fg: np.ndarray) -> PixelBuffer:
    """0/255 in R,G,B with opaque alpha."""
    return with_gray(buf, fg.astype(np.uint8) * 255, opaque=True)


def _probabilities(hist: np.ndarray) -> np.ndarray:
    total = float(hist.sum())
    return hist.astype(np.float64) / total if total > 0 else np.zeros(256)


def _sobelMagnitude(plane: np.ndarray) -> np.ndarray:
    """Sobel magnitude of a float plane; the 1-pixel frame is 0."""
    h, w = plane.shape
    mag = np.zeros((h, w), dtype=np.float64)
    if h < 3 or w < 3:
        return mag
    gx = cv2.Sobel(plane, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(plane, cv2.CV_64F, 0, 1, ksize=3)
    inner = np.sqrt(gx * gx + gy * gy)
    mag[1:-1, 1:-1] = inner[1:-1, 1:-1]
    return mag


# --------------------- Global thresholds --------------------------
#
# A candidate t splits the 256 bins into background [0, t-1] and
# foreground [t, 255]; pixels with average >= t become white.

def otsuThresholdValue(hist: np.ndarray) -> int:
    """Between-class variance maximiser; ties keep the earliest t."""
    hist = np.asarray(hist, dtype=np.int64)
    total = int(hist.sum())
    sumAll = float(np.dot(np.arange(256), hist))
    sumB = 0.0
    wB = 0
    best = 0.0
    threshold = None
    for t in range(1, 256):
        wB += int(hist[t - 1])
        sumB += (t - 1) * float(hist[t - 1])
        if wB == 0:
            continue
        wF = total - wB
        if wF == 0:
            break
        mB = sumB / wB
        mF = (sumAll - sumB) / wF
        score = float(wB) * float(wF) * (mB - mF) * (mB - mF)
        if score > best:
            best = score
            threshold = t
    return FALLBACK_THRESHOLD if threshold is None else threshold


def kapurThresholdValue(hist: np.ndarray) -> int:
    """Maximum summed entropy of the normalised background/foreground halves."""
    prob = _probabilities(np.asarray(hist))
    best = -math.inf
    threshold = None
    for t in range(1, 256):
        back = prob[:t]; fore = prob[t:]
        wb = float(back.sum()); wf = float(fore.sum())
        if wb <= 0.0 or wf <= 0.0:
            continue
        pb = back[back > 0] / wb
        pf = fore[fore > 0] / wf
        entropy = float(-(pb * np.log(pb)).sum() - (pf * np.log(pf)).sum())
        if entropy > best:
            best = entropy
            threshold = t
    return FALLBACK_THRESHOLD if threshold is None else threshold


def liWuThresholdValue(hist: np.ndarray) -> int:
    """Minimum cross-entropy criterion, candidates t in [1, 254]."""
    prob = _probabilities(np.asarray(hist))
    levels = np.arange(256, dtype=np.float64)
    best = math.inf
    threshold = None
    for t in range(1, 255):
        pb = prob[:t]; pf = prob[t:]
        wb = float(pb.sum()); wf = float(pf.sum())
        if wb <= 0.0 or wf <= 0.0:
            continue
        mb = float(np.dot(levels[:t], pb)) / wb
        mf = float(np.dot(levels[t:], pf)) / wf
        cross = float(np.dot(pb, (levels[:t] - mb) ** 2) + np.dot(pf, (levels[t:] - mf) ** 2))
        cross += wb * math.log(wb) + wf * math.log(wf)
        if cross < best:
            best = cross
            threshold = t
    return FALLBACK_THRESHOLD if threshold is None else threshold


def _globalThreshold(buf: PixelBuffer, pick: Callable[[np.ndarray], int], name: str) -> BinaryResult:
    hist = calculateHistograms(buf)[3]
    t = pick(hist)
    logger.debug("%s: threshold=%d", name, t)
    return _binaryOutput(buf, buf.intensity() >= t), t


def otsuThreshold(buf: PixelBuffer) -> BinaryResult:
    """Otsu binarization on the average histogram. Returns (binary, threshold)."""
    return _globalThreshold(buf, otsuThresholdValue, "otsuThreshold")


def kapurThreshold(buf: PixelBuffer) -> BinaryResult:
    """Kapur maximum-entropy binarization. Returns (binary, threshold)."""
    return _globalThreshold(buf, kapurThresholdValue, "kapurThreshold")


def liWuThreshold(buf: PixelBuffer) -> BinaryResult:
    """Li-Wu minimum cross-entropy binarization. Returns (binary, threshold)."""
    return _globalThreshold(buf, liWuThresholdValue, "liWuThreshold")


def otsuChannelThreshold(buf: PixelBuffer, channel: int) -> BinaryResult:
    """Otsu on a single channel's histogram."""
    hist = calculateChannelHistogram(buf, channel)
    t = otsuThresholdValue(hist)
    logger.debug("otsuChannelThreshold: channel=%d threshold=%d", channel, t)
    return _binaryOutput(buf, buf.pixels[:, :, channel] >= t), t


def fixedThreshold(buf: PixelBuffer, threshold: int = 128, channel: Optional[int] = None) -> PixelBuffer:
    """Binarize against a fixed value: the float RGB mean (or one channel) > threshold is white."""
    require_range("fixedThreshold", "threshold", threshold, 0, 255)
    if channel is None:
        values = buf.mean_rgb()
    else:
        require_range("fixedThreshold", "channel", channel, 0, buf.channels - 1)
        values = buf.pixels[:, :, channel]
    return _binaryOutput(buf, values > threshold)


# --------------------- Local thresholds ---------------------------

def _localStats(buf: PixelBuffer, windowSize: int, func: str):
    windowSize = require_odd(func, "windowSize", windowSize)
    rgbSum = buf.rgb().astype(np.int64).sum(axis=2)
    mean, std = local_mean_std(rgbSum, windowSize)
    return rgbSum / 3.0, mean, std


def niblackThreshold(buf: PixelBuffer, windowSize: int = 3, k: float = 0.8) -> PixelBuffer:
    """Niblack: threshold = mean + k * std."""
    values, mean, std = _localStats(buf, windowSize, "niblackThreshold")
    return _binaryOutput(buf, values > mean + k * std)


def sauvolaThreshold(buf: PixelBuffer, windowSize: int = 15, k: float = 0.5, r: float = 128.0) -> PixelBuffer:
    """Sauvola: threshold = mean * (1 + k * (std / R - 1))."""
    if r <= 0:
        raise ValueError(f"sauvolaThreshold: r must be positive, got {r}")
    values, mean, std = _localStats(buf, windowSize, "sauvolaThreshold")
    return _binaryOutput(buf, values > mean * (1.0 + k * (std / r - 1.0)))


def phansalkarThreshold(
    buf: PixelBuffer,
    windowSize: int = 15,
    k: float = 0.25,
    r: float = 0.5,
    p: float = 2.0,
    q: float = 10.0,
) -> PixelBuffer:
    """
    Phansalkar (low-contrast Sauvola variant):
        threshold = mean * (1 + p * exp(-q * mean) + k * (std / r - 1))
    """
    if r <= 0:
        raise ValueError(f"phansalkarThreshold: r must be positive, got {r}")
    values, mean, std = _localStats(buf, windowSize, "phansalkarThreshold")
    thresh = mean * (1.0 + p * np.exp(-q * mean) + k * (std / r - 1.0))
    return _binaryOutput(buf, values > thresh)


def adaptiveGradientThreshold(
    buf: PixelBuffer,
    windowSize: int = 15,
    gradientWeight: float = 0.3,
    k: float = 0.2,
) -> PixelBuffer:
    """
    Sauvola-style threshold lowered on edges:
        threshold = mean * (1 - gw * grad / 255) * (1 + k * (std / 128 - 1))
    where grad is the Sobel magnitude of the mean-intensity image.
    """
    values, mean, std = _localStats(buf, windowSize, "adaptiveGradientThreshold")
    grad = _sobelMagnitude(values)
    thresh = mean * (1.0 - gradientWeight * (grad / 255.0)) * (1.0 + k * (std / 128.0 - 1.0))
    return _binaryOutput(buf, values > thresh)


def bernsenThreshold(buf: PixelBuffer, windowSize: int = 31, contrastThreshold: int = 15) -> PixelBuffer:
    """
    Bernsen local-contrast binarization. Low-contrast windows (max - min below
    contrastThreshold) compare against 128; others against (min + max) // 2.
    """
    windowSize = require_odd("bernsenThreshold", "windowSize", windowSize)
    gray = buf.intensity().astype(np.uint8)
    # replicated borders leave min/max of a clipped window unchanged
    kernel = np.ones((windowSize, windowSize), np.uint8)
    lo = cv2.erode(gray, kernel, borderType=cv2.BORDER_REPLICATE).astype(np.int32)
    hi = cv2.dilate(gray, kernel, borderType=cv2.BORDER_REPLICATE).astype(np.int32)
    g = gray.astype(np.int32)
    local = g >= (lo + hi) // 2
    flat = g >= FALLBACK_THRESHOLD
    return _binaryOutput(buf, np.where(hi - lo < contrastThreshold, flat, local))


# --------------------- Dispatch -----------------------------------

class BinarizationMethod(str, Enum):
    OTSU = "otsu"
    KAPUR = "kapur"
    LI_WU = "liWu"
    FIXED = "fixed"
    NIBLACK = "niblack"
    SAUVOLA = "sauvola"
    PHANSALKAR = "phansalkar"
    ADAPTIVE_GRADIENT = "adaptiveGradient"
    BERNSEN = "bernsen"


_GLOBAL: Dict[BinarizationMethod, Callable[..., BinaryResult]] = {
    BinarizationMethod.OTSU: otsuThreshold,
    BinarizationMethod.KAPUR: kapurThreshold,
    BinarizationMethod.LI_WU: liWuThreshold,
}

_PLAIN: Dict[BinarizationMethod, Callable[..., PixelBuffer]] = {
    BinarizationMethod.FIXED: fixedThreshold,
    BinarizationMethod.NIBLACK: niblackThreshold,
    BinarizationMethod.SAUVOLA: sauvolaThreshold,
    BinarizationMethod.PHANSALKAR: phansalkarThreshold,
    BinarizationMethod.ADAPTIVE_GRADIENT: adaptiveGradientThreshold,
    BinarizationMethod.BERNSEN: bernsenThreshold,
}


def binarize(buf: PixelBuffer, method: Any = BinarizationMethod.OTSU, **params: Any) -> Tuple[PixelBuffer, Optional[int]]:
    """
    Run one binarization variant by tag. Returns (binary, threshold) where the
    threshold is None for local methods.
    """
    try:
        tag = BinarizationMethod(method)
    except ValueError:
        raise ValueError(f"Unknown binarization method: {method}") from None
    if tag in _GLOBAL:
        if params:
            raise ValueError(f"binarize: {tag.value} takes no parameters, got {sorted(params)}")
        return _GLOBAL[tag](buf)
    return _PLAIN[tag](buf, **params), None
