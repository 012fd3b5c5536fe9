# pixelbench/core/watershed.py
# Watershed segmentation (unmarked immersion and marker-controlled flooding)
# Label maps are (H,W) int32: 0 = unlabeled, -1 = watershed line, >= 1 = region id

from __future__ import annotations

import heapq
import logging
from collections import deque
from typing import Dict, List, NamedTuple, Sequence

import cv2
import numpy as np

from .buffer import PixelBuffer, with_rgb
from .selection import SelectionMask

logger = logging.getLogger(__name__)

UNLABELED = 0
WATERSHED = -1

# N, E, S, W, then the diagonals
NEIGHBOURS_8 = ((0, -1), (1, 0), (0, 1), (-1, 0), (1, -1), (1, 1), (-1, 1), (-1, -1))

GOLDEN_ANGLE = 137.508


class WatershedStats(NamedTuple):
    regions: int
    line_pixels: int
    unlabeled_pixels: int


# --------------------- Inputs -------------------------------------

def grayscale(buf: PixelBuffer) -> np.ndarray:
    """Truncated unweighted RGB mean, int32 (H,W)."""
    return buf.intensity()


def gradientMagnitude(gray: np.ndarray) -> np.ndarray:
    """Sobel magnitude truncated to int and clamped to 255; the 1-pixel frame is 0."""
    h, w = gray.shape
    grad = np.zeros((h, w), dtype=np.int32)
    if h < 3 or w < 3:
        return grad
    g = gray.astype(np.float64)
    gx = cv2.Sobel(g, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(g, cv2.CV_64F, 0, 1, ksize=3)
    mag = np.clip(np.sqrt(gx * gx + gy * gy), 0, 255).astype(np.int32)
    grad[1:-1, 1:-1] = mag[1:-1, 1:-1]
    return grad


def _neighbourRegions(labels: List[int], idx: int, w: int, h: int) -> set:
    x = idx % w; y = idx // w
    found = set()
    for dx, dy in NEIGHBOURS_8:
        nx = x + dx; ny = y + dy
        if 0 <= nx < w and 0 <= ny < h:
            lab = labels[ny * w + nx]
            if lab > 0:
                found.add(lab)
    return found


# --------------------- Unmarked -----------------------------------

def watershed_labels(buf: PixelBuffer) -> np.ndarray:
    """
    Immersion over the Sobel gradient. Pixels are visited in ascending
    gradient order (row-major within a level). A pixel touching one region
    joins it, touching two or more becomes a line, and touching none seeds a
    new region that floods 8-connected unlabeled pixels of exactly the same
    gradient value.
    """
    w, h = buf.width, buf.height
    grad = gradientMagnitude(grayscale(buf)).ravel()
    order = np.argsort(grad, kind="stable").tolist()
    g = grad.tolist()
    labels = [UNLABELED] * (w * h)
    nextLabel = 0

    for idx in order:
        if labels[idx] != UNLABELED:
            continue
        found = _neighbourRegions(labels, idx, w, h)
        if len(found) == 1:
            labels[idx] = found.pop()
        elif len(found) > 1:
            labels[idx] = WATERSHED
        else:
            nextLabel += 1
            labels[idx] = nextLabel
            level = g[idx]
            queue = deque([idx])
            while queue:
                cur = queue.popleft()
                cx = cur % w; cy = cur // w
                for dx, dy in NEIGHBOURS_8:
                    nx = cx + dx; ny = cy + dy
                    if 0 <= nx < w and 0 <= ny < h:
                        n = ny * w + nx
                        if labels[n] == UNLABELED and g[n] == level:
                            labels[n] = nextLabel
                            queue.append(n)

    logger.debug("watershed_labels: %d regions", nextLabel)
    return np.array(labels, dtype=np.int32).reshape(h, w)


# --------------------- Marker-controlled --------------------------

class _Frontier:
    """Per-gradient FIFO queues served lowest level first."""

    def __init__(self):
        self._queues: Dict[int, deque] = {}
        self._levels: List[int] = []

    def push(self, level: int, idx: int) -> None:
        q = self._queues.get(level)
        if q is None:
            q = self._queues[level] = deque()
            heapq.heappush(self._levels, level)
        q.append(idx)

    def pop(self) -> int:
        level = self._levels[0]
        q = self._queues[level]
        idx = q.popleft()
        if not q:
            heapq.heappop(self._levels)
            del self._queues[level]
        return idx

    def __bool__(self) -> bool:
        return bool(self._levels)


def watershed_labels_with_markers(buf: PixelBuffer, markers: np.ndarray) -> np.ndarray:
    """
    Flood from caller-supplied seeds (markers > 0). The unlabeled neighbours of
    the seeds are queued at the seed's gradient; pixels labeled later queue
    their neighbours at the neighbour's own gradient. Pixels the flood never
    reaches stay UNLABELED.
    """
    w, h = buf.width, buf.height
    markers = np.asarray(markers)
    if markers.shape != (h, w):
        raise ValueError(f"watershed_labels_with_markers: markers shape {markers.shape} != {(h, w)}")
    g = gradientMagnitude(grayscale(buf)).ravel().tolist()
    labels = np.where(markers > 0, markers, UNLABELED).astype(np.int32).ravel().tolist()
    queued = [lab != UNLABELED for lab in labels]
    frontier = _Frontier()

    def enqueueAround(idx: int, level=None) -> None:
        x = idx % w; y = idx // w
        for dx, dy in NEIGHBOURS_8:
            nx = x + dx; ny = y + dy
            if 0 <= nx < w and 0 <= ny < h:
                n = ny * w + nx
                if not queued[n]:
                    queued[n] = True
                    frontier.push(g[n] if level is None else level, n)

    for idx, lab in enumerate(labels):
        if lab > 0:
            enqueueAround(idx, g[idx])

    while frontier:
        idx = frontier.pop()
        found = _neighbourRegions(labels, idx, w, h)
        if len(found) == 1:
            labels[idx] = found.pop()
            enqueueAround(idx)
        elif len(found) > 1:
            labels[idx] = WATERSHED

    out = np.array(labels, dtype=np.int32).reshape(h, w)
    logger.debug("watershed_labels_with_markers: %d unreached pixels", int((out == UNLABELED).sum()))
    return out


def markers_from_masks(masks: Sequence[SelectionMask]) -> np.ndarray:
    """Label map where mask i seeds region i + 1; later masks win overlaps."""
    if not masks:
        raise ValueError("markers_from_masks: at least one mask is required")
    w, h = masks[0].width, masks[0].height
    out = np.zeros((h, w), dtype=np.int32)
    for i, mask in enumerate(masks):
        if (mask.width, mask.height) != (w, h):
            raise ValueError(f"markers_from_masks: mask {i} is {mask.width}x{mask.height}, expected {w}x{h}")
        out[mask.to_array()] = i + 1
    return out


# --------------------- Rendering ----------------------------------

def region_colors(count: int) -> np.ndarray:
    """(count, 3) uint8 RGB; hue steps by the golden angle at saturation 0.7, lightness 0.5."""
    if count <= 0:
        return np.zeros((0, 3), dtype=np.uint8)
    # label L (row L - 1) takes hue L * GOLDEN_ANGLE
    hue = (np.arange(1, count + 1) * GOLDEN_ANGLE) % 360.0
    # OpenCV float HLS order is (H in degrees, L, S)
    hls = np.stack([hue, np.full(count, 0.5), np.full(count, 0.7)], axis=1).astype(np.float32)
    rgb = cv2.cvtColor(hls[None, :, :], cv2.COLOR_HLS2RGB)[0]
    return np.clip(rgb * 255.0, 0, 255).astype(np.uint8)


def render_watershed(buf: PixelBuffer, labels: np.ndarray) -> PixelBuffer:
    """Regions: 50/50 blend of source and region colour. Lines: white. Unlabeled: source."""
    labels = np.asarray(labels)
    if labels.shape != (buf.height, buf.width):
        raise ValueError(f"render_watershed: labels shape {labels.shape} != {(buf.height, buf.width)}")
    rgb = buf.rgb().astype(np.int32)
    out = rgb.copy()
    regions = labels > 0
    if regions.any():
        palette = region_colors(int(labels.max())).astype(np.int32)
        out[regions] = (rgb[regions] + palette[labels[regions] - 1]) // 2
    out[labels == WATERSHED] = 255
    return with_rgb(buf, out.astype(np.uint8))


def watershed(buf: PixelBuffer) -> PixelBuffer:
    return render_watershed(buf, watershed_labels(buf))


def watershed_with_markers(buf: PixelBuffer, markers: np.ndarray) -> PixelBuffer:
    return render_watershed(buf, watershed_labels_with_markers(buf, markers))


def watershed_stats(labels: np.ndarray) -> WatershedStats:
    labels = np.asarray(labels)
    return WatershedStats(
        regions=int(np.unique(labels[labels > 0]).size),
        line_pixels=int((labels == WATERSHED).sum()),
        unlabeled_pixels=int((labels == UNLABELED).sum()),
    )
