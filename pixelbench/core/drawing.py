# pixelbench/core/drawing.py
# Pencil tools: pixels, round brushes, Bresenham lines and rectangles
# Each call draws on a copy and returns it; points outside the image are skipped

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .buffer import PixelBuffer, color_tuple
from .config import require_positive

Point = Tuple[int, int]


# ---------- in-place primitives on an (H,W,C) array ----------

def _plot(px: np.ndarray, x: int, y: int, color: np.ndarray) -> None:
    h, w = px.shape[:2]
    if 0 <= x < w and 0 <= y < h:
        px[y, x] = color


def _disc(px: np.ndarray, cx: int, cy: int, radius: int, color: np.ndarray) -> None:
    h, w = px.shape[:2]
    y0 = max(0, cy - radius); y1 = min(h - 1, cy + radius)
    x0 = max(0, cx - radius); x1 = min(w - 1, cx + radius)
    if y0 > y1 or x0 > x1:
        return
    yy, xx = np.ogrid[y0:y1 + 1, x0:x1 + 1]
    inside = (xx - cx) ** 2 + (yy - cy) ** 2 <= radius * radius
    px[y0:y1 + 1, x0:x1 + 1][inside] = color


def _stamp(px: np.ndarray, x: int, y: int, size: int, color: np.ndarray) -> None:
    if size <= 1:
        _plot(px, x, y, color)
    else:
        _disc(px, x, y, size // 2, color)


def _line(px: np.ndarray, x0: int, y0: int, x1: int, y1: int, size: int, color: np.ndarray) -> None:
    dx = abs(x1 - x0); dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    while True:
        _stamp(px, x0, y0, size, color)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy


def _canvas(buf: PixelBuffer, color: Sequence[int]):
    out = buf.copy()
    return out, out.pixels, color_tuple(color, buf.channels)


# ---------- public tools ----------

def drawPixel(buf: PixelBuffer, x: int, y: int, color: Sequence[int]) -> PixelBuffer:
    out, px, c = _canvas(buf, color)
    _plot(px, x, y, c)
    return out


def drawCircle(buf: PixelBuffer, cx: int, cy: int, radius: int, color: Sequence[int]) -> PixelBuffer:
    """Filled disc of pixels with dx^2 + dy^2 <= radius^2."""
    if radius < 0:
        raise ValueError(f"drawCircle: radius must be non-negative, got {radius}")
    out, px, c = _canvas(buf, color)
    _disc(px, cx, cy, radius, c)
    return out


def drawLine(buf: PixelBuffer, x0: int, y0: int, x1: int, y1: int,
             color: Sequence[int], size: int = 1) -> PixelBuffer:
    """Bresenham line; sizes above 1 stamp a disc of radius size // 2 at every step."""
    size = require_positive("drawLine", "size", size)
    out, px, c = _canvas(buf, color)
    _line(px, x0, y0, x1, y1, size, c)
    return out


def drawPolyline(buf: PixelBuffer, points: List[Point], color: Sequence[int], size: int = 1) -> PixelBuffer:
    size = require_positive("drawPolyline", "size", size)
    out, px, c = _canvas(buf, color)
    if len(points) == 1:
        _stamp(px, points[0][0], points[0][1], size, c)
    for (xa, ya), (xb, yb) in zip(points, points[1:]):
        _line(px, xa, ya, xb, yb, size, c)
    return out


def drawRectangle(buf: PixelBuffer, x1: int, y1: int, x2: int, y2: int,
                  color: Sequence[int], size: int = 1) -> PixelBuffer:
    """Outline through the four corners: top, right, bottom, left."""
    size = require_positive("drawRectangle", "size", size)
    out, px, c = _canvas(buf, color)
    _line(px, x1, y1, x2, y1, size, c)
    _line(px, x2, y1, x2, y2, size, c)
    _line(px, x2, y2, x1, y2, size, c)
    _line(px, x1, y2, x1, y1, size, c)
    return out


def fillRectangle(buf: PixelBuffer, x1: int, y1: int, x2: int, y2: int, color: Sequence[int]) -> PixelBuffer:
    """Fill the inclusive rectangle spanned by two corners, clipped to the image."""
    out, px, c = _canvas(buf, color)
    minX = max(0, min(x1, x2)); maxX = min(buf.width - 1, max(x1, x2))
    minY = max(0, min(y1, y2)); maxY = min(buf.height - 1, max(y1, y2))
    if minX <= maxX and minY <= maxY:
        px[minY:maxY + 1, minX:maxX + 1] = c
    return out
