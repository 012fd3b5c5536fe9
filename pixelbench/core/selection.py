# pixelbench/core/selection.py
# Magic-wand region growing, paint-bucket fill and selection overlay
# Pure callables with no GUI dependencies - safe for headless testing and parallelism

from __future__ import annotations

import logging
from collections import deque
from enum import Enum, IntEnum
from typing import Iterable, Sequence, Tuple

import numpy as np

from .buffer import PixelBuffer, color_tuple, with_rgb
from .config import require_range

logger = logging.getLogger(__name__)

# neighbour offsets, clockwise from north
OFFSETS_4 = ((0, -1), (1, 0), (0, 1), (-1, 0))
OFFSETS_8 = ((0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1))


class Connectivity(IntEnum):
    FOUR = 4
    EIGHT = 8


class SelectionMode(str, Enum):
    CONTIGUOUS = "contiguous"
    GLOBAL = "global"


class SelectionMask:
    """
    W x H boolean grid with a running count of selected cells.
    The count is kept in step with every write, so reading it is O(1).
    """

    __slots__ = ("_width", "_height", "_bits", "_count")

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"SelectionMask: size must be at least 1x1, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self._bits = np.zeros((self._height, self._width), dtype=bool)
        self._count = 0

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "SelectionMask":
        arr = np.asarray(arr)
        if arr.ndim != 2:
            raise ValueError(f"SelectionMask.from_array: expected (H,W) array, got shape {arr.shape}")
        mask = cls(arr.shape[1], arr.shape[0])
        mask._bits[:] = arr.astype(bool)
        mask._count = int(mask._bits.sum())
        return mask

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def selected_count(self) -> int:
        return self._count

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get(self, x: int, y: int) -> bool:
        if not self.contains(x, y):
            return False
        return bool(self._bits[y, x])

    def set(self, x: int, y: int, value: bool = True) -> None:
        if not self.contains(x, y):
            raise IndexError(f"SelectionMask.set: ({x}, {y}) outside {self._width}x{self._height}")
        old = bool(self._bits[y, x])
        value = bool(value)
        if old != value:
            self._bits[y, x] = value
            self._count += 1 if value else -1

    def set_many(self, points: Iterable[Tuple[int, int]], value: bool = True) -> None:
        for x, y in points:
            self.set(x, y, value)

    def clear(self) -> None:
        self._bits[:] = False
        self._count = 0

    def copy(self) -> "SelectionMask":
        return SelectionMask.from_array(self._bits)

    def to_array(self) -> np.ndarray:
        """(H,W) bool copy."""
        return self._bits.copy()

    def __repr__(self) -> str:
        return f"SelectionMask({self._width}x{self._height}, selected={self._count})"


# --------------------- Helpers ------------------------------------

def _checkTolerance(func: str, toleranceMin: int, toleranceMax: int, maxPixels: int) -> None:
    if toleranceMin < 0:
        raise ValueError(f"{func}: toleranceMin must be non-negative, got {toleranceMin}")
    if toleranceMax < 0:
        raise ValueError(f"{func}: toleranceMax must be non-negative, got {toleranceMax}")
    if maxPixels < 0:
        raise ValueError(f"{func}: maxPixels must be non-negative (0 = unlimited), got {maxPixels}")


def colorDistance(a: Sequence[int], b: Sequence[int]) -> int:
    """Mean absolute R,G,B difference, truncated."""
    return (abs(int(a[0]) - int(b[0])) + abs(int(a[1]) - int(b[1])) + abs(int(a[2]) - int(b[2]))) // 3


def _inRange(buf: PixelBuffer, x: int, y: int, toleranceMin: int, toleranceMax: int) -> np.ndarray:
    rgb = buf.rgb().astype(np.int32)
    seed = rgb[y, x]
    dist = np.abs(rgb - seed).sum(axis=2) // 3
    return (dist >= toleranceMin) & (dist <= toleranceMax)


# --------------------- Selection ----------------------------------

def selectContiguous(
    buf: PixelBuffer,
    x: int,
    y: int,
    toleranceMin: int = 0,
    toleranceMax: int = 32,
    maxPixels: int = 0,
    connectivity: Connectivity = Connectivity.FOUR,
) -> SelectionMask:
    """
    Breadth-first region growing from (x, y). Pixels whose distance to the
    seed colour lies in [toleranceMin, toleranceMax] are selected, and only
    selected pixels spread to their neighbours. With maxPixels > 0 growth stops
    once that many pixels are selected.
    """
    _checkTolerance("selectContiguous", toleranceMin, toleranceMax, maxPixels)
    offsets = OFFSETS_8 if Connectivity(connectivity) == Connectivity.EIGHT else OFFSETS_4
    w, h = buf.width, buf.height
    mask = SelectionMask(w, h)
    if not buf.contains(x, y):
        return mask

    ok = _inRange(buf, x, y, toleranceMin, toleranceMax).tolist()
    visited = [[False] * w for _ in range(h)]
    visited[y][x] = True
    queue = deque([(x, y)])
    while queue:
        if maxPixels > 0 and mask.selected_count >= maxPixels:
            break
        cx, cy = queue.popleft()
        if not ok[cy][cx]:
            continue
        mask.set(cx, cy)
        for dx, dy in offsets:
            nx = cx + dx; ny = cy + dy
            if 0 <= nx < w and 0 <= ny < h and not visited[ny][nx]:
                visited[ny][nx] = True
                queue.append((nx, ny))

    logger.debug("selectContiguous: seed=(%d, %d) selected=%d", x, y, mask.selected_count)
    return mask


def selectGlobal(
    buf: PixelBuffer,
    x: int,
    y: int,
    toleranceMin: int = 0,
    toleranceMax: int = 32,
    maxPixels: int = 0,
) -> SelectionMask:
    """Select every pixel in the tolerance band, scanning rows top to bottom.
    With maxPixels > 0 only the first maxPixels matches are kept."""
    _checkTolerance("selectGlobal", toleranceMin, toleranceMax, maxPixels)
    mask = SelectionMask(buf.width, buf.height)
    if not buf.contains(x, y):
        return mask
    hits = np.flatnonzero(_inRange(buf, x, y, toleranceMin, toleranceMax))
    if maxPixels > 0:
        hits = hits[:maxPixels]
    flat = np.zeros(buf.length_in_pixels, dtype=bool)
    flat[hits] = True
    mask = SelectionMask.from_array(flat.reshape(buf.height, buf.width))
    logger.debug("selectGlobal: seed=(%d, %d) selected=%d", x, y, mask.selected_count)
    return mask


def select(
    buf: PixelBuffer,
    x: int,
    y: int,
    toleranceMin: int = 0,
    toleranceMax: int = 32,
    maxPixels: int = 0,
    connectivity: Connectivity = Connectivity.FOUR,
    mode: SelectionMode = SelectionMode.CONTIGUOUS,
) -> SelectionMask:
    mode = SelectionMode(mode)
    if mode == SelectionMode.GLOBAL:
        return selectGlobal(buf, x, y, toleranceMin, toleranceMax, maxPixels)
    return selectContiguous(buf, x, y, toleranceMin, toleranceMax, maxPixels, connectivity)


def floodFill(
    buf: PixelBuffer,
    x: int,
    y: int,
    fillColor: Sequence[int],
    toleranceMin: int = 0,
    toleranceMax: int = 32,
    maxPixels: int = 0,
    connectivity: Connectivity = Connectivity.FOUR,
    mode: SelectionMode = SelectionMode.CONTIGUOUS,
) -> Tuple[PixelBuffer, SelectionMask]:
    """Paint-bucket fill on a copy. Returns (filled, mask)."""
    mask = select(buf, x, y, toleranceMin, toleranceMax, maxPixels, connectivity, mode)
    out = buf.copy()
    # an RGB colour leaves alpha alone; RGBA overwrites it
    n = 4 if len(fillColor) >= 4 and buf.has_alpha else 3
    color = color_tuple(fillColor, buf.channels)[:n]
    out.pixels[mask.to_array(), :n] = color
    return out, mask


def visualizeSelection(
    buf: PixelBuffer,
    mask: SelectionMask,
    highlightColor: Sequence[int] = (255, 0, 0),
    opacity: float = 0.5,
) -> PixelBuffer:
    """Blend highlightColor over the selected pixels: src*(1-opacity) + hl*opacity, truncated."""
    require_range("visualizeSelection", "opacity", opacity, 0.0, 1.0)
    if (mask.width, mask.height) != (buf.width, buf.height):
        raise ValueError(
            f"visualizeSelection: mask is {mask.width}x{mask.height}, "
            f"buffer is {buf.width}x{buf.height}"
        )
    hl = color_tuple(highlightColor, 3).astype(np.float64)
    rgb = buf.rgb().copy()
    sel = mask.to_array()
    blended = rgb[sel].astype(np.float64) * (1.0 - opacity) + hl * opacity
    rgb[sel] = np.clip(blended, 0, 255).astype(np.uint8)
    return with_rgb(buf, rgb)
