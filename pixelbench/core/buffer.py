# pixelbench/core/buffer.py
# Pixel buffer data model - flat byte storage addressed by (x, y, channel)
# Pure data type with no GUI dependencies

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

# Type aliases for clarity
ImageArray = np.ndarray  # np.uint8, shape (H,W,C), C in {3, 4}, RGB(A) order
Color = Tuple[int, ...]  # (r, g, b) or (r, g, b, a)

# Channel indices in memory order
R, G, B, A = 0, 1, 2, 3

WHITE: Color = (255, 255, 255, 255)
BLACK: Color = (0, 0, 0, 255)


class PixelBuffer:
    """
    Fixed-channel 8-bit pixel grid.

    Bytes live in one contiguous array of W*H*C entries; pixel (x, y) channel c
    sits at offset ``x*C + y*stride + c`` with ``stride = W*C``. Any write marks
    the buffer dirty; ``mark_clean()`` is called by whatever keeps a display
    copy in sync.
    """

    __slots__ = ("_width", "_height", "_channels", "_data", "_dirty")

    def __init__(self, width: int, height: int, channels: int = 4,
                 data: Optional[np.ndarray] = None):
        width = int(width); height = int(height); channels = int(channels)
        if width < 1:
            raise ValueError(f"PixelBuffer: width must be at least 1, got {width}")
        if height < 1:
            raise ValueError(f"PixelBuffer: height must be at least 1, got {height}")
        if channels not in (3, 4):
            raise ValueError(f"PixelBuffer: channels must be 3 or 4, got {channels}")
        n = width * height * channels
        if data is None:
            raw = np.zeros(n, dtype=np.uint8)
            if channels == 4:
                raw[A::4] = 255  # opaque by default
        else:
            raw = np.ascontiguousarray(data, dtype=np.uint8).reshape(-1)
            if raw.size != n:
                raise ValueError(
                    f"PixelBuffer: data holds {raw.size} bytes, expected {n} "
                    f"({width}x{height}x{channels})"
                )
        self._width = width
        self._height = height
        self._channels = channels
        self._data = raw
        self._dirty = False

    # ---------- construction ----------

    @classmethod
    def from_array(cls, arr: ImageArray) -> "PixelBuffer":
        """Copy an (H,W,3|4) array into a new buffer."""
        arr = np.asarray(arr)
        if arr.ndim != 3:
            raise ValueError(f"PixelBuffer.from_array: expected (H,W,C) array, got shape {arr.shape}")
        h, w, c = arr.shape
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        return cls(w, h, c, arr.copy())

    @classmethod
    def blank_like(cls, other: "PixelBuffer") -> "PixelBuffer":
        return cls(other.width, other.height, other.channels)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._width, self._height, self._channels, self._data.copy())

    # ---------- geometry ----------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def stride(self) -> int:
        """Width in bytes."""
        return self._width * self._channels

    @property
    def length_in_bytes(self) -> int:
        return self._data.size

    @property
    def length_in_pixels(self) -> int:
        return self._width * self._height

    @property
    def has_alpha(self) -> bool:
        return self._channels == 4

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    def offset(self, x: int, y: int, channel: int = 0) -> int:
        return x * self._channels + y * self.stride + channel

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    # ---------- raw views ----------

    @property
    def raw(self) -> np.ndarray:
        """Flat uint8 view. Writing through it bypasses the dirty flag."""
        return self._data

    @property
    def pixels(self) -> ImageArray:
        """(H,W,C) view over the same bytes."""
        return self._data.reshape(self._height, self._width, self._channels)

    def rgb(self) -> np.ndarray:
        """(H,W,3) view of the colour channels."""
        return self.pixels[:, :, :3]

    def alpha(self) -> Optional[np.ndarray]:
        return self.pixels[:, :, A] if self.has_alpha else None

    def intensity(self) -> np.ndarray:
        """Truncated unweighted mean of R,G,B as int32 (H,W)."""
        return self.rgb().astype(np.int32).sum(axis=2) // 3

    def mean_rgb(self) -> np.ndarray:
        """Unweighted mean of R,G,B as float64 (H,W)."""
        return self.rgb().astype(np.float64).sum(axis=2) / 3.0

    # ---------- accessors ----------

    def _check(self, i: int) -> None:
        if i < 0 or i >= self._data.size:
            raise IndexError(
                f"Index was outside the bounds of the buffer. Attempted to access {i} "
                f"but the length is {self.length_in_bytes} "
                f"({self.length_in_pixels} pixels * {self._channels} channels)"
            )

    def get_byte(self, i: int) -> int:
        self._check(i)
        return int(self._data[i])

    def set_byte(self, i: int, value: int) -> None:
        self._check(i)
        self._data[i] = value
        self._dirty = True

    def get_channel(self, x: int, y: int, channel: int) -> int:
        return self.get_byte(self.offset(x, y, channel))

    def set_channel(self, x: int, y: int, channel: int, value: int) -> None:
        self.set_byte(self.offset(x, y, channel), value)

    def get_pixel_at(self, i: int, channel: int) -> int:
        """Channel of the i-th pixel in row-major order."""
        return self.get_channel(i % self._width, i // self._width, channel)

    def set_pixel_at(self, i: int, channel: int, value: int) -> None:
        self.set_channel(i % self._width, i // self._width, channel, value)

    def get_pixel(self, x: int, y: int) -> Tuple[int, ...]:
        i = self.offset(x, y)
        self._check(i + self._channels - 1)
        return tuple(int(v) for v in self._data[i:i + self._channels])

    def set_pixel(self, x: int, y: int, values: Sequence[int]) -> None:
        """Write a pixel. One value is spread over R,G,B; otherwise the leading
        min(len(values), channels) channels are written."""
        i = self.offset(x, y)
        self._check(i + self._channels - 1)
        if len(values) == 0:
            return
        if len(values) == 1:
            self._data[i:i + 3] = values[0]
        else:
            n = min(len(values), self._channels)
            self._data[i:i + n] = values[:n]
        self._dirty = True

    def __repr__(self) -> str:
        return f"PixelBuffer({self._width}x{self._height}x{self._channels}, dirty={self._dirty})"


# ---------- helpers for algorithm outputs ----------

def with_rgb(src: PixelBuffer, rgb: np.ndarray) -> PixelBuffer:
    """New buffer with src's geometry, the given colour planes and src's alpha."""
    out = np.empty((src.height, src.width, src.channels), dtype=np.uint8)
    out[:, :, :3] = rgb
    if src.has_alpha:
        out[:, :, A] = src.pixels[:, :, A]
    return PixelBuffer(src.width, src.height, src.channels, out)


def with_gray(src: PixelBuffer, gray: np.ndarray, opaque: bool = False) -> PixelBuffer:
    """New buffer with the same (H,W) value in R,G,B. With opaque=True alpha is 255."""
    out = with_rgb(src, np.repeat(gray[:, :, None], 3, axis=2))
    if opaque and out.has_alpha:
        out.pixels[:, :, A] = 255
    return out


def color_tuple(color: Sequence[int], channels: int) -> np.ndarray:
    """Normalize a colour to `channels` entries; missing alpha is opaque."""
    c = [int(v) for v in color]
    if len(c) == 1:
        c = c * 3
    if len(c) < 3:
        raise ValueError(f"color must have 1, 3 or 4 components, got {len(c)}")
    if channels == 4:
        c = c[:4] if len(c) >= 4 else c[:3] + [255]
    else:
        c = c[:3]
    return np.clip(np.array(c, dtype=np.int32), 0, 255).astype(np.uint8)
