# pixelbench/core/windows.py
# Windowed statistics over clipped rectangles using summed-area tables

from __future__ import annotations

from typing import Tuple

import numpy as np


def integral(values: np.ndarray) -> np.ndarray:
    """Summed-area table with a leading zero row/column. Trailing axes (channels)
    are kept, so an (H,W,C) input gives an (H+1,W+1,C) table."""
    v = values.astype(np.int64) if values.dtype.kind in "biu" else values.astype(np.float64)
    pad = [(1, 0), (1, 0)] + [(0, 0)] * (v.ndim - 2)
    return np.pad(v, pad, mode="constant").cumsum(0).cumsum(1)


def _bounds(n: int, lo: int, hi: int) -> Tuple[np.ndarray, np.ndarray]:
    idx = np.arange(n)
    start = np.clip(idx + lo, 0, n)
    stop = np.clip(idx + hi + 1, 0, n)
    return start, np.maximum(stop, start)


def rect_sums(
    table: np.ndarray, dx0: int, dx1: int, dy0: int, dy1: int
) -> Tuple[np.ndarray, np.ndarray]:
    """
    For every pixel (x, y) sum the rectangle [x+dx0, x+dx1] x [y+dy0, y+dy1]
    (inclusive), clipped to the image. Returns (sums, counts); counts is (H,W)
    and may be zero where the rectangle falls entirely outside the image.
    """
    H = table.shape[0] - 1
    W = table.shape[1] - 1
    x0, x1 = _bounds(W, dx0, dx1)
    y0, y1 = _bounds(H, dy0, dy1)
    Y0, X0 = np.meshgrid(y0, x0, indexing="ij")
    Y1, X1 = np.meshgrid(y1, x1, indexing="ij")
    S = table[Y1, X1] - table[Y0, X1] - table[Y1, X0] + table[Y0, X0]
    counts = (Y1 - Y0) * (X1 - X0)
    return S, counts


def window_sums(table: np.ndarray, half: int) -> Tuple[np.ndarray, np.ndarray]:
    """Sums over a (2*half+1)^2 window centred on each pixel, clipped at borders."""
    return rect_sums(table, -half, half, -half, half)


def local_mean_std(intensitySum: np.ndarray, windowSize: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Local mean and population standard deviation of ``intensitySum / 3`` where
    ``intensitySum`` is the integer R+G+B plane. Working on integer sums keeps
    the moments exact until the final division.
    """
    half = windowSize // 2
    s = intensitySum.astype(np.int64)
    S, n = window_sums(integral(s), half)
    S2, _ = window_sums(integral(s * s), half)
    n = n.astype(np.float64)
    mean = S / n
    var = S2 / n - mean * mean
    return mean / 3.0, np.sqrt(np.maximum(var, 0.0)) / 3.0
