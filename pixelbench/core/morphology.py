# pixelbench/core/morphology.py
# Binary morphology on selection masks and grey morphology on images

from __future__ import annotations

from enum import Enum
from typing import Union

import cv2
import numpy as np

from .buffer import PixelBuffer, with_rgb
from .config import require_odd
from .selection import SelectionMask


class KernelShape(str, Enum):
    SQUARE = "square"
    CROSS = "cross"
    CIRCLE = "circle"


def structuringElement(size: int = 3, shape: Union[KernelShape, str] = KernelShape.SQUARE) -> np.ndarray:
    """
    size x size uint8 kernel centred at size // 2.
      square - every cell
      cross  - centre row and centre column
      circle - dx^2 + dy^2 <= (radius + 0.5)^2
    """
    size = require_odd("structuringElement", "size", size)
    try:
        shape = KernelShape(shape)
    except ValueError:
        raise ValueError(f"Unknown kernel shape: {shape}") from None
    c = size // 2
    if shape == KernelShape.SQUARE:
        return np.ones((size, size), dtype=np.uint8)
    if shape == KernelShape.CROSS:
        k = np.zeros((size, size), dtype=np.uint8)
        k[c, :] = 1
        k[:, c] = 1
        return k
    d = np.arange(size) - c
    dist2 = d[:, None] ** 2 + d[None, :] ** 2
    return (dist2 <= (c + 0.5) ** 2).astype(np.uint8)


# --------------------- Masks --------------------------------------
# Cells outside the image count as unselected: dilation gains nothing from
# them and erosion fails next to them.

def _maskOp(op, mask: SelectionMask, size: int, shape) -> SelectionMask:
    kernel = structuringElement(size, shape)
    src = mask.to_array().astype(np.uint8)
    out = op(src, kernel, borderType=cv2.BORDER_CONSTANT, borderValue=0)
    return SelectionMask.from_array(out > 0)


def dilateMask(mask: SelectionMask, size: int = 3, shape=KernelShape.SQUARE) -> SelectionMask:
    return _maskOp(cv2.dilate, mask, size, shape)


def erodeMask(mask: SelectionMask, size: int = 3, shape=KernelShape.SQUARE) -> SelectionMask:
    return _maskOp(cv2.erode, mask, size, shape)


def openMask(mask: SelectionMask, size: int = 3, shape=KernelShape.SQUARE) -> SelectionMask:
    """Erode then dilate; never adds cells."""
    return dilateMask(erodeMask(mask, size, shape), size, shape)


def closeMask(mask: SelectionMask, size: int = 3, shape=KernelShape.SQUARE) -> SelectionMask:
    """Dilate then erode; fills gaps smaller than the kernel."""
    return erodeMask(dilateMask(mask, size, shape), size, shape)


# --------------------- Images -------------------------------------
# Per-channel max/min over the in-bounds neighbours; OpenCV's default
# morphology border leaves out-of-image cells out of the comparison.

def _imageOp(op, buf: PixelBuffer, size: int, shape) -> PixelBuffer:
    kernel = structuringElement(size, shape)
    out = op(np.ascontiguousarray(buf.rgb()), kernel)
    return with_rgb(buf, out)


def dilateImage(buf: PixelBuffer, size: int = 3, shape=KernelShape.SQUARE) -> PixelBuffer:
    return _imageOp(cv2.dilate, buf, size, shape)


def erodeImage(buf: PixelBuffer, size: int = 3, shape=KernelShape.SQUARE) -> PixelBuffer:
    return _imageOp(cv2.erode, buf, size, shape)


def openImage(buf: PixelBuffer, size: int = 3, shape=KernelShape.SQUARE) -> PixelBuffer:
    return dilateImage(erodeImage(buf, size, shape), size, shape)


def closeImage(buf: PixelBuffer, size: int = 3, shape=KernelShape.SQUARE) -> PixelBuffer:
    return erodeImage(dilateImage(buf, size, shape), size, shape)
