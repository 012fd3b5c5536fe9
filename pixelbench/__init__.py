# pixelbench/__init__.py
# pixelbench package root
"""
pixelbench - Image Processing Workbench Core

Subpackages:
    core - Pure algorithms (histograms, binarization, filters, selection,
           morphology, watershed, drawing, batch)

Quick start:
    from pixelbench import PixelBuffer, otsuThreshold, medianFilter

    buf = PixelBuffer.from_array(rgb_array)
    binary, t = otsuThreshold(buf)
"""

# Re-export commonly used items from core for convenience
from .core import (
    DEFAULTS,
    BinarizationMethod,
    KernelPreset,
    PixelBuffer,
    SelectionMask,
    SnapshotHistory,
    applyPreset,
    binarize,
    calculateHistograms,
    equalizeHistogram,
    floodFill,
    kuwaharaFilter,
    medianFilter,
    otsuThreshold,
    predatorFilter,
    process_batch_parallel,
    selectContiguous,
    stretchHistogram,
    watershed,
)

__all__ = [
    "DEFAULTS",
    "PixelBuffer",
    # histogram / binarization
    "calculateHistograms",
    "equalizeHistogram",
    "stretchHistogram",
    "BinarizationMethod",
    "binarize",
    "otsuThreshold",
    # filters
    "KernelPreset",
    "applyPreset",
    "medianFilter",
    "kuwaharaFilter",
    "predatorFilter",
    # selection / segmentation
    "SelectionMask",
    "selectContiguous",
    "floodFill",
    "watershed",
    # history / batch
    "SnapshotHistory",
    "process_batch_parallel",
]
