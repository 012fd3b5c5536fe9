# pixelbench/core/__init__.py
# Core algorithms package - pure callables with no GUI dependencies
# Safe for headless testing, multiprocessing, and parallelism

from .adjustments import adjustBrightness, adjustContrast
from .batch import (
    OPERATIONS,
    process_batch_parallel,
    process_batch_sequential,
    run_operation,
)
from .binarization import (
    BinarizationMethod,
    adaptiveGradientThreshold,
    bernsenThreshold,
    binarize,
    fixedThreshold,
    kapurThreshold,
    liWuThreshold,
    niblackThreshold,
    otsuChannelThreshold,
    otsuThreshold,
    phansalkarThreshold,
    sauvolaThreshold,
)
from .buffer import PixelBuffer, with_rgb
from .config import DEFAULTS, params_for
from .drawing import (
    drawCircle,
    drawLine,
    drawPixel,
    drawPolyline,
    drawRectangle,
    fillRectangle,
)
from .filters import (
    KernelPreset,
    applyPreset,
    convolve,
    kuwaharaFilter,
    kuwaharaGeneralized,
    medianFilter,
    medianFilterRect,
    minRgb,
    minRgbEdges,
    pixelize,
    pixelizedMinRgb,
    pixelizeRect,
    predatorFilter,
    sobelMagnitude,
    thermalColorGrade,
)
from .histogram import (
    calculateChannelHistogram,
    calculateHistograms,
    cumulativeDistribution,
    equalizeHistogram,
    renderHistogram,
    stretchHistogram,
)
from .history import SnapshotHistory
from .morphology import (
    KernelShape,
    closeImage,
    closeMask,
    dilateImage,
    dilateMask,
    erodeImage,
    erodeMask,
    openImage,
    openMask,
    structuringElement,
)
from .selection import (
    Connectivity,
    SelectionMask,
    SelectionMode,
    floodFill,
    selectContiguous,
    selectGlobal,
    visualizeSelection,
)
from .watershed import (
    UNLABELED,
    WATERSHED,
    WatershedStats,
    markers_from_masks,
    render_watershed,
    watershed,
    watershed_labels,
    watershed_labels_with_markers,
    watershed_stats,
    watershed_with_markers,
)

__all__ = [
    # buffer / config
    "PixelBuffer",
    "with_rgb",
    "DEFAULTS",
    "params_for",
    # histogram
    "calculateHistograms",
    "calculateChannelHistogram",
    "cumulativeDistribution",
    "equalizeHistogram",
    "stretchHistogram",
    "renderHistogram",
    # binarization
    "BinarizationMethod",
    "binarize",
    "otsuThreshold",
    "kapurThreshold",
    "liWuThreshold",
    "otsuChannelThreshold",
    "fixedThreshold",
    "niblackThreshold",
    "sauvolaThreshold",
    "phansalkarThreshold",
    "adaptiveGradientThreshold",
    "bernsenThreshold",
    # filters
    "KernelPreset",
    "applyPreset",
    "convolve",
    "sobelMagnitude",
    "medianFilter",
    "medianFilterRect",
    "kuwaharaFilter",
    "kuwaharaGeneralized",
    "pixelize",
    "pixelizeRect",
    "minRgb",
    "thermalColorGrade",
    "predatorFilter",
    "pixelizedMinRgb",
    "minRgbEdges",
    # selection / morphology
    "Connectivity",
    "SelectionMode",
    "SelectionMask",
    "selectContiguous",
    "selectGlobal",
    "floodFill",
    "visualizeSelection",
    "KernelShape",
    "structuringElement",
    "dilateMask",
    "erodeMask",
    "openMask",
    "closeMask",
    "dilateImage",
    "erodeImage",
    "openImage",
    "closeImage",
    # watershed
    "UNLABELED",
    "WATERSHED",
    "WatershedStats",
    "watershed",
    "watershed_with_markers",
    "watershed_labels",
    "watershed_labels_with_markers",
    "markers_from_masks",
    "render_watershed",
    "watershed_stats",
    # adjustments / drawing / history
    "adjustBrightness",
    "adjustContrast",
    "drawPixel",
    "drawCircle",
    "drawLine",
    "drawPolyline",
    "drawRectangle",
    "fillRectangle",
    "SnapshotHistory",
    # batch parallel
    "OPERATIONS",
    "run_operation",
    "process_batch_parallel",
    "process_batch_sequential",
]
