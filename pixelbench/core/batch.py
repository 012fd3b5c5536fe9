# pixelbench/core/batch.py
# Parallel batch processing utilities using ProcessPoolExecutor
# All functions are top-level and picklable for multiprocessing

from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import adjustments, binarization, filters, histogram, morphology, watershed
from .buffer import PixelBuffer

logger = logging.getLogger(__name__)

# Type aliases for clarity
OpParams = Dict[str, Any]  # keyword arguments forwarded to the operation
ProgressCallback = Callable[[int, int], None]  # (completed, total) -> None


def _binarize(buf: PixelBuffer, **params: Any) -> PixelBuffer:
    return binarization.binarize(buf, **params)[0]


# Operation name -> callable(buf, **params) -> PixelBuffer
OPERATIONS: Dict[str, Callable[..., PixelBuffer]] = {
    "equalize": histogram.equalizeHistogram,
    "stretch": histogram.stretchHistogram,
    "binarize": _binarize,
    "convolve": filters.convolve,
    "preset": filters.applyPreset,
    "sobel": filters.sobelMagnitude,
    "median": filters.medianFilter,
    "kuwahara": filters.kuwaharaFilter,
    "kuwaharaGeneralized": filters.kuwaharaGeneralized,
    "pixelize": filters.pixelize,
    "minRgb": filters.minRgb,
    "thermal": filters.thermalColorGrade,
    "predator": filters.predatorFilter,
    "dilate": morphology.dilateImage,
    "erode": morphology.erodeImage,
    "open": morphology.openImage,
    "close": morphology.closeImage,
    "watershed": watershed.watershed,
    "brightness": adjustments.adjustBrightness,
    "contrast": adjustments.adjustContrast,
}


def _resolve(op: str) -> Callable[..., PixelBuffer]:
    try:
        return OPERATIONS[op]
    except KeyError:
        raise ValueError(f"Unknown operation: {op}") from None


# ---------- Worker functions (must be top-level for pickle) ----------

def run_operation(buf: PixelBuffer, op: str, params: Optional[OpParams] = None) -> PixelBuffer:
    """Apply one named operation to a single buffer."""
    return _resolve(op)(buf, **(params or {}))


def _process_single_buffer(args: Tuple[int, PixelBuffer, str, OpParams]) -> Tuple[int, PixelBuffer]:
    """
    Unpacks args tuple for ProcessPoolExecutor.
    Returns (index, result). Designed to be called in a worker process.
    """
    index, buf, op, params = args
    return index, run_operation(buf, op, params)


# ---------- Public API ----------

def process_batch_parallel(
    buffers: List[PixelBuffer],
    op: str,
    params: Optional[OpParams] = None,
    max_workers: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> List[Optional[PixelBuffer]]:
    """
    Apply operation `op` to every buffer using ProcessPoolExecutor.

    Parameters:
    -----------
    buffers : List[PixelBuffer]
        Inputs; none of them is modified.
    op : str
        Key of OPERATIONS, e.g. "median" or "binarize".
    params : Dict, optional
        Keyword arguments for the operation (see config.DEFAULTS).
    max_workers : int, optional
        Max parallel workers. Defaults to min(cpu_count, len(buffers)).
    progress_callback : Callable[[int, int], None], optional
        Called with (completed_count, total_count) after each buffer finishes.

    Returns:
    --------
    results : List[Optional[PixelBuffer]]
        One output per input, in input order. A buffer whose operation raised
        is logged and left as None.
    """
    _resolve(op)
    params = dict(params or {})
    n = len(buffers)
    if n == 0:
        return []

    # Determine worker count
    if max_workers is None:
        max_workers = min(os.cpu_count() or 4, n)
    max_workers = max(1, min(max_workers, n))

    args_list = [(i, buffers[i], op, params) for i in range(n)]

    # Results placeholders (maintain order)
    results: List[Optional[PixelBuffer]] = [None] * n
    completed = 0

    # For small batches or single buffer, skip multiprocessing overhead
    if n <= 2 or max_workers <= 1:
        for args in args_list:
            try:
                idx, out = _process_single_buffer(args)
                results[idx] = out
            except Exception as e:
                logger.warning("Error processing buffer %d with %s: %s", args[0], op, e)
            completed += 1
            if progress_callback:
                progress_callback(completed, n)
    else:
        logger.debug("process_batch_parallel: %d buffers, %d workers, op=%s", n, max_workers, op)
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(_process_single_buffer, args): args[0]
                for args in args_list
            }

            for future in as_completed(futures):
                try:
                    idx, out = future.result()
                    results[idx] = out
                except Exception as e:
                    # Log but continue with other buffers
                    logger.warning("Error processing buffer %d with %s: %s", futures[future], op, e)

                completed += 1
                if progress_callback:
                    progress_callback(completed, n)

    return results


def process_batch_sequential(
    buffers: List[PixelBuffer],
    op: str,
    params: Optional[OpParams] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> List[Optional[PixelBuffer]]:
    """
    Process buffers one after another (no multiprocessing).
    Same interface as process_batch_parallel for easy swapping.
    """
    return process_batch_parallel(
        buffers=buffers,
        op=op,
        params=params,
        max_workers=1,
        progress_callback=progress_callback
    )
