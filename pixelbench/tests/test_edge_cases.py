# pixelbench/tests/test_edge_cases.py
# Edge-case and boundary condition tests for all core modules

import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.binarization import BinarizationMethod, binarize
from core.buffer import PixelBuffer
from core.filters import (
    KernelPreset,
    applyPreset,
    kuwaharaFilter,
    kuwaharaGeneralized,
    medianFilter,
    pixelize,
    predatorFilter,
    sobelMagnitude,
)
from core.histogram import equalizeHistogram, stretchHistogram
from core.morphology import closeImage, dilateMask, erodeMask, openImage
from core.selection import SelectionMask, floodFill, selectContiguous, selectGlobal
from core.watershed import watershed_labels, watershed_stats

# ========================= TINY IMAGES =========================

class TestSinglePixel(unittest.TestCase):
    """Every algorithm accepts a 1x1 buffer."""

    def setUp(self):
        self.buf = PixelBuffer.from_array(np.array([[[10, 20, 30, 40]]], dtype=np.uint8))

    def test_binarization(self):
        for method in BinarizationMethod:
            out, _ = binarize(self.buf, method)
            self.assertEqual((out.width, out.height), (1, 1), method)
            self.assertIn(out.get_channel(0, 0, 0), (0, 255))

    def test_filters(self):
        for preset in KernelPreset:
            self.assertEqual(applyPreset(self.buf, preset).channels, 4)
        self.assertEqual(medianFilter(self.buf, 5).get_pixel(0, 0), (10, 20, 30, 40))
        self.assertEqual(kuwaharaFilter(self.buf, 5).get_pixel(0, 0), (10, 20, 30, 40))
        self.assertEqual(kuwaharaGeneralized(self.buf).get_pixel(0, 0), (10, 20, 30, 40))
        self.assertEqual(pixelize(self.buf, 3).get_pixel(0, 0), (10, 20, 30, 40))
        self.assertEqual(sobelMagnitude(self.buf).get_pixel(0, 0), (0, 0, 0, 40))
        self.assertEqual(predatorFilter(self.buf, 2, True).get_pixel(0, 0), (0, 0, 64, 40))

    def test_histogram(self):
        self.assertEqual(equalizeHistogram(self.buf).get_pixel(0, 0), (10, 20, 30, 40))
        # global min/max spans the three channels of the single pixel
        self.assertEqual(stretchHistogram(self.buf).get_pixel(0, 0), (0, 127, 255, 40))

    def test_selection_and_morphology(self):
        mask = selectContiguous(self.buf, 0, 0, 0, 0)
        self.assertEqual(mask.selected_count, 1)
        self.assertEqual(selectGlobal(self.buf, 0, 0, 0, 0).selected_count, 1)
        self.assertEqual(dilateMask(mask).selected_count, 1)
        # outside counts as unselected, so a lone pixel erodes away
        self.assertEqual(erodeMask(mask).selected_count, 0)
        self.assertEqual(openImage(self.buf).get_pixel(0, 0), (10, 20, 30, 40))
        self.assertEqual(closeImage(self.buf).get_pixel(0, 0), (10, 20, 30, 40))

    def test_watershed(self):
        labels = watershed_labels(self.buf)
        self.assertEqual(labels.tolist(), [[1]])


class TestThinImages(unittest.TestCase):
    """Single row and single column buffers."""

    def test_row_median_and_binarize(self):
        arr = np.zeros((1, 9, 3), dtype=np.uint8)
        arr[0, ::2] = 255
        buf = PixelBuffer.from_array(arr)
        self.assertEqual(medianFilter(buf, 3).pixels.shape, (1, 9, 3))
        out, t = binarize(buf, "otsu")
        np.testing.assert_array_equal(out.pixels, arr)

    def test_column_watershed_flat(self):
        buf = PixelBuffer.from_array(np.full((7, 1, 3), 5, dtype=np.uint8))
        stats = watershed_stats(watershed_labels(buf))
        self.assertEqual((stats.regions, stats.line_pixels), (1, 0))


# ========================= DEGENERATE STATISTICS =========================

class TestNoNaNLeaks(unittest.TestCase):
    """Constant images must not produce NaN/Inf or garbage output."""

    def test_every_method_on_black(self):
        buf = PixelBuffer.from_array(np.zeros((8, 8, 3), dtype=np.uint8))
        for method in BinarizationMethod:
            out, _ = binarize(buf, method)
            self.assertTrue(np.all(out.pixels == 0), method)

    def test_histogram_methods_on_white(self):
        buf = PixelBuffer.from_array(np.full((8, 8, 3), 255, dtype=np.uint8))
        for method in (BinarizationMethod.OTSU, BinarizationMethod.KAPUR,
                       BinarizationMethod.LI_WU, BinarizationMethod.BERNSEN,
                       BinarizationMethod.FIXED):
            out, _ = binarize(buf, method)
            self.assertTrue(np.all(out.pixels == 255), method)


# ========================= SELECTION BOUNDARIES =========================

class TestSelectionBoundaries(unittest.TestCase):

    def test_flood_fill_out_of_bounds_is_noop(self):
        buf = PixelBuffer(3, 3)
        out, mask = floodFill(buf, 5, 5, (255, 0, 0), 0, 10)
        self.assertEqual(mask.selected_count, 0)
        np.testing.assert_array_equal(out.pixels, buf.pixels)

    def test_mask_from_non_2d_raises(self):
        with self.assertRaises(ValueError):
            SelectionMask.from_array(np.zeros((2, 2, 2)))

    def test_mask_zero_size_raises(self):
        with self.assertRaises(ValueError):
            SelectionMask(0, 3)


if __name__ == "__main__":
    unittest.main()
