# pixelbench/tests/test_selection.py
# Unit tests for core/selection.py: magic wand, flood fill, overlay

import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.buffer import PixelBuffer
from core.selection import (
    Connectivity,
    SelectionMask,
    SelectionMode,
    colorDistance,
    floodFill,
    selectContiguous,
    selectGlobal,
    visualizeSelection,
)


def _uniform(h=6, w=8, color=(30, 60, 90)) -> PixelBuffer:
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:] = color
    return PixelBuffer.from_array(arr)


def _diagonal() -> PixelBuffer:
    """3x3 black with a white main diagonal."""
    arr = np.zeros((3, 3, 3), dtype=np.uint8)
    for i in range(3):
        arr[i, i] = 255
    return PixelBuffer.from_array(arr)


class TestSelectionMask(unittest.TestCase):
    """Mask bookkeeping."""

    def test_count_tracks_writes(self):
        mask = SelectionMask(4, 3)
        mask.set(1, 1)
        mask.set(1, 1)
        self.assertEqual(mask.selected_count, 1)
        mask.set_many([(0, 0), (3, 2)])
        self.assertEqual(mask.selected_count, 3)
        mask.set(0, 0, False)
        self.assertEqual(mask.selected_count, 2)
        mask.clear()
        self.assertEqual(mask.selected_count, 0)

    def test_get_out_of_bounds_is_false(self):
        mask = SelectionMask(2, 2)
        self.assertFalse(mask.get(5, 5))
        with self.assertRaises(IndexError):
            mask.set(2, 0)

    def test_array_round_trip_and_copy(self):
        arr = np.array([[True, False], [False, True]])
        mask = SelectionMask.from_array(arr)
        self.assertEqual(mask.selected_count, 2)
        clone = mask.copy()
        clone.set(1, 0)
        self.assertEqual(mask.selected_count, 2)
        self.assertEqual(clone.to_array().tolist(), [[True, True], [False, True]])

    def test_color_distance(self):
        self.assertEqual(colorDistance((10, 20, 30), (13, 20, 24)), 3)


class TestSelect(unittest.TestCase):
    """Contiguous and global region growing."""

    def test_uniform_zero_tolerance_selects_everything(self):
        buf = _uniform()
        n = buf.width * buf.height
        self.assertEqual(selectContiguous(buf, 2, 3, 0, 0).selected_count, n)
        self.assertEqual(selectContiguous(buf, 2, 3, 0, 0, connectivity=Connectivity.EIGHT).selected_count, n)
        self.assertEqual(selectGlobal(buf, 2, 3, 0, 0).selected_count, n)

    def test_out_of_bounds_seed_is_empty(self):
        buf = _uniform()
        self.assertEqual(selectContiguous(buf, -1, 0, 0, 10).selected_count, 0)
        self.assertEqual(selectGlobal(buf, 0, 99, 0, 10).selected_count, 0)

    def test_negative_parameters_raise(self):
        buf = _uniform()
        with self.assertRaises(ValueError):
            selectContiguous(buf, 0, 0, -1, 10)
        with self.assertRaises(ValueError):
            selectGlobal(buf, 0, 0, 0, -5)
        with self.assertRaises(ValueError):
            selectContiguous(buf, 0, 0, 0, 10, maxPixels=-1)

    def test_connectivity(self):
        buf = _diagonal()
        self.assertEqual(selectContiguous(buf, 0, 0, 0, 0, connectivity=4).selected_count, 1)
        self.assertEqual(selectContiguous(buf, 0, 0, 0, 0, connectivity=8).selected_count, 3)

    def test_global_ignores_adjacency(self):
        mask = selectGlobal(_diagonal(), 0, 0, 0, 0)
        self.assertEqual(mask.selected_count, 3)
        self.assertTrue(mask.get(2, 2))

    def test_max_pixels_cap(self):
        buf = _uniform(10, 10)
        self.assertEqual(selectContiguous(buf, 5, 5, 0, 0, maxPixels=5).selected_count, 5)
        mask = selectGlobal(buf, 5, 5, 0, 0, maxPixels=5)
        self.assertEqual(mask.selected_count, 5)
        self.assertTrue(mask.to_array()[0, :5].all())

    def test_tolerance_band(self):
        arr = np.zeros((1, 4, 3), dtype=np.uint8)
        arr[0, :, 0] = [0, 30, 60, 90]  # distances 0, 10, 20, 30
        buf = PixelBuffer.from_array(arr)
        mask = selectGlobal(buf, 0, 0, 10, 20)
        self.assertEqual(mask.to_array()[0].tolist(), [False, True, True, False])

    def test_seed_outside_band_blocks_growth(self):
        mask = selectContiguous(_uniform(), 0, 0, 5, 10)
        self.assertEqual(mask.selected_count, 0)

    def test_growth_stops_at_boundary(self):
        arr = np.zeros((4, 4, 3), dtype=np.uint8)
        arr[:, 2] = 200
        mask = selectContiguous(PixelBuffer.from_array(arr), 0, 0, 0, 10)
        self.assertEqual(mask.selected_count, 8)
        self.assertFalse(mask.get(3, 0))


class TestFloodFill(unittest.TestCase):
    """Paint bucket."""

    def test_fill_on_copy(self):
        arr = np.zeros((4, 4, 4), dtype=np.uint8)
        arr[:, :, 3] = 255
        arr[:, 2] = (200, 200, 200, 255)
        buf = PixelBuffer.from_array(arr)
        out, mask = floodFill(buf, 0, 0, (9, 8, 7), 0, 0)
        self.assertEqual(mask.selected_count, 8)
        self.assertEqual(out.get_pixel(1, 3), (9, 8, 7, 255))
        self.assertEqual(out.get_pixel(3, 3), (0, 0, 0, 255))
        self.assertEqual(buf.get_pixel(0, 0), (0, 0, 0, 255))

    def test_global_mode(self):
        out, mask = floodFill(_diagonal(), 0, 0, (1, 2, 3), 0, 0, mode=SelectionMode.GLOBAL)
        self.assertEqual(mask.selected_count, 3)
        self.assertEqual(out.get_pixel(2, 2), (1, 2, 3))

    def test_rgba_fill_writes_alpha(self):
        buf = PixelBuffer(2, 2)
        out, _ = floodFill(buf, 0, 0, (1, 2, 3, 4), 0, 0)
        self.assertEqual(out.get_pixel(1, 1), (1, 2, 3, 4))


class TestVisualizeSelection(unittest.TestCase):
    """Highlight overlay."""

    def test_blend_selected_only(self):
        buf = _uniform(2, 2, (100, 100, 100))
        mask = SelectionMask(2, 2)
        mask.set(0, 0)
        out = visualizeSelection(buf, mask, (255, 0, 0), 0.5)
        self.assertEqual(out.get_pixel(0, 0), (177, 50, 50))
        self.assertEqual(out.get_pixel(1, 1), (100, 100, 100))

    def test_opacity_range(self):
        buf = _uniform(2, 2)
        with self.assertRaises(ValueError):
            visualizeSelection(buf, SelectionMask(2, 2), (255, 0, 0), 1.5)

    def test_size_mismatch(self):
        with self.assertRaises(ValueError):
            visualizeSelection(_uniform(2, 2), SelectionMask(3, 3))


if __name__ == "__main__":
    unittest.main()
