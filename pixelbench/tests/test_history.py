# pixelbench/tests/test_history.py
# Unit tests for core/history.py: bounded undo/redo snapshots

import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.buffer import PixelBuffer
from core.history import SnapshotHistory


def _state(value) -> PixelBuffer:
    buf = PixelBuffer(2, 2, 3)
    buf.set_pixel(0, 0, [value])
    return buf


def _value(buf: PixelBuffer) -> int:
    return buf.get_channel(0, 0, 0)


class TestSnapshotHistory(unittest.TestCase):

    def test_undo_redo_cycle(self):
        history = SnapshotHistory(5)
        history.push(_state(1))
        current = _state(2)
        previous = history.undo(current)
        self.assertEqual(_value(previous), 1)
        self.assertTrue(history.can_redo())
        again = history.redo(previous)
        self.assertEqual(_value(again), 2)
        self.assertTrue(history.can_undo())

    def test_empty_history(self):
        history = SnapshotHistory()
        self.assertFalse(history.can_undo())
        self.assertIsNone(history.undo(_state(0)))
        self.assertIsNone(history.redo(_state(0)))

    def test_capacity_drops_oldest(self):
        history = SnapshotHistory(3)
        for v in range(5):
            history.push(_state(v))
        self.assertEqual(len(history), 3)
        current = _state(9)
        seen = []
        while history.can_undo():
            current = history.undo(current)
            seen.append(_value(current))
        self.assertEqual(seen, [4, 3, 2])

    def test_push_clears_redo(self):
        history = SnapshotHistory()
        history.push(_state(1))
        history.undo(_state(2))
        history.push(_state(3))
        self.assertFalse(history.can_redo())

    def test_snapshots_are_copies(self):
        history = SnapshotHistory()
        buf = _state(10)
        history.push(buf)
        buf.set_pixel(0, 0, [99])
        self.assertEqual(_value(history.undo(buf)), 10)

    def test_clear(self):
        history = SnapshotHistory()
        history.push(_state(1))
        history.clear()
        self.assertEqual(len(history), 0)
        self.assertFalse(history.can_undo())

    def test_invalid_capacity(self):
        with self.assertRaises(ValueError):
            SnapshotHistory(0)


if __name__ == "__main__":
    unittest.main()
