# pixelbench/core/history.py
# Bounded undo/redo history of owned buffer snapshots

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from .buffer import PixelBuffer
from .config import require_positive


class SnapshotHistory:
    """
    Undo/redo over whole-buffer copies.

    ``push(state)`` records the state *before* an edit. ``undo(current)``
    returns the last recorded state and remembers ``current`` for redo.
    Once ``capacity`` undo steps are stored the oldest is dropped. Every
    snapshot is a private copy, so later edits to the caller's buffer never
    reach the history.
    """

    def __init__(self, capacity: int = 20):
        self.capacity = require_positive("SnapshotHistory", "capacity", capacity)
        self._undo: Deque[PixelBuffer] = deque(maxlen=self.capacity)
        self._redo: Deque[PixelBuffer] = deque(maxlen=self.capacity)

    def push(self, state: PixelBuffer) -> None:
        self._undo.append(state.copy())
        self._redo.clear()

    def can_undo(self) -> bool:
        return len(self._undo) > 0

    def can_redo(self) -> bool:
        return len(self._redo) > 0

    def undo(self, current: PixelBuffer) -> Optional[PixelBuffer]:
        """Return the previous state, or None when there is nothing to undo."""
        if not self._undo:
            return None
        self._redo.append(current.copy())
        return self._undo.pop().copy()

    def redo(self, current: PixelBuffer) -> Optional[PixelBuffer]:
        if not self._redo:
            return None
        self._undo.append(current.copy())
        return self._redo.pop().copy()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def __len__(self) -> int:
        """Number of undo steps available."""
        return len(self._undo)
