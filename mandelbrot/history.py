"""Bounded undo stack of previously displayed frames."""

from __future__ import annotations

from collections import deque
from typing import Iterator, Optional

from .renderer import PixelBuffer

DEFAULT_CAPACITY = 100


class UndoHistory:
    """LIFO stack of :class:`PixelBuffer` snapshots that drops its oldest entry when full."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: deque[PixelBuffer] = deque(maxlen=capacity)

    def push(self, buffer: PixelBuffer) -> None:
        self._entries.append(buffer)

    def pop(self) -> Optional[PixelBuffer]:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> Optional[PixelBuffer]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PixelBuffer]:
        return iter(self._entries)
