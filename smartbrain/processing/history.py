"""
Bounded history of scored data points

Keeps the most recent points for display, oldest first.
"""

import logging
from collections import deque
from typing import Iterator, Optional, Tuple

from ..core.data_types import DataPoint
from ..core.errors import BufferInvariantViolation
from ..core.config import HISTORY_CAPACITY


class HistoryBuffer:
    """
    Fixed-capacity FIFO of DataPoints

    Appending to a full buffer evicts the oldest point first, so the buffer
    always holds the most recent `capacity` points in chronological order.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._points = deque()

    def append(self, point: DataPoint) -> None:
        self._points.append(point)
        if len(self._points) > self.capacity:
            self._points.popleft()
        self._check_invariant()

    def _check_invariant(self):
        if len(self._points) > self.capacity:
            logging.error(f"History buffer overflow: {len(self._points)} > {self.capacity}")
            raise BufferInvariantViolation(len(self._points), self.capacity)

    def size(self) -> int:
        return len(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[DataPoint]:
        return iter(tuple(self._points))

    def points(self) -> Tuple[DataPoint, ...]:
        """Copy of the buffered points, oldest first"""
        return tuple(self._points)

    def latest(self) -> Optional[DataPoint]:
        return self._points[-1] if self._points else None
