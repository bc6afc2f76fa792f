"""
Worker pools used during a single allocation run.

IdlePool is a FIFO of worker ids; BusySet keeps busy workers ordered by
(release_time, worker_id).
"""

import heapq
from collections import deque
from typing import Iterator, List, Optional, Tuple


class IdlePool:
    """FIFO of idle worker ids. Released workers join at the back."""

    def __init__(self, worker_count: int = 0):
        self._queue = deque(range(1, worker_count + 1))

    def append(self, worker_id: int) -> None:
        self._queue.append(worker_id)

    def pop_front(self) -> Optional[int]:
        """Remove and return the front worker id, None when empty."""
        if not self._queue:
            return None
        return self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)

    def __iter__(self) -> Iterator[int]:
        return iter(self._queue)

    def __repr__(self) -> str:
        return f"IdlePool({list(self._queue)})"


class BusySet:
    """Min-heap of busy workers keyed on (release_time, worker_id)."""

    def __init__(self):
        self._heap: List[Tuple[int, int]] = []

    def push(self, worker_id: int, release_time: int) -> None:
        heapq.heappush(self._heap, (release_time, worker_id))

    def peek(self) -> Optional[Tuple[int, int]]:
        return self._heap[0] if self._heap else None

    def pop(self) -> Tuple[int, int]:
        return heapq.heappop(self._heap)

    def release_until(self, now: int) -> Iterator[Tuple[int, int]]:
        """
        Pop every worker whose release time is at or before ``now``.

        Yields (release_time, worker_id) pairs earliest release first,
        lower worker id first on equal release times.
        """
        while self._heap and self._heap[0][0] <= now:
            yield heapq.heappop(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, worker_id: int) -> bool:
        return any(w == worker_id for _, w in self._heap)

    def __repr__(self) -> str:
        return f"BusySet({sorted(self._heap)})"
