# pathrunner/game/scheduler.py
from __future__ import annotations
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, List


@dataclass(order=True)
class _Timer:
    deadline: float
    seq: int
    handle: int = field(compare=False)
    callback: Callable[[], None] = field(compare=False)


class EventQueue:
    """
    Deferred callbacks keyed by the simulation's own tick clock.

    The clock only moves when `advance(dt)` is called, so nothing fires while
    the game is paused and tests never wait on wall-clock time. Callbacks
    due in the same poll run in deadline order (ties in scheduling order).
    """
    def __init__(self):
        self.now = 0.0
        self._heap: List[_Timer] = []
        self._live: Dict[int, _Timer] = {}
        self._seq = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> int:
        seq = next(self._seq)
        t = _Timer(self.now + max(0.0, delay), seq, seq, callback)
        heapq.heappush(self._heap, t)
        self._live[t.handle] = t
        return t.handle

    def cancel(self, handle: int) -> bool:
        return self._live.pop(handle, None) is not None

    def advance(self, dt: float) -> int:
        """Move the clock forward and run everything now due. Returns how many fired."""
        self.now += dt
        fired = 0
        while self._heap and self._heap[0].deadline <= self.now:
            t = heapq.heappop(self._heap)
            if self._live.pop(t.handle, None) is None:
                continue  # cancelled
            t.callback()
            fired += 1
        return fired

    def clear(self):
        self._heap.clear()
        self._live.clear()

    def __len__(self) -> int:
        return len(self._live)
