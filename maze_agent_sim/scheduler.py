"""Single-threaded timer queue driven by a virtual clock.

Callbacks run one at a time in due-time order (ties in scheduling order). Time
only moves when the owner calls ``advance`` or ``run_next``, which keeps agent
runs reproducible and lets tests step through pauses deterministically.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass(order=True)
class ScheduledTask:
    due_ms: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    token: CancellationToken = field(compare=False, default_factory=CancellationToken)
    label: str = field(compare=False, default="")


@dataclass
class Scheduler:
    now_ms: float = 0.0
    _queue: List[ScheduledTask] = field(default_factory=list)
    _seq: int = 0

    def call_later(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        token: Optional[CancellationToken] = None,
        label: str = "",
    ) -> ScheduledTask:
        if delay_ms < 0:
            raise ValueError("delay_ms must be non-negative")
        self._seq += 1
        task = ScheduledTask(
            due_ms=self.now_ms + delay_ms,
            seq=self._seq,
            callback=callback,
            token=token or CancellationToken(),
            label=label,
        )
        heapq.heappush(self._queue, task)
        return task

    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.token.cancelled)

    def next_due(self) -> Optional[float]:
        self._drop_cancelled()
        return self._queue[0].due_ms if self._queue else None

    def run_next(self) -> bool:
        """Jump the clock to the earliest live task and run it."""
        self._drop_cancelled()
        if not self._queue:
            return False
        task = heapq.heappop(self._queue)
        self.now_ms = max(self.now_ms, task.due_ms)
        logger.debug("t=%.1fms running %s", self.now_ms, task.label or task.callback)
        task.callback()
        return True

    def advance(self, delta_ms: float) -> int:
        """Run every task due within ``delta_ms`` and leave the clock at the end of the window."""
        deadline = self.now_ms + delta_ms
        ran = 0
        while True:
            due = self.next_due()
            if due is None or due > deadline:
                break
            self.run_next()
            ran += 1
        self.now_ms = deadline
        return ran

    def clear(self) -> None:
        for task in self._queue:
            task.token.cancel()
        self._queue.clear()

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].token.cancelled:
            heapq.heappop(self._queue)
