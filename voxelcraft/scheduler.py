"""
Idle-time task scheduling

The host frame loop hands the scheduler whatever time is left in a frame;
queued tasks run in submission order within that budget. A task that has
waited past its deadline is run on the next tick even without idle time.
Tasks are never cancelled.
"""
import logging
import time
from collections import deque
from typing import Callable, Deque, Tuple

from voxelcraft.constants import GENERATION_TIMEOUT_MS

logger = logging.getLogger(__name__)

Task = Callable[[], None]


class IdleScheduler:
    """Queue of tasks that run when the host is idle, but no later than their deadline"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize an empty queue

        Args:
            clock: Time source in seconds
        """
        self.clock = clock
        self.tasks: Deque[Tuple[float, Task]] = deque()

    @property
    def pending(self) -> int:
        return len(self.tasks)

    def submit(self, task: Task, timeout_ms: float = GENERATION_TIMEOUT_MS) -> None:
        """Queue a task to run when idle, or once timeout_ms has passed"""
        self.tasks.append((self.clock() + timeout_ms / 1000.0, task))

    def run_idle(self, budget_ms: float) -> int:
        """
        Run queued tasks while idle time remains

        At least one task runs if any is queued and the budget is positive.

        Returns:
            Number of tasks run
        """
        if budget_ms <= 0:
            return 0

        start = self.clock()
        ran = 0
        while self.tasks:
            if ran and (self.clock() - start) * 1000 >= budget_ms:
                break
            _, task = self.tasks.popleft()
            task()
            ran += 1
        return ran

    def run_overdue(self) -> int:
        """Run every task whose deadline has passed"""
        now = self.clock()
        overdue = [entry for entry in self.tasks if entry[0] <= now]
        if not overdue:
            return 0

        self.tasks = deque(entry for entry in self.tasks if entry[0] > now)
        logger.debug("Forcing %d overdue tasks", len(overdue))
        for _, task in overdue:
            task()
        return len(overdue)

    def tick(self, idle_ms: float) -> int:
        """Per-frame entry point: overdue tasks first, then idle work"""
        return self.run_overdue() + self.run_idle(idle_ms)

    def run_all(self) -> int:
        ran = 0
        while self.tasks:
            _, task = self.tasks.popleft()
            task()
            ran += 1
        return ran
