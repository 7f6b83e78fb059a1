"""
scheduler.py: Cooperative repeating callbacks driven by the frame clock.

The physics tick and the render pass are registered independently. A fixed
interval task runs 0..n times per frame from an accumulator; a per-frame
task runs exactly once per frame. Nothing here blocks or uses threads.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .constants import MAX_TICKS_PER_FRAME


@dataclass(eq=False)
class ScheduledTask:
    callback: Callable
    interval: Optional[float] = None    # None means once per frame
    max_catch_up: int = MAX_TICKS_PER_FRAME
    accumulator: float = 0.0
    runs: int = 0
    cancelled: bool = False

    def cancel(self):
        self.cancelled = True

    def _advance(self, dt: float) -> int:
        if self.interval is None:
            self.callback(dt)
            self.runs += 1
            return 1

        self.accumulator += dt
        ran = 0
        while self.accumulator >= self.interval and not self.cancelled:
            self.accumulator -= self.interval
            self.callback()
            ran += 1
            if ran >= self.max_catch_up:
                # Drop the backlog instead of spiralling after a long stall.
                self.accumulator = min(self.accumulator, self.interval)
                break
        self.runs += ran
        return ran


class FrameScheduler:
    def __init__(self):
        self._tasks: List[ScheduledTask] = []

    def every_frame(self, callback: Callable[[float], None]) -> ScheduledTask:
        """Runs callback(dt) once per advance()."""
        task = ScheduledTask(callback=callback)
        self._tasks.append(task)
        return task

    def every(self, interval: float, callback: Callable[[], None],
              max_catch_up: int = MAX_TICKS_PER_FRAME) -> ScheduledTask:
        """Runs callback() once per elapsed interval."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        task = ScheduledTask(callback=callback, interval=interval, max_catch_up=max_catch_up)
        self._tasks.append(task)
        return task

    def advance(self, dt: float) -> int:
        """Feeds one frame's elapsed time to every live task. Returns total callbacks run."""
        ran = 0
        for task in list(self._tasks):
            if not task.cancelled:
                ran += task._advance(dt)
        self._tasks = [t for t in self._tasks if not t.cancelled]
        return ran

    def cancel_all(self):
        for task in self._tasks:
            task.cancel()
        self._tasks = []

    @property
    def active(self) -> int:
        return sum(1 for t in self._tasks if not t.cancelled)
