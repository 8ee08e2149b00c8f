import logging
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)

@dataclass
class PeriodicTimer:
    name: str
    every: int  # ticks
    callback: Callable[[int], None]
    next_due: int = 0

class SimulationClock:
    """Fires independently scheduled periodic timers from one serialized tick.

    Timers run in registration order within a tick. Stopping the clock halts
    every timer at once: a stopped clock neither fires callbacks nor
    advances time.
    """

    def __init__(self, tick_seconds: float = 1.0):
        self.tick_seconds = tick_seconds
        self.tick_id = 0
        self.running = True
        self.timers: List[PeriodicTimer] = []

    @property
    def time(self) -> float:
        return self.tick_id * self.tick_seconds

    def schedule(self, name: str, every: int, callback: Callable[[int], None]):
        if every <= 0:
            raise ValueError(f"timer '{name}' needs a positive interval, got {every}")
        timer = PeriodicTimer(name=name, every=every, callback=callback, next_due=self.tick_id)
        self.timers.append(timer)
        return timer

    def tick(self) -> bool:
        if not self.running:
            return False

        self.tick_id += 1
        now = self.tick_id
        for timer in self.timers:
            if now >= timer.next_due:
                timer.callback(now)
                timer.next_due = now + timer.every
        return True

    def stop(self):
        if self.running:
            logger.info("Clock stopped at tick %s", self.tick_id)
        self.running = False

    def start(self):
        if not self.running:
            logger.info("Clock resumed at tick %s", self.tick_id)
        self.running = True
