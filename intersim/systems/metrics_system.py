from collections import deque
from typing import Deque, Iterable, List, Optional

from intersim.domain.config import SimulationConfig
from intersim.domain.models import Density, DensitySample, Phase, SimulationMetrics, Vehicle

class MetricsSystem:
    """Throughput, waiting time and a rolling density history for the dashboard."""

    def __init__(self, settings: Optional[SimulationConfig] = None):
        self.settings = settings or SimulationConfig()
        self.throughput = 0
        self.completed_wait_ticks = 0
        self.samples: Deque[DensitySample] = deque(maxlen=self.settings.density_history_size)

    def record_exits(self, exited: Iterable[Vehicle]):
        for v in exited:
            self.throughput += 1
            self.completed_wait_ticks += v.waitTicks

    def sample(self, tick: int, density: Density, vehicle_count: int, phase: Phase):
        self.samples.append(DensitySample(
            tick=tick,
            density=dict(density),
            vehicleCount=vehicle_count,
            phase=phase,
        ))

    def snapshot(self, live: Iterable[Vehicle]) -> SimulationMetrics:
        live_wait = [v.waitTicks for v in live]
        total_wait = self.completed_wait_ticks + sum(live_wait)
        observed = self.throughput + len(live_wait)
        return SimulationMetrics(
            throughput=self.throughput,
            totalWaitTicks=total_wait,
            averageWait=round(total_wait / observed, 2) if observed else 0.0,
            samples=list(self.samples),
        )
