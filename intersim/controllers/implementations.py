from typing import Optional
from intersim.controllers.base import Controller
from intersim.domain.config import SimulationConfig
from intersim.domain.models import Axis, Density

class FixedController(Controller):
    """Traditional timing: every green phase lasts the same, whatever the queue."""

    name = "fixed"

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()

    def green_duration(self, axis: Axis, density: Optional[Density]) -> int:
        return self.config.fixed_green_time

class AdaptiveController(Controller):
    """Density-proportional green time.

    The axis gets ``density_green_factor`` seconds per queued vehicle on its
    two approaches, clamped to ``[min_green_time, max_green_time]``. Without
    density data it falls back to the short floor so the cycle keeps moving.
    """

    name = "adaptive"

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()

    def green_duration(self, axis: Axis, density: Optional[Density]) -> int:
        if not density:
            return self.config.min_green_time

        axis_load = sum(density.get(d, 0) for d in axis.directions)
        duration = axis_load * self.config.density_green_factor
        return max(self.config.min_green_time, min(self.config.max_green_time, duration))

def controller_for(adaptive: bool, config: Optional[SimulationConfig] = None) -> Controller:
    return AdaptiveController(config) if adaptive else FixedController(config)
