from typing import Iterable

from intersim.domain import config
from intersim.domain.models import Density, Direction, Vehicle

class DensityEstimator:
    """Counts the vehicles still queued before the intersection, per approach."""

    def compute(self, vehicles: Iterable[Vehicle]) -> Density:
        density: Density = {d: 0 for d in Direction}
        for v in vehicles:
            if not v.passed and v.position < config.INTERSECTION_START:
                density[v.from_] += 1
        return density
