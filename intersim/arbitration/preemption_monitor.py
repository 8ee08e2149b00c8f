import logging
from typing import Iterable, Optional

from intersim.domain import config
from intersim.domain.models import Vehicle

logger = logging.getLogger(__name__)

class PreemptionMonitor:
    def __init__(self):
        self.active = False

    def set_active(self, active: bool):
        if active != self.active:
            logger.info("Emergency mode %s", "activated" if active else "cleared")
        self.active = active

    def detect(self, vehicles: Iterable[Vehicle]) -> Optional[Vehicle]:
        """First ambulance still approaching or inside the box, while emergency mode is on."""
        if not self.active:
            return None
        for v in vehicles:
            if v.isAmbulance and not v.passed and v.position < config.INTERSECTION_END:
                return v
        return None
