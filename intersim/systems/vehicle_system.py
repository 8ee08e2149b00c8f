import logging
import random
from typing import List, Optional, Tuple

from intersim.domain import config
from intersim.domain.config import SimulationConfig
from intersim.domain.errors import ReadOnlyVehicleSourceError
from intersim.domain.models import Direction, SignalColor, SignalState, Vehicle

logger = logging.getLogger(__name__)

DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)

class VehicleRegistry:
    """Owns the in-flight vehicle set: spawning, movement and removal."""

    def __init__(self, settings: Optional[SimulationConfig] = None,
                 rng: Optional[random.Random] = None, read_only: bool = False):
        self.settings = settings or SimulationConfig()
        self.rng = rng or random.Random()
        self.read_only = read_only
        self.emergency_active = False
        self.exited_count = 0
        self._vehicles: List[Vehicle] = []
        self._last_spawn: Optional[int] = None
        self._sequence = 0

    @property
    def vehicles(self) -> Tuple[Vehicle, ...]:
        return tuple(self._vehicles)

    def __len__(self):
        return len(self._vehicles)

    def _check_writable(self, operation: str):
        if self.read_only:
            raise ReadOnlyVehicleSourceError(
                f"cannot {operation}: vehicle set is owned by another kernel"
            )

    def spawn(self, now: int) -> Optional[Vehicle]:
        """Spawn attempt gated by the spawn interval."""
        self._check_writable("spawn")
        if self._last_spawn is not None and now - self._last_spawn < self.settings.spawn_interval_ticks:
            return None
        self._last_spawn = now
        return self.spawn_vehicle(now)

    def spawn_vehicle(self, now: int) -> Optional[Vehicle]:
        self._check_writable("spawn")
        self._prune_off_map()
        if len(self._vehicles) >= self.settings.max_vehicles:
            logger.debug("Spawn skipped at tick %s: %s vehicles at capacity", now, len(self._vehicles))
            return None

        origin = self.rng.choice(DIRECTIONS)
        # Exit is sampled from the three remaining sides
        destination = self.rng.choice([d for d in DIRECTIONS if d != origin])

        is_ambulance = False
        if self.emergency_active and not self._has_ambulance():
            is_ambulance = self.rng.random() < self.settings.ambulance_spawn_chance

        self._sequence += 1
        vehicle = Vehicle(
            id=f"v-{now}-{self._sequence}",
            from_=origin,
            to=destination,
            position=0.0,
            isAmbulance=is_ambulance,
        )
        self._vehicles.append(vehicle)
        if is_ambulance:
            logger.info("Ambulance %s spawned from %s", vehicle.id, origin.value)
        return vehicle

    def add(self, vehicle: Vehicle) -> Vehicle:
        """Places an externally built vehicle, obeying the same capacity rule."""
        self._check_writable("add vehicles")
        self._prune_off_map()
        if len(self._vehicles) >= self.settings.max_vehicles:
            raise OverflowError(f"vehicle set is full ({self.settings.max_vehicles})")
        self._vehicles.append(vehicle)
        return vehicle

    def _has_ambulance(self) -> bool:
        return any(v.isAmbulance for v in self._vehicles)

    def _prune_off_map(self):
        self._vehicles = [v for v in self._vehicles if v.position < config.MAP_END]

    def can_move(self, v: Vehicle, signals: SignalState) -> bool:
        if v.passed or v.isAmbulance:
            return True
        # Past the stop line the vehicle is committed to the crossing
        if v.position >= config.SIGNAL_STOP_LINE:
            return True
        return signals.get(v.from_) in (SignalColor.GREEN, SignalColor.YELLOW)

    def advance(self, signals: SignalState) -> List[Vehicle]:
        """Moves every vehicle one tick under ``signals``; returns the removed ones."""
        self._check_writable("advance")
        for v in self._vehicles:
            if not self.can_move(v, signals):
                v.waitTicks += 1
                continue

            speed = config.AMBULANCE_SPEED if v.isAmbulance else config.VEHICLE_SPEED
            v.position = min(config.MAP_END, v.position + speed)
            if v.position >= config.INTERSECTION_END:
                v.passed = True

        exited = [v for v in self._vehicles if v.position >= config.MAP_END]
        if exited:
            self._vehicles = [v for v in self._vehicles if v.position < config.MAP_END]
            self.exited_count += len(exited)
        return exited
