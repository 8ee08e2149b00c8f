import logging
import random
from typing import Dict, List, Optional, Tuple

from intersim.application.commands import Command
from intersim.arbitration.preemption_monitor import PreemptionMonitor
from intersim.controllers.implementations import controller_for
from intersim.domain import config
from intersim.domain.config import SimulationConfig
from intersim.domain.models import (
    Density, Direction, IntersectionSnapshot, PhaseTimerState, SignalState, Vehicle
)
from intersim.domain.state import SimulationState
from intersim.kernel.clock import SimulationClock
from intersim.kernel.command_queue import CommandQueue
from intersim.kernel.snapshot_builder import SnapshotBuilder
from intersim.kernel.vehicle_feed import VehicleFeed
from intersim.systems.density_system import DensityEstimator
from intersim.systems.metrics_system import MetricsSystem
from intersim.systems.signal_system import SignalPhaseController
from intersim.systems.vehicle_system import VehicleRegistry

logger = logging.getLogger(__name__)

class SimulationKernel:
    """Runs one intersection as an explicit, serialized tick function.

    Each :meth:`run_tick` applies queued commands, then fires the clock's
    timers in order: movement (vehicles advance under the previous tick's
    signals), signals (density, preemption check, phase transition), spawn,
    and density sampling. Renderers read through the ``get_*`` accessors
    after the tick returns.
    """

    def __init__(self, settings: Optional[SimulationConfig] = None, seed: Optional[int] = 42):
        self.settings = settings or SimulationConfig()
        self.state = SimulationState()
        self.command_queue = CommandQueue()
        self.snapshot_builder = SnapshotBuilder()
        self.rng = random.Random()
        self.spawning = True
        self._feed_in: Optional[VehicleFeed] = None
        self._feed_out: Optional[VehicleFeed] = None
        self.initialize(seed)

    def initialize(self, seed: Optional[int] = 42):
        self.rng.seed(seed)
        self.state.tick_id = 0
        self.state.time = 0.0
        self.state.emergency_active = False
        self.command_queue.clear()

        self.clock = SimulationClock(config.TICK_SECONDS)
        self.registry = VehicleRegistry(self.settings, self.rng, read_only=self.state.follower)
        self.density_estimator = DensityEstimator()
        self.preemption = PreemptionMonitor()
        self.signals = SignalPhaseController(controller_for(self.state.ai_enabled, self.settings), self.settings)
        self.metrics = MetricsSystem(self.settings)
        self._external: Tuple[Vehicle, ...] = ()
        self._density: Density = self.density_estimator.compute(())
        self._ambulance: Optional[Vehicle] = None

        self.clock.schedule("movement", 1, self._movement_phase)
        self.clock.schedule("signals", 1, self._signal_phase)
        self.clock.schedule("spawn", self.settings.spawn_interval_ticks, self._spawn_phase)
        self.clock.schedule("density_sample", self.settings.density_sample_interval_ticks, self._sample_phase)
        logger.info("Kernel Initialized (Seed: %s, policy: %s)", seed, self.signals.controller.name)

    # Commands
    def queue_command(self, command: Command):
        self.command_queue.add(command)

    def run_tick(self) -> bool:
        # 1. Process Commands
        commands = self.command_queue.pop_all()
        while commands:
            cmd = commands.popleft()
            cmd.execute(self)

        # 2. Timers
        if not self.clock.tick():
            return False

        # 3. Time Advance
        self.state.tick_id = self.clock.tick_id
        self.state.time = self.clock.time

        self._publish_snapshot()
        return True

    def run(self, ticks: int) -> int:
        return sum(1 for _ in range(ticks) if self.run_tick())

    # Timer Callbacks
    def _movement_phase(self, now: int):
        if self._feed_in is not None:
            self._external = self._feed_in.latest()
            return
        exited = self.registry.advance(self.signals.signal_state())
        self.metrics.record_exits(exited)

    def _signal_phase(self, now: int):
        vehicles = self.current_vehicles()
        self._density = self.density_estimator.compute(vehicles)
        self._ambulance = self.preemption.detect(vehicles)
        self.signals.update(self._density, self._ambulance)

    def _spawn_phase(self, now: int):
        if self._feed_in is not None or not self.spawning:
            return
        self.registry.spawn(now)

    def _sample_phase(self, now: int):
        self.metrics.sample(now, self._density, len(self.current_vehicles()), self.signals.phase)

    def _publish_snapshot(self):
        if self._feed_out is not None:
            self._feed_out.publish(self, self.state.tick_id, self.registry.vehicles)

    # Configuration
    def set_policy(self, adaptive: bool):
        self.state.ai_enabled = adaptive
        self.signals.set_controller(controller_for(adaptive, self.settings))

    def set_emergency_active(self, active: bool):
        self.state.emergency_active = active
        self.registry.emergency_active = active
        self.preemption.set_active(active)

    def set_spawning(self, enabled: bool):
        self.spawning = enabled

    def attach_external_vehicle_source(self, feed: VehicleFeed):
        """Turns this kernel into a read-only follower of another kernel's traffic."""
        if self._feed_out is not None:
            raise RuntimeError("a publishing kernel cannot follow another feed")
        self.state.follower = True
        self._feed_in = feed
        self.registry = VehicleRegistry(self.settings, self.rng, read_only=True)
        self._external = feed.latest()
        logger.info("Following external vehicle source (version %s)", feed.version)

    def publish_to(self, feed: VehicleFeed):
        if self._feed_in is not None:
            raise RuntimeError("a follower kernel cannot publish its vehicles")
        feed.claim(self)
        self._feed_out = feed
        self._publish_snapshot()

    def start(self):
        self.clock.start()

    def stop(self):
        self.clock.stop()

    @property
    def running(self) -> bool:
        return self.clock.running

    # Getters for API
    def current_vehicles(self) -> Tuple[Vehicle, ...]:
        if self._feed_in is not None:
            return self._external
        return self.registry.vehicles

    def get_signal_state(self) -> SignalState:
        return self.signals.signal_state()

    def get_green_remaining(self) -> Dict[Direction, int]:
        return self.signals.green_remaining()

    def get_vehicles(self) -> List[Vehicle]:
        return [v.model_copy() for v in self.current_vehicles()]

    def get_density(self) -> Density:
        return dict(self._density)

    def get_timer_state(self) -> PhaseTimerState:
        return self.signals.timer_state()

    def get_state(self) -> IntersectionSnapshot:
        return self.snapshot_builder.build(self)
