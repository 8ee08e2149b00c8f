import logging
from typing import Dict, Optional

from intersim.controllers.base import Controller
from intersim.controllers.implementations import FixedController
from intersim.domain.config import SimulationConfig
from intersim.domain.models import (
    Axis, Density, Direction, Phase, PhaseTimerState, SignalColor, SignalState, Vehicle
)

logger = logging.getLogger(__name__)

class SignalPhaseController:
    """Two-axis signal state machine with emergency preemption.

    Normal cycle: ``EW_GREEN -> EW_YELLOW -> NS_GREEN -> NS_YELLOW -> ...``,
    one :meth:`update` per simulated second. Green length comes from the
    active :class:`Controller` and is fixed when the axis turns green; yellow
    is always ``yellow_time``. While an ambulance is reported, the phase is
    forced to ``PREEMPT_<axis>`` (its axis green, the other red, no yellow)
    and the normal timer is frozen. When the override ends, the preempted
    axis restarts at YELLOW and the cycle continues from there.
    """

    def __init__(self, controller: Optional[Controller] = None,
                 settings: Optional[SimulationConfig] = None):
        self.settings = settings or SimulationConfig()
        self.controller = controller or FixedController(self.settings)
        self.phase = Phase.EW_GREEN
        self.elapsed_in_phase = 0
        self.green_duration = 0
        self.green_times: Dict[Axis, int] = {Axis.NS: 0, Axis.EW: 0}
        self._green_remaining: Dict[Direction, int] = {d: 0 for d in Direction}
        self._start_green(Axis.EW, None)

    # State Access
    def signal_state(self) -> SignalState:
        active = self.phase.axis
        color = SignalColor.YELLOW if self.phase.is_yellow else SignalColor.GREEN
        signals: SignalState = {}
        for d in Direction:
            signals[d] = color if d.axis == active else SignalColor.RED
        return signals

    def green_remaining(self) -> Dict[Direction, int]:
        return dict(self._green_remaining)

    def timer_state(self) -> PhaseTimerState:
        return PhaseTimerState(
            phase=self.phase,
            activeAxis=self.phase.axis,
            elapsedInPhase=self.elapsed_in_phase,
            greenDuration=self.green_duration,
            greenRemaining=self.green_remaining(),
        )

    @property
    def preempted(self) -> bool:
        return self.phase.is_preempt

    def set_controller(self, controller: Controller):
        # The running green keeps its duration; the new policy applies at the next green
        if controller.name != self.controller.name:
            logger.info("Signal policy switched: %s -> %s", self.controller.name, controller.name)
        self.controller = controller

    # Tick
    def update(self, density: Optional[Density], ambulance: Optional[Vehicle] = None):
        if ambulance is not None:
            self._apply_preemption(ambulance)
            return

        if self.phase.is_preempt:
            self._resume_after_preemption()
            return

        self.elapsed_in_phase += 1

        if self.phase.is_green:
            axis = self.phase.axis
            self._set_green_remaining(axis, max(0, self.green_duration - self.elapsed_in_phase))
            if self.elapsed_in_phase >= self.green_duration:
                self._switch_signal_phase(density)
        elif self.elapsed_in_phase >= self.settings.yellow_time:
            self._switch_signal_phase(density)

    def _switch_signal_phase(self, density: Optional[Density]):
        # Cycle: GREEN -> YELLOW -> other axis GREEN
        axis = self.phase.axis
        if self.phase.is_green:
            self._enter(Phase.yellow_for(axis))
            self._set_green_remaining(axis, 0)
        else:
            self._start_green(axis.other, density)

    def _start_green(self, axis: Axis, density: Optional[Density]):
        duration = self.controller.green_duration(axis, density)
        self.green_duration = duration
        self.green_times[axis] = duration
        self._enter(Phase.green_for(axis))
        self._set_green_remaining(axis, duration)

    def _enter(self, phase: Phase):
        logger.debug("Phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase
        self.elapsed_in_phase = 0

    def _apply_preemption(self, ambulance: Vehicle):
        axis = ambulance.from_.axis
        target = Phase.preempt_for(axis)
        if self.phase != target:
            logger.info("Preempting for ambulance %s from %s (was %s)",
                        ambulance.id, ambulance.from_.value, self.phase.value)
            self.phase = target
        # Re-applied every tick while the ambulance is approaching
        self._set_green_remaining(axis, self.settings.preempt_green_time)

    def _resume_after_preemption(self):
        axis = self.phase.axis
        logger.info("Preemption on %s axis ended, resuming normal cycle", axis.value.upper())
        self._enter(Phase.yellow_for(axis))
        self._set_green_remaining(axis, 0)

    def _set_green_remaining(self, axis: Axis, seconds: int):
        # Both directions of an axis share one value
        for d in Direction:
            self._green_remaining[d] = seconds if d.axis == axis else 0
