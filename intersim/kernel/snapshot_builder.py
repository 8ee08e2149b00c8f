from typing import Any, Dict
from intersim.domain.models import IntersectionSnapshot

class SnapshotBuilder:
    def build(self, kernel: Any) -> IntersectionSnapshot:
        state = kernel.state
        return IntersectionSnapshot(
            tick=state.tick_id,
            time=state.time,
            policy="adaptive" if state.ai_enabled else "fixed",
            emergencyActive=state.emergency_active,
            running=kernel.clock.running,
            signals=kernel.get_signal_state(),
            greenRemaining=kernel.get_green_remaining(),
            timer=kernel.get_timer_state(),
            density=kernel.get_density(),
            vehicles=kernel.get_vehicles(),
            metrics=kernel.metrics.snapshot(kernel.current_vehicles()),
        )

    def build_record(self, kernel: Any) -> Dict[str, Any]:
        """Compact per-tick record for headless runs."""
        state = kernel.state
        timer = kernel.get_timer_state()
        return {
            "tick": state.tick_id,
            "phase": timer.phase.value,
            "greenDuration": timer.greenDuration,
            "signals": {d.value: c.value for d, c in kernel.get_signal_state().items()},
            "density": {d.value: n for d, n in kernel.get_density().items()},
            "vehicle_count": len(kernel.current_vehicles()),
            "emergency_active": state.emergency_active,
        }
