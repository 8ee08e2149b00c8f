import itertools
import unittest

from intersim.controllers.implementations import AdaptiveController, FixedController, controller_for
from intersim.domain.models import Axis, Direction, Phase, SignalColor, Vehicle
from intersim.kernel.simulation_kernel import SimulationKernel
from intersim.systems.signal_system import SignalPhaseController

HEAVY_NS = {Direction.NORTH: 10, Direction.SOUTH: 10, Direction.EAST: 1, Direction.WEST: 1}

def ambulance(origin: Direction, position: float = 10.0) -> Vehicle:
    exit_side = [d for d in Direction if d != origin][0]
    return Vehicle(id="amb-1", from_=origin, to=exit_side, position=position, isAmbulance=True)

class TestGreenPolicies(unittest.TestCase):
    def test_fixed_ignores_density(self):
        controller = FixedController()
        self.assertEqual(controller.green_duration(Axis.NS, HEAVY_NS), 15)
        self.assertEqual(controller.green_duration(Axis.EW, None), 15)

    def test_adaptive_scales_with_axis_density(self):
        controller = AdaptiveController()
        self.assertEqual(controller.green_duration(Axis.NS, HEAVY_NS), 20)
        self.assertEqual(controller.green_duration(Axis.EW, HEAVY_NS), 5)
        density = {Direction.NORTH: 3, Direction.SOUTH: 2, Direction.EAST: 0, Direction.WEST: 0}
        self.assertEqual(controller.green_duration(Axis.NS, density), 10)

    def test_adaptive_falls_back_to_floor_without_density(self):
        controller = AdaptiveController()
        self.assertEqual(controller.green_duration(Axis.NS, None), 5)
        self.assertEqual(controller.green_duration(Axis.EW, {}), 5)

    def test_adaptive_bounds(self):
        controller = AdaptiveController()
        for ns, ew in itertools.product(range(0, 16), repeat=2):
            density = {Direction.NORTH: ns, Direction.SOUTH: ns // 2,
                       Direction.EAST: ew, Direction.WEST: ew // 3}
            for axis in Axis:
                duration = controller.green_duration(axis, density)
                self.assertGreaterEqual(duration, 5)
                self.assertLessEqual(duration, 20)

    def test_controller_for(self):
        self.assertIsInstance(controller_for(True), AdaptiveController)
        self.assertIsInstance(controller_for(False), FixedController)

class TestSignalPhaseController(unittest.TestCase):
    def test_initial_state_is_east_west_green(self):
        controller = SignalPhaseController()
        self.assertEqual(controller.phase, Phase.EW_GREEN)
        signals = controller.signal_state()
        self.assertEqual(signals[Direction.EAST], SignalColor.GREEN)
        self.assertEqual(signals[Direction.WEST], SignalColor.GREEN)
        self.assertEqual(signals[Direction.NORTH], SignalColor.RED)
        self.assertEqual(signals[Direction.SOUTH], SignalColor.RED)
        self.assertEqual(controller.green_remaining()[Direction.EAST], 15)

    def test_fixed_cycle_timings(self):
        kernel = SimulationKernel(seed=7)
        kernel.set_spawning(False)

        phases = [kernel.get_timer_state().phase]
        for _ in range(72):
            kernel.run_tick()
            phases.append(kernel.get_timer_state().phase)

        runs = [(phase, len(list(group))) for phase, group in itertools.groupby(phases)]
        expected = [
            (Phase.EW_GREEN, 15), (Phase.EW_YELLOW, 3),
            (Phase.NS_GREEN, 15), (Phase.NS_YELLOW, 3),
        ] * 2
        self.assertEqual(runs[:-1], expected)
        self.assertEqual(runs[-1][0], Phase.EW_GREEN)

    def test_fixed_cycle_ignores_density(self):
        controller = SignalPhaseController(FixedController())
        greens = []
        for _ in range(200):
            controller.update(HEAVY_NS)
            if controller.phase.is_green and controller.elapsed_in_phase == 0:
                greens.append(controller.green_duration)
        self.assertTrue(greens)
        self.assertTrue(all(g == 15 for g in greens))

    def test_adaptive_durations_follow_density(self):
        controller = SignalPhaseController(AdaptiveController())
        # Initial EW green is sized before any density is known
        self.assertEqual(controller.green_duration, 5)

        seen = {}
        for _ in range(80):
            controller.update(HEAVY_NS)
            if controller.phase.is_green and controller.elapsed_in_phase == 0:
                seen.setdefault(controller.phase, controller.green_duration)
        self.assertEqual(seen[Phase.NS_GREEN], 20)
        self.assertEqual(seen[Phase.EW_GREEN], 5)

    def test_adaptive_green_not_reevaluated_mid_phase(self):
        controller = SignalPhaseController(AdaptiveController())
        while controller.phase != Phase.NS_GREEN:
            controller.update(HEAVY_NS)
        self.assertEqual(controller.green_duration, 20)

        empty = {d: 0 for d in Direction}
        for _ in range(19):
            controller.update(empty)
            self.assertEqual(controller.phase, Phase.NS_GREEN)
        controller.update(empty)
        self.assertEqual(controller.phase, Phase.NS_YELLOW)

    def test_green_remaining_counts_down_in_pairs(self):
        controller = SignalPhaseController()
        for elapsed in range(1, 15):
            controller.update(None)
            remaining = controller.green_remaining()
            self.assertEqual(remaining[Direction.EAST], 15 - elapsed)
            self.assertEqual(remaining[Direction.WEST], remaining[Direction.EAST])
            self.assertEqual(remaining[Direction.NORTH], 0)
            self.assertEqual(remaining[Direction.SOUTH], 0)
        controller.update(None)
        self.assertEqual(controller.phase, Phase.EW_YELLOW)
        self.assertEqual(set(controller.green_remaining().values()), {0})

    def test_phase_exclusivity(self):
        controller = SignalPhaseController(AdaptiveController())
        densities = itertools.cycle([HEAVY_NS, None, {d: 3 for d in Direction}])
        for tick in range(300):
            amb = ambulance(Direction.EAST) if 100 <= tick < 110 else None
            controller.update(next(densities), amb)
            signals = controller.signal_state()
            ns = {signals[Direction.NORTH], signals[Direction.SOUTH]}
            ew = {signals[Direction.EAST], signals[Direction.WEST]}
            self.assertEqual(len(ns), 1)
            self.assertEqual(len(ew), 1)
            non_red = [axis for axis in (ns, ew) if axis != {SignalColor.RED}]
            self.assertEqual(len(non_red), 1)

    def test_policy_switch_applies_at_next_green(self):
        controller = SignalPhaseController(FixedController())
        controller.update(HEAVY_NS)
        controller.set_controller(AdaptiveController())
        self.assertEqual(controller.green_duration, 15)
        while controller.phase != Phase.NS_GREEN:
            controller.update(HEAVY_NS)
        self.assertEqual(controller.green_duration, 20)

class TestPreemption(unittest.TestCase):
    def test_preemption_overrides_green_without_yellow(self):
        controller = SignalPhaseController()
        while controller.phase != Phase.NS_GREEN:
            controller.update(None)
        controller.update(None)

        controller.update(None, ambulance(Direction.EAST))
        self.assertEqual(controller.phase, Phase.PREEMPT_EW)
        signals = controller.signal_state()
        self.assertEqual(signals[Direction.EAST], SignalColor.GREEN)
        self.assertEqual(signals[Direction.WEST], SignalColor.GREEN)
        self.assertEqual(signals[Direction.NORTH], SignalColor.RED)
        self.assertEqual(signals[Direction.SOUTH], SignalColor.RED)
        remaining = controller.green_remaining()
        self.assertEqual(remaining[Direction.EAST], 15)
        self.assertEqual(remaining[Direction.WEST], 15)
        self.assertEqual(remaining[Direction.NORTH], 0)

    def test_preemption_overrides_yellow(self):
        controller = SignalPhaseController()
        while controller.phase != Phase.EW_YELLOW:
            controller.update(None)
        controller.update(None, ambulance(Direction.SOUTH))
        self.assertEqual(controller.phase, Phase.PREEMPT_NS)
        self.assertEqual(controller.signal_state()[Direction.NORTH], SignalColor.GREEN)
        self.assertEqual(controller.signal_state()[Direction.EAST], SignalColor.RED)

    def test_preemption_freezes_normal_timer(self):
        controller = SignalPhaseController()
        for _ in range(4):
            controller.update(None)
        elapsed = controller.elapsed_in_phase
        for _ in range(30):
            controller.update(None, ambulance(Direction.NORTH))
            self.assertEqual(controller.phase, Phase.PREEMPT_NS)
            self.assertEqual(controller.green_remaining()[Direction.NORTH], 15)
        self.assertEqual(controller.elapsed_in_phase, elapsed)

    def test_resumes_from_fresh_phase(self):
        controller = SignalPhaseController()
        controller.update(None, ambulance(Direction.NORTH))
        controller.update(None)
        self.assertEqual(controller.phase, Phase.NS_YELLOW)
        self.assertEqual(controller.elapsed_in_phase, 0)
        self.assertEqual(controller.signal_state()[Direction.NORTH], SignalColor.YELLOW)

        for _ in range(3):
            controller.update(None)
        self.assertEqual(controller.phase, Phase.EW_GREEN)
        self.assertEqual(controller.green_remaining()[Direction.EAST], 15)

if __name__ == '__main__':
    unittest.main()
