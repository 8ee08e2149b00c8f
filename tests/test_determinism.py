import unittest
from intersim.kernel.simulation_kernel import SimulationKernel

class TestDeterminism(unittest.TestCase):
    def test_determinism(self):
        # Run 1
        kernel1 = SimulationKernel()
        kernel1.initialize(seed=42)
        kernel1.set_policy(True)
        for _ in range(50):
            kernel1.run_tick()

        state1 = kernel1.get_state()

        # Run 2
        kernel2 = SimulationKernel()
        kernel2.initialize(seed=42)
        kernel2.set_policy(True)
        for _ in range(50):
            kernel2.run_tick()

        state2 = kernel2.get_state()

        # Verify vehicles are identical
        self.assertEqual(len(state1.vehicles), len(state2.vehicles))
        for i in range(len(state1.vehicles)):
            v1 = state1.vehicles[i]
            v2 = state2.vehicles[i]
            self.assertEqual(v1.id, v2.id)
            self.assertEqual(v1.from_, v2.from_)
            self.assertEqual(v1.position, v2.position)

        # Verify signals are identical
        self.assertEqual(state1.signals, state2.signals)
        self.assertEqual(state1.timer, state2.timer)
        self.assertEqual(state1.density, state2.density)

    def test_different_seeds(self):
        kernel1 = SimulationKernel(seed=42)
        kernel2 = SimulationKernel(seed=999)

        # Run enough ticks to likely diverge
        for _ in range(50):
            kernel1.run_tick()
            kernel2.run_tick()

        # Should be different
        routes1 = [(v.from_, v.to) for v in kernel1.get_vehicles()]
        routes2 = [(v.from_, v.to) for v in kernel2.get_vehicles()]

        self.assertNotEqual(routes1, routes2, "Different seeds should produce different traffic")

if __name__ == '__main__':
    unittest.main()
