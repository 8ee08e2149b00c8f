from abc import ABC, abstractmethod
from typing import Any

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class SetPolicyCommand(Command):
    def __init__(self, adaptive: bool):
        self.adaptive = adaptive

    def execute(self, kernel: Any):
        kernel.set_policy(self.adaptive)

class SpawnVehicleCommand(Command):
    def execute(self, kernel: Any):
        # Force a spawn attempt
        return kernel.registry.spawn_vehicle(kernel.state.tick_id)

class StartEmergencyCommand(Command):
    def execute(self, kernel: Any):
        kernel.set_emergency_active(True)

class StopEmergencyCommand(Command):
    def execute(self, kernel: Any):
        kernel.set_emergency_active(False)

class StartSimulationCommand(Command):
    def execute(self, kernel: Any):
        kernel.start()

class StopSimulationCommand(Command):
    def execute(self, kernel: Any):
        kernel.stop()
