class SimulationError(Exception):
    """Base class for errors raised by the simulation engine."""


class ReadOnlyVehicleSourceError(SimulationError):
    """Raised when a follower kernel tries to mutate traffic it only reads."""
