# Simulation Configuration
import os
from typing import Optional

from pydantic import BaseModel, model_validator


# Approach Geometry (0 = spawn point, 100 = off-map)
INTERSECTION_START = 40.0  # Vehicles below this are queued and counted in density
SIGNAL_STOP_LINE = 45.0    # Vehicles below this obey their signal
INTERSECTION_END = 60.0    # Vehicles at or beyond this have passed
MAP_END = 100.0            # Vehicles at or beyond this are removed

# Vehicle Movement (units per tick)
VEHICLE_SPEED = 2.0
AMBULANCE_SPEED = 3.0

# Signal Timings (seconds, 1 tick = 1 second)
TICK_SECONDS = 1.0
FIXED_GREEN_TIME = 15
YELLOW_TIME = 3
MIN_GREEN_TIME = 5
MAX_GREEN_TIME = 20
DENSITY_GREEN_FACTOR = 2   # Adaptive green = axis density * factor, clamped
PREEMPT_GREEN_TIME = 15

# Spawning
MAX_VEHICLES = 30
SPAWN_INTERVAL_TICKS = 2
AMBULANCE_SPAWN_CHANCE = 0.3

# Sampling
DENSITY_SAMPLE_INTERVAL_TICKS = 3
DENSITY_HISTORY_SIZE = 120

# Server / Caller
TICK_RATE_HZ = 1.0
EMERGENCY_WINDOW_SECONDS = 8.0

ENV_PREFIX = "INTERSIM_"


class SimulationConfig(BaseModel):
    """Tunables for one simulation kernel, defaulting to the module constants."""

    fixed_green_time: int = FIXED_GREEN_TIME
    yellow_time: int = YELLOW_TIME
    min_green_time: int = MIN_GREEN_TIME
    max_green_time: int = MAX_GREEN_TIME
    density_green_factor: int = DENSITY_GREEN_FACTOR
    preempt_green_time: int = PREEMPT_GREEN_TIME

    max_vehicles: int = MAX_VEHICLES
    spawn_interval_ticks: int = SPAWN_INTERVAL_TICKS
    ambulance_spawn_chance: float = AMBULANCE_SPAWN_CHANCE
    density_sample_interval_ticks: int = DENSITY_SAMPLE_INTERVAL_TICKS
    density_history_size: int = DENSITY_HISTORY_SIZE

    tick_rate_hz: float = TICK_RATE_HZ
    emergency_window_seconds: float = EMERGENCY_WINDOW_SECONDS

    @model_validator(mode="after")
    def _check_ranges(self):
        if self.min_green_time <= 0 or self.min_green_time > self.max_green_time:
            raise ValueError(
                f"green bounds must satisfy 0 < min <= max, got "
                f"{self.min_green_time}..{self.max_green_time}"
            )
        if self.yellow_time <= 0 or self.fixed_green_time <= 0:
            raise ValueError("phase durations must be positive")
        if self.spawn_interval_ticks <= 0 or self.density_sample_interval_ticks <= 0:
            raise ValueError("timer intervals must be positive")
        if self.max_vehicles <= 0:
            raise ValueError("max_vehicles must be positive")
        if not 0.0 <= self.ambulance_spawn_chance <= 1.0:
            raise ValueError("ambulance_spawn_chance must be within [0, 1]")
        if self.tick_rate_hz <= 0:
            raise ValueError("tick_rate_hz must be positive")
        return self

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "SimulationConfig":
        """Builds a config, overriding fields from INTERSIM_<FIELD> variables."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None:
                overrides[name] = raw
        return cls(**overrides)
