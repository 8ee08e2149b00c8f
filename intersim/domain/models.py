from enum import Enum
from typing import List, Optional, Dict
from pydantic import BaseModel, ConfigDict, Field

class Direction(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def axis(self) -> "Axis":
        return Axis.NS if self in (Direction.NORTH, Direction.SOUTH) else Axis.EW

class Axis(str, Enum):
    NS = "ns"
    EW = "ew"

    @property
    def directions(self) -> tuple:
        if self == Axis.NS:
            return (Direction.NORTH, Direction.SOUTH)
        return (Direction.EAST, Direction.WEST)

    @property
    def other(self) -> "Axis":
        return Axis.EW if self == Axis.NS else Axis.NS

class SignalColor(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"

class Phase(str, Enum):
    NS_GREEN = "NS_GREEN"
    NS_YELLOW = "NS_YELLOW"
    EW_GREEN = "EW_GREEN"
    EW_YELLOW = "EW_YELLOW"
    PREEMPT_NS = "PREEMPT_NS"
    PREEMPT_EW = "PREEMPT_EW"

    @property
    def axis(self) -> Axis:
        return Axis.NS if "NS" in self.value else Axis.EW

    @property
    def is_green(self) -> bool:
        return self in (Phase.NS_GREEN, Phase.EW_GREEN)

    @property
    def is_yellow(self) -> bool:
        return self in (Phase.NS_YELLOW, Phase.EW_YELLOW)

    @property
    def is_preempt(self) -> bool:
        return self in (Phase.PREEMPT_NS, Phase.PREEMPT_EW)

    @classmethod
    def green_for(cls, axis: Axis) -> "Phase":
        return cls.NS_GREEN if axis == Axis.NS else cls.EW_GREEN

    @classmethod
    def yellow_for(cls, axis: Axis) -> "Phase":
        return cls.NS_YELLOW if axis == Axis.NS else cls.EW_YELLOW

    @classmethod
    def preempt_for(cls, axis: Axis) -> "Phase":
        return cls.PREEMPT_NS if axis == Axis.NS else cls.PREEMPT_EW

# Direction -> color, paired per axis
SignalState = Dict[Direction, SignalColor]
# Direction -> queued vehicle count
Density = Dict[Direction, int]

class Vehicle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_: Direction = Field(alias="from")  # Entry side
    to: Direction                           # Exit side, never equal to from
    position: float = 0.0
    isAmbulance: bool = False
    passed: bool = False
    waitTicks: int = 0  # Ticks held at a red signal

class PhaseTimerState(BaseModel):
    phase: Phase
    activeAxis: Axis
    elapsedInPhase: int
    greenDuration: int
    greenRemaining: Dict[Direction, int]

class DensitySample(BaseModel):
    tick: int
    density: Dict[Direction, int]
    vehicleCount: int
    phase: Phase

class SimulationMetrics(BaseModel):
    throughput: int = 0
    totalWaitTicks: int = 0
    averageWait: float = 0.0
    samples: List[DensitySample] = []

# API/Response Models

class IntersectionSnapshot(BaseModel):
    tick: int
    time: float
    policy: str  # "fixed" or "adaptive"
    emergencyActive: bool
    running: bool
    signals: Dict[Direction, SignalColor]
    greenRemaining: Dict[Direction, int]
    timer: PhaseTimerState
    density: Dict[Direction, int]
    vehicles: List[Vehicle]
    metrics: SimulationMetrics

class AIToggle(BaseModel):
    enabled: bool

class AIStatus(BaseModel):
    aiActive: bool
    policy: str
    nsGreenTime: int
    ewGreenTime: int

class EmergencyStatus(BaseModel):
    status: str
    emergencyActive: bool
    windowSeconds: Optional[float] = None

class SimulationStatus(BaseModel):
    status: str
    running: bool
    tick: int
