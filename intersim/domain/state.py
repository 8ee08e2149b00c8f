from pydantic import BaseModel

class SimulationState(BaseModel):
    tick_id: int = 0
    time: float = 0.0
    ai_enabled: bool = False
    emergency_active: bool = False
    # Compare mode: follower kernels read traffic published by a leader
    follower: bool = False
