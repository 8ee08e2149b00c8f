import asyncio
import logging
import time
from fastapi import FastAPI, HTTPException
from typing import Dict, List, Optional
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from intersim.logging_setup import setup_logging
from intersim.kernel.simulation_kernel import SimulationKernel
from intersim.application.commands import (
    SetPolicyCommand, SpawnVehicleCommand, StartEmergencyCommand, StopEmergencyCommand,
    StartSimulationCommand, StopSimulationCommand
)
from intersim.domain.config import SimulationConfig
from intersim.domain.models import (
    AIStatus, AIToggle, Axis, EmergencyStatus, IntersectionSnapshot, SimulationMetrics,
    SimulationStatus, Vehicle
)

logger = logging.getLogger("intersim.main")

# Initialize Kernel
settings = SimulationConfig.from_env()
kernel = SimulationKernel(settings)

# Pending automatic end of the emergency window
_emergency_timer: Optional[asyncio.TimerHandle] = None

# Background task for simulation loop
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Start the simulation loop
    setup_logging()
    kernel.initialize()  # Deterministic seed
    loop_task = asyncio.create_task(run_simulation())
    logger.info("Simulation loop started at %.2f Hz", settings.tick_rate_hz)
    yield
    # Shutdown
    loop_task.cancel()
    _cancel_emergency_timer()

app = FastAPI(lifespan=lifespan)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

async def run_simulation():
    """Runs the simulation tick loop at the configured rate"""
    dt = 1.0 / settings.tick_rate_hz

    while True:
        start_time = time.time()

        # Update simulation (deterministic tick)
        kernel.run_tick()

        # Sleep to maintain tick rate
        elapsed = time.time() - start_time
        sleep_time = max(0.0, dt - elapsed)
        await asyncio.sleep(sleep_time)

def _cancel_emergency_timer():
    global _emergency_timer
    if _emergency_timer is not None:
        _emergency_timer.cancel()
        _emergency_timer = None

def _end_emergency_window():
    global _emergency_timer
    _emergency_timer = None
    logger.info("Emergency window elapsed, clearing emergency mode")
    kernel.queue_command(StopEmergencyCommand())

@app.get("/api/intersection/state", response_model=IntersectionSnapshot)
async def get_intersection_state():
    """Returns the full per-tick state of the intersection"""
    return kernel.get_state()

@app.get("/api/signals")
async def get_signals():
    """Returns signal colors, green countdown and phase timer"""
    return {
        "signals": kernel.get_signal_state(),
        "greenRemaining": kernel.get_green_remaining(),
        "timer": kernel.get_timer_state(),
    }

@app.get("/api/vehicles", response_model=List[Vehicle])
async def get_vehicles():
    """Returns the vehicles currently on the map"""
    return kernel.get_vehicles()

@app.post("/api/vehicles/spawn")
async def spawn_vehicle():
    """Queues an immediate spawn attempt"""
    if kernel.state.follower:
        raise HTTPException(status_code=409, detail="Kernel follows an external vehicle source")
    if len(kernel.registry) >= settings.max_vehicles:
        raise HTTPException(status_code=409, detail="Vehicle capacity reached")
    kernel.queue_command(SpawnVehicleCommand())
    return {"status": "Spawn queued"}

@app.get("/api/density")
async def get_density() -> Dict[str, int]:
    """Returns queued vehicle counts per approach"""
    return {d.value: n for d, n in kernel.get_density().items()}

@app.get("/api/metrics", response_model=SimulationMetrics)
async def get_metrics():
    """Returns throughput, waiting time and density history"""
    return kernel.metrics.snapshot(kernel.current_vehicles())

@app.post("/api/signals/ai")
async def toggle_ai_mode(toggle: AIToggle):
    """Switches between fixed and adaptive signal timing"""
    cmd = SetPolicyCommand(toggle.enabled)
    kernel.queue_command(cmd)
    return {"status": "AI Mode Updated", "enabled": toggle.enabled}

@app.get("/api/ai/status", response_model=AIStatus)
async def get_ai_status():
    """Returns the active policy and the most recent green time per axis"""
    return AIStatus(
        aiActive=kernel.state.ai_enabled,
        policy=kernel.signals.controller.name,
        nsGreenTime=kernel.signals.green_times[Axis.NS],
        ewGreenTime=kernel.signals.green_times[Axis.EW],
    )

@app.post("/api/emergency/start", response_model=EmergencyStatus)
async def start_emergency():
    """Activates emergency mode for the configured window"""
    global _emergency_timer
    kernel.queue_command(StartEmergencyCommand())

    # The caller owns the window; the kernel only sees the flag
    _cancel_emergency_timer()
    loop = asyncio.get_running_loop()
    _emergency_timer = loop.call_later(settings.emergency_window_seconds, _end_emergency_window)
    return EmergencyStatus(
        status="Emergency Started",
        emergencyActive=True,
        windowSeconds=settings.emergency_window_seconds,
    )

@app.post("/api/emergency/stop", response_model=EmergencyStatus)
async def stop_emergency():
    """Clears emergency mode"""
    _cancel_emergency_timer()
    kernel.queue_command(StopEmergencyCommand())
    return EmergencyStatus(status="Emergency Stopped", emergencyActive=False)

@app.get("/api/emergency/state", response_model=EmergencyStatus)
async def get_emergency_state():
    """Returns whether emergency mode is active"""
    return EmergencyStatus(status="ok", emergencyActive=kernel.state.emergency_active)

@app.post("/api/simulation/start", response_model=SimulationStatus)
async def start_simulation():
    """Resumes all simulation timers"""
    kernel.queue_command(StartSimulationCommand())
    return SimulationStatus(status="Start queued", running=kernel.running, tick=kernel.state.tick_id)

@app.post("/api/simulation/stop", response_model=SimulationStatus)
async def stop_simulation():
    """Halts all simulation timers together"""
    kernel.queue_command(StopSimulationCommand())
    return SimulationStatus(status="Stop queued", running=kernel.running, tick=kernel.state.tick_id)

@app.get("/")
def read_root():
    return {"status": "Intersection Simulation Running (Deterministic Kernel)"}

def run():
    """Serves the API with uvicorn; host and port come from INTERSIM_HOST / INTERSIM_PORT"""
    import os
    import uvicorn
    uvicorn.run(
        "intersim.main:app",
        host=os.environ.get("INTERSIM_HOST", "127.0.0.1"),
        port=int(os.environ.get("INTERSIM_PORT", "8001")),
    )

if __name__ == "__main__":
    run()
