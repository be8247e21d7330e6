# MIT License (see LICENSE)
"""
tilt_fluid - A tilt-driven 2D particle fluid toy.

Particles in a rectangular container are pulled by gravity derived from
filtered device acceleration, held together by short-range surface
tension, damped by viscosity and pushed around by touches. Rigid-body
dynamics are delegated to an engine behind the RigidBodyEngine contract;
World is the bundled one.

Main entry points:
    - SimulationLoop: Lifecycle (start/pause/resume/dispose) and tick scheduling.
    - SimulationConfig: Immutable tuning for one session.
    - World: The bundled rigid-body engine.
    - SensorFusion, KalmanFilter: Sensor smoothing and gravity derivation.
    - EventHub: Host input events (motion, orientation, touch).

Submodules:
    - collision: Broadphase, narrowphase and contact resolution.
    - core: Force generators and integrators.
    - sensors: Kalman filtering and sensor fusion.
    - io: JSON configuration files.
    - renderer: Rendering adapters.

Example:
    from tilt_fluid import SimulationConfig, SimulationLoop, ManualScheduler, EventHub

    hub = EventHub()
    scheduler = ManualScheduler()
    loop = SimulationLoop(SimulationConfig(particle_count=200, seed=1), scheduler, events=hub)
    loop.start()
    hub.emit("devicemotion", {"ax": 3.0, "ay": -9.0, "az": 0.0})
    for _ in range(120):
        scheduler.advance()
    loop.dispose()
"""
from .config import IterationConfig, ParticleConfig, SimulationConfig, WallConfig
from .engine import BodyHandle, RigidBodyEngine, SegmentGeometry
from .errors import EngineError, LifecycleError, SimulationError
from .events import EventHub
from .logging_config import setup_logging
from .loop import ManualScheduler, SimulationLoop
from .sensors import KalmanFilter, SensorFusion
from .world import World

__all__ = [
    # Loop
    "SimulationLoop",
    "ManualScheduler",
    # Configuration
    "SimulationConfig",
    "IterationConfig",
    "ParticleConfig",
    "WallConfig",
    # Engine
    "World",
    "RigidBodyEngine",
    "BodyHandle",
    "SegmentGeometry",
    # Sensors and input
    "KalmanFilter",
    "SensorFusion",
    "EventHub",
    # Errors
    "SimulationError",
    "EngineError",
    "LifecycleError",
    # Logging
    "setup_logging",
]
