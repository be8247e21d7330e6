# MIT License (see LICENSE)
"""
Simulation session state and construction.

A session owns one engine instance, the particle handles created in it,
the container walls and the sensor state. It is built once when the loop
starts and released when the loop is disposed.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from .config import SimulationConfig
from .engine import BodyHandle, RigidBodyEngine, SegmentGeometry
from .sensors.fusion import SensorFusion
from .world import World

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    """
    Everything a tick reads and writes.

    Attributes:
        config: Immutable session configuration.
        engine: The rigid-body engine owning all bodies.
        particles: Particle handles; list index is the particle identity.
        walls: Container wall handles.
        fusion: Sensor state (gravity, tilt).
        rng: Seeded random source for jitter.
        elapsed: Simulated time in seconds since start().
        frame: Number of completed ticks.
        running: True while ticks should run.
    """
    config: SimulationConfig
    engine: RigidBodyEngine
    particles: list[BodyHandle] = field(default_factory=list)
    walls: list[BodyHandle] = field(default_factory=list)
    fusion: SensorFusion = field(default_factory=SensorFusion)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    elapsed: float = 0.0
    frame: int = 0
    running: bool = False


def container_walls(config: SimulationConfig) -> list[SegmentGeometry]:
    """
    The four walls of the box, centered on the origin.

    Wall axes sit on the container edges; their ends overshoot by half the
    thickness so the corners are closed.
    """
    hw, hh = 0.5 * config.container_width, 0.5 * config.container_height
    t = config.wall.thickness
    ext = 0.5 * t

    def wall(start: tuple[float, float], end: tuple[float, float]) -> SegmentGeometry:
        return SegmentGeometry(
            start=start,
            end=end,
            thickness=t,
            restitution=config.wall.restitution,
            friction=config.wall.friction,
        )

    return [
        wall((-hw - ext, hh), (hw + ext, hh)),     # top
        wall((-hw - ext, -hh), (hw + ext, -hh)),   # bottom
        wall((-hw, -hh - ext), (-hw, hh + ext)),   # left
        wall((hw, -hh - ext), (hw, hh + ext)),     # right
    ]


def spawn_positions(rng: np.random.Generator, config: SimulationConfig) -> np.ndarray:
    """Uniform random spawn points in the central spawn_fraction of the box, shape (N, 2)."""
    half = 0.5 * config.spawn_fraction * np.array(
        [config.container_width, config.container_height], dtype=np.float64
    )
    return rng.uniform(-half, half, size=(config.particle_count, 2))


def create_session(
    config: SimulationConfig,
    engine_factory: Callable[[], RigidBodyEngine] = World,
) -> SimulationState:
    """
    Build a fresh session: engine, walls and particles.

    Particles are created in a fixed order, so handles and positions are
    reproducible for a given seed.
    """
    engine = engine_factory()
    rng = np.random.default_rng(config.seed)
    state = SimulationState(config=config, engine=engine, rng=rng)

    for geometry in container_walls(config):
        state.walls.append(engine.create_static_segment(geometry))

    pc = config.particle
    for x, y in spawn_positions(rng, config):
        handle = engine.create_body(
            "circle",
            pc.radius,
            pc.restitution,
            pc.friction,
            pc.density,
            pc.air_friction,
            position=(float(x), float(y)),
        )
        state.particles.append(handle)

    logger.info(
        f"Session created: {len(state.particles)} particles in a "
        f"{config.container_width}x{config.container_height} container"
    )
    return state


def release_session(state: SimulationState) -> None:
    """Release the engine bodies and drop every handle."""
    state.running = False
    state.engine.clear()
    state.particles.clear()
    state.walls.clear()
    logger.debug("Session released")
