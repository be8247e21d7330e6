# MIT License (see LICENSE)
"""
Per-tick particle physics.

One tick runs, in this fixed order:
    1. Push the current sensor gravity into the engine.
    2. Viscosity: scale every particle velocity by (1 - viscosity).
    3. Surface tension between particle pairs closer than the interaction radius.
    4. Optional random jitter.
    5. One engine step of dt with the configured iteration counts.

Forces from 3 and 4 are summed and applied once per particle before the
single integration call. If the engine step fails, the velocities changed
in 2 are put back and the EngineError propagates; the engine itself has
already restored bodies and dropped pending forces.
"""
from __future__ import annotations
import logging

import numpy as np

from .core.forces import damp_velocities, jitter_forces, surface_tension_forces
from .errors import EngineError
from .profiler import Profiler, maybe_section
from .session import SimulationState

logger = logging.getLogger(__name__)


def particle_forces(state: SimulationState, positions: np.ndarray) -> np.ndarray:
    """Net surface tension plus jitter force on every particle, shape (N, 2)."""
    cfg = state.config
    forces = surface_tension_forces(positions, cfg.surface_tension, cfg.interaction_radius)
    if cfg.jitter > 0.0:
        forces += jitter_forces(state.rng, len(positions), cfg.jitter)
    return forces


def physics_step(state: SimulationState, dt: float, profiler: Profiler | None = None) -> None:
    """
    Advance the particle simulation by one tick of dt seconds.

    Raises:
        EngineError: If the engine step failed; state is left as it was
                     before the tick.
    """
    cfg = state.config
    engine = state.engine
    handles = state.particles

    with maybe_section(profiler, "forces"):
        engine.set_world_gravity(float(state.fusion.gravity[0]), float(state.fusion.gravity[1]))

        positions = engine.positions(handles)
        previous = engine.velocities(handles)
        damped = damp_velocities(previous, cfg.viscosity)
        for h, (vx, vy) in zip(handles, damped):
            engine.set_velocity(h, float(vx), float(vy))

        forces = particle_forces(state, positions)
        for h, p, f in zip(handles, positions, forces):
            if f[0] != 0.0 or f[1] != 0.0:
                engine.apply_force(h, p, float(f[0]), float(f[1]))

    it = cfg.iterations
    with maybe_section(profiler, "engine"):
        try:
            engine.step(dt * 1000.0, it.position, it.velocity, it.constraint)
        except EngineError:
            logger.debug(f"Engine step failed at frame {state.frame}; restoring velocities")
            for h, (vx, vy) in zip(handles, previous):
                engine.set_velocity(h, float(vx), float(vy))
            raise


def tick(state: SimulationState, dt: float, profiler: Profiler | None = None) -> None:
    """
    Run one physics step and advance the session clock.

    The clock and frame counter only move when the step succeeds.
    """
    physics_step(state, dt, profiler=profiler)
    state.elapsed += dt
    state.frame += 1
