# MIT License (see LICENSE)
"""
Capability contract for the rigid-body engine.

The fluid core never reaches into engine internals: it creates bodies,
pushes gravity, velocities and forces, reads positions back, and asks the
engine to step. Any 2D backend that satisfies RigidBodyEngine can be used;
tilt_fluid.world.World is the bundled one.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np

# Opaque identifier of a body inside an engine.
BodyHandle = int


@dataclass(frozen=True)
class SegmentGeometry:
    """
    A static wall segment.

    Attributes:
        start: First endpoint in world space.
        end: Second endpoint in world space.
        thickness: Full wall thickness (the wall is a capsule of radius thickness/2).
        restitution: Bounciness of the wall surface.
        friction: Friction coefficient of the wall surface.
    """
    start: tuple[float, float]
    end: tuple[float, float]
    thickness: float = 1.0
    restitution: float = 0.7
    friction: float = 0.1


class RigidBodyEngine(Protocol):
    """2D rigid-body integrator and collision solver used by the simulation."""

    def create_body(
        self,
        shape: str,
        radius: float,
        restitution: float,
        friction: float,
        density: float,
        air_friction: float,
        position: tuple[float, float] = (0.0, 0.0),
    ) -> BodyHandle: ...

    def create_static_segment(self, geometry: SegmentGeometry) -> BodyHandle: ...

    def set_world_gravity(self, gx: float, gy: float) -> None: ...

    def set_velocity(self, handle: BodyHandle, vx: float, vy: float) -> None: ...

    def apply_force(
        self, handle: BodyHandle, at_point: Sequence[float], fx: float, fy: float
    ) -> None: ...

    def step(
        self,
        dt_ms: float,
        position_iterations: int,
        velocity_iterations: int,
        constraint_iterations: int,
    ) -> None: ...

    def clear(self) -> None: ...

    def position(self, handle: BodyHandle) -> np.ndarray: ...

    def velocity(self, handle: BodyHandle) -> np.ndarray: ...

    def positions(self, handles: Sequence[BodyHandle]) -> np.ndarray: ...

    def velocities(self, handles: Sequence[BodyHandle]) -> np.ndarray: ...
