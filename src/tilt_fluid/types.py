# MIT License (see LICENSE)
"""
Bodies of the particle world.

Two shapes exist: Circle for fluid particles and Segment (a capsule) for
the container walls. Both are carried by RigidBody2D, whose state World
integrates with Newton's laws in 2D:
  - Linear:  F = m·a  →  a = F/m
  - Angular: τ = I·α  →  α = τ/I

Walls have mass 0, which makes them static: infinite inertia, never
integrated, never moved by contacts.
"""
from __future__ import annotations
from dataclasses import dataclass, field

import numpy as np

from .materials import Material
from .util import f64


@dataclass(frozen=True)
class Circle:
    """A particle of the given radius."""
    radius: float


@dataclass(frozen=True)
class Segment:
    """
    Thick wall segment (a capsule).

    Endpoints are stored relative to the owning body's position, so a
    segment body sits at the midpoint of its endpoints.

    Attributes:
        a: First endpoint in local space.
        b: Second endpoint in local space.
        radius: Half of the wall thickness.
    """
    a: tuple[float, float]
    b: tuple[float, float]
    radius: float = 0.5


Shape2D = Circle | Segment


@dataclass
class RigidBody2D:
    """
    A particle or wall together with its dynamic state.

    Attributes:
        shape: Circle (particle) or Segment (wall).
        mass: Mass in world units; mass <= 0 marks a static body.
        position: Center [x, y].
        angle: Rotation in radians, counterclockwise.
        velocity: Linear velocity [vx, vy] in units/s.
        omega: Angular velocity in rad/s. Particles only spin through friction.
        material: Surface and drag properties.
        force: Force accumulated until the next step [Fx, Fy].
        torque: Torque accumulated until the next step.
        id: Handle assigned by World; -1 until the body is added.
    """
    shape: Shape2D
    mass: float
    position: np.ndarray | tuple[float, float] = (0.0, 0.0)
    angle: float = 0.0
    velocity: np.ndarray | tuple[float, float] = (0.0, 0.0)
    omega: float = 0.0
    material: Material = field(default_factory=Material)
    force: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    torque: float = 0.0
    id: int = -1

    def __post_init__(self) -> None:
        self.position = f64(self.position)
        self.velocity = f64(self.velocity)
        self.force = f64(self.force)

    @property
    def is_static(self) -> bool:
        return self.mass <= 0

    @property
    def inv_mass(self) -> float:
        return 0.0 if self.is_static else 1.0 / self.mass

    @property
    def inertia(self) -> float:
        """Solid disc I = ½ m r² for particles; 0 for walls."""
        if isinstance(self.shape, Segment):
            return 0.0
        if isinstance(self.shape, Circle):
            return 0.5 * self.mass * self.shape.radius ** 2
        raise TypeError(f"Unknown shape type: {type(self.shape)}")

    @property
    def inv_inertia(self) -> float:
        inertia = self.inertia
        return 1.0 / inertia if inertia > 0 and not self.is_static else 0.0

    def clear_forces(self) -> None:
        self.force[:] = 0.0
        self.torque = 0.0

    def segment_endpoints(self) -> tuple[np.ndarray, np.ndarray]:
        """World-space endpoints of a wall (walls never rotate)."""
        if not isinstance(self.shape, Segment):
            raise TypeError("segment_endpoints() requires a Segment shape")
        return self.position + f64(self.shape.a), self.position + f64(self.shape.b)


def circle_mass(radius: float, density: float) -> float:
    """Mass of a solid disc: density * π r²."""
    return float(density * np.pi * radius * radius)
