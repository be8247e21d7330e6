# MIT License (see LICENSE)
"""
The bundled rigid-body world.

World is the engine the fluid simulation delegates dynamics to. It
implements the RigidBodyEngine contract and manages:
- The list of bodies (circle particles and static wall segments).
- Global gravity, set from outside every tick.
- The step pipeline:
    1. Force accumulation (gravity + externally applied forces).
    2. Velocity integration and per-step air friction.
    3. Collision detection (Broadphase + Narrowphase).
    4. Velocity solve (Sequential Impulse, `velocity_iterations` passes).
    5. Position integration.
    6. Position projection (`position_iterations` passes).
    7. Swept wall test: a particle whose center crossed a wall axis this
       step is put back on the inside face and bounced.
    8. Wall containment (`constraint_iterations` passes).

A step is all-or-nothing: if anything goes numerically wrong, every body is
restored to its pre-step state and EngineError is raised.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .collision.broadphase import SpatialHashBroadphase
from .collision.ccd import segment_crossing
from .collision.contact import (
    Contact,
    circle_segment_contact,
    detect_contact,
    prepare_contacts,
    resolve_penetration,
    solve_contact_pgs,
)
from .core.forces import apply_air_friction, apply_gravity
from .core.integrators import integrate_position, integrate_velocity
from .engine import BodyHandle, SegmentGeometry
from .errors import EngineError
from .materials import Material
from .types import Circle, RigidBody2D, Segment, circle_mass
from .util import cross2, f64

logger = logging.getLogger(__name__)


@dataclass
class World:
    """
    Rigid-body world for circles and static walls.

    Attributes:
        gravity: World gravity acceleration [gx, gy].
        cell_size: Broadphase grid cell size. About 4x the particle
                   radius works well.
        baumgarte_beta: Velocity-level position correction factor.
        projection_percent: Fraction of penetration removed per
                            position iteration.
    """
    gravity: tuple[float, float] = (0.0, 0.0)
    cell_size: float = 0.5
    baumgarte_beta: float = 0.2
    projection_percent: float = 0.8

    # Internal state
    bodies: list[RigidBody2D] = field(default_factory=list)
    time: float = 0.0

    def __post_init__(self) -> None:
        self._g = f64(self.gravity)
        self._broadphase = SpatialHashBroadphase(cell_size=self.cell_size)
        self._by_id: dict[int, RigidBody2D] = {}
        self._next_id = 1

    # ------------------------------------------------------------------
    # Body creation
    # ------------------------------------------------------------------

    def add_body(self, body: RigidBody2D) -> BodyHandle:
        """
        Add a rigid body to the world and assign it a unique handle.

        Returns:
            The assigned body handle.
        """
        body.id = self._next_id
        self._next_id += 1
        self.bodies.append(body)
        self._by_id[body.id] = body
        return body.id

    def create_body(
        self,
        shape: str,
        radius: float,
        restitution: float,
        friction: float,
        density: float,
        air_friction: float,
        position: tuple[float, float] = (0.0, 0.0),
    ) -> BodyHandle:
        """
        Create a dynamic circular body.

        Mass is density times the disc area.

        Raises:
            ValueError: For any shape other than "circle", or a
                        non-positive radius or density.
        """
        if shape != "circle":
            raise ValueError(f"Unsupported body shape: {shape!r}")
        if radius <= 0 or density <= 0:
            raise ValueError(f"radius and density must be positive, got {radius}, {density}")
        body = RigidBody2D(
            shape=Circle(radius),
            mass=circle_mass(radius, density),
            position=position,
            material=Material(
                friction=friction,
                restitution=restitution,
                density=density,
                air_friction=air_friction,
            ),
        )
        return self.add_body(body)

    def create_static_segment(self, geometry: SegmentGeometry) -> BodyHandle:
        """Create an immovable wall segment."""
        start, end = f64(geometry.start), f64(geometry.end)
        mid = 0.5 * (start + end)
        body = RigidBody2D(
            shape=Segment(
                a=tuple(start - mid),
                b=tuple(end - mid),
                radius=0.5 * geometry.thickness,
            ),
            mass=0.0,
            position=mid,
            material=Material(
                friction=geometry.friction,
                restitution=geometry.restitution,
                air_friction=0.0,
            ),
        )
        return self.add_body(body)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def body(self, handle: BodyHandle) -> RigidBody2D:
        """Look up a body by handle. Raises KeyError for unknown handles."""
        return self._by_id[handle]

    def set_world_gravity(self, gx: float, gy: float) -> None:
        self._g = f64((gx, gy))
        self.gravity = (float(gx), float(gy))

    def set_velocity(self, handle: BodyHandle, vx: float, vy: float) -> None:
        self._by_id[handle].velocity = f64((vx, vy))

    def apply_force(self, handle: BodyHandle, at_point: Sequence[float], fx: float, fy: float) -> None:
        """
        Accumulate a force on a body until the next step.

        A force applied away from the center of mass also adds torque.
        """
        body = self._by_id[handle]
        if body.is_static:
            return
        f = f64((fx, fy))
        body.force += f
        body.torque += cross2(f64(at_point) - body.position, f)

    def position(self, handle: BodyHandle) -> np.ndarray:
        return self._by_id[handle].position.copy()

    def velocity(self, handle: BodyHandle) -> np.ndarray:
        return self._by_id[handle].velocity.copy()

    def positions(self, handles: Sequence[BodyHandle]) -> np.ndarray:
        """Positions of the given bodies as an (N, 2) array, in handle order."""
        if not handles:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([self._by_id[h].position for h in handles], dtype=np.float64)

    def velocities(self, handles: Sequence[BodyHandle]) -> np.ndarray:
        """Velocities of the given bodies as an (N, 2) array, in handle order."""
        if not handles:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([self._by_id[h].velocity for h in handles], dtype=np.float64)

    def clear(self) -> None:
        """Release all bodies."""
        logger.debug(f"Clearing world with {len(self.bodies)} bodies")
        self.bodies.clear()
        self._by_id.clear()

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def _snapshot(self) -> list[tuple[np.ndarray, np.ndarray, float, float]]:
        return [
            (b.position.copy(), b.velocity.copy(), b.angle, b.omega)
            for b in self.bodies
        ]

    def _restore(self, snapshot: list[tuple[np.ndarray, np.ndarray, float, float]]) -> None:
        for b, (pos, vel, angle, omega) in zip(self.bodies, snapshot):
            b.position, b.velocity, b.angle, b.omega = pos, vel, angle, omega

    def _clear_forces(self) -> None:
        for b in self.bodies:
            b.clear_forces()

    def _narrowphase(self, pairs: list[tuple[RigidBody2D, RigidBody2D]]) -> list[Contact]:
        contacts = []
        for a, b in pairs:
            c = detect_contact(a, b)
            if c is not None:
                contacts.append(c)
        return contacts

    def _sweep(
        self,
        walls: list[RigidBody2D],
        dynamic: list[RigidBody2D],
        start: list[np.ndarray],
    ) -> int:
        """
        Return bodies that tunneled through a wall to its near face.

        The earliest crossing along the path is handled first. Moving a body
        back can leave it past a neighbouring wall near a corner, so the
        path is tested again, once per wall at most.

        Returns:
            Number of corrections made.
        """
        returned = 0
        for body, p0 in zip(dynamic, start):
            for _ in range(len(walls)):
                first = None
                for wall in walls:
                    hit = segment_crossing(p0, body.position, *wall.segment_endpoints())
                    if hit is not None and (first is None or hit[0] < first[0]):
                        first = (hit[0], hit[1], wall)
                if first is None:
                    break

                t, normal, wall = first
                axis_point = p0 + t * (body.position - p0)
                body.position = axis_point + normal * (body.shape.radius + wall.shape.radius)

                vn = float(np.dot(body.velocity, normal))
                if vn < 0.0:
                    e = min(body.material.restitution, wall.material.restitution)
                    body.velocity = body.velocity - (1.0 + e) * vn * normal
                returned += 1
        if returned:
            logger.debug(f"Swept wall test returned {returned} bodies")
        return returned

    def _contain(self, walls: list[RigidBody2D], dynamic: list[RigidBody2D]) -> bool:
        """Project every dynamic body fully out of every wall. Returns True if anything moved."""
        moved = False
        for wall in walls:
            for body in dynamic:
                c = circle_segment_contact(body, wall)
                if c is not None and c.penetration > 0.0:
                    resolve_penetration(c, percent=1.0)
                    moved = True
        return moved

    def _check_finite(self) -> None:
        for b in self.bodies:
            if not (np.all(np.isfinite(b.position)) and np.all(np.isfinite(b.velocity))):
                raise FloatingPointError(f"body {b.id} has non-finite state")

    def _advance(
        self,
        dt: float,
        position_iterations: int,
        velocity_iterations: int,
        constraint_iterations: int,
    ) -> None:
        dynamic = [b for b in self.bodies if not b.is_static]
        walls = [b for b in self.bodies if isinstance(b.shape, Segment)]
        start = [b.position.copy() for b in dynamic]

        # 1-2. Forces and velocities
        for b in dynamic:
            apply_gravity(b, self._g)
            integrate_velocity(b, dt)
            apply_air_friction(b)

        # 3-4. Contacts and velocity solve
        pairs = self._broadphase.pairs(self.bodies)
        contacts = self._narrowphase(pairs)
        prepare_contacts(contacts, dt, baumgarte_beta=self.baumgarte_beta)
        for _ in range(velocity_iterations):
            for c in contacts:
                solve_contact_pgs(c)

        # 5. Positions
        for b in dynamic:
            integrate_position(b, dt)

        # 6. Projection on fresh geometry for the same candidate pairs
        for _ in range(position_iterations):
            contacts = self._narrowphase(pairs)
            if not contacts:
                break
            for c in contacts:
                resolve_penetration(c, percent=self.projection_percent)

        # 7. Tunneling
        self._sweep(walls, dynamic, start)

        # 8. Hard wall containment
        for _ in range(constraint_iterations):
            if not self._contain(walls, dynamic):
                break

    def step(
        self,
        dt_ms: float,
        position_iterations: int = 6,
        velocity_iterations: int = 4,
        constraint_iterations: int = 4,
    ) -> None:
        """
        Advance the world by dt_ms milliseconds.

        Forces applied since the previous step act during this step and are
        cleared afterwards. A non-positive dt only drops pending forces.

        Raises:
            EngineError: If the step produced non-finite state or failed
                         numerically. All bodies are restored to their
                         pre-step state first.
        """
        dt = float(dt_ms) / 1000.0
        if dt <= 0.0:
            self._clear_forces()
            return

        snapshot = self._snapshot()
        try:
            self._advance(dt, position_iterations, velocity_iterations, constraint_iterations)
            self._check_finite()
        except (ArithmeticError, ValueError) as exc:
            self._restore(snapshot)
            self._clear_forces()
            raise EngineError(f"World step of {dt_ms:.3f} ms failed: {exc}") from exc

        self._clear_forces()
        self.time += dt
