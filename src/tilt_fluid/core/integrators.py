# MIT License (see LICENSE)
"""
Numerical integrator for the particle world.

The world uses semi-implicit (symplectic) Euler, split in two halves so the
contact solver can run between them:

    v(t+dt) = v(t) + (F/m) dt          integrate_velocity
    x(t+dt) = x(t) + v(t+dt) dt        integrate_position

Updating velocity first and then moving with the new velocity keeps the
scheme symplectic and stable for stiff contact piles.

Reference:
    https://en.wikipedia.org/wiki/Semi-implicit_Euler_method
"""
from __future__ import annotations

from ..types import RigidBody2D


def integrate_velocity(body: RigidBody2D, dt: float) -> None:
    """
    Advance linear and angular velocity by dt using accumulated force/torque.

    Static bodies are left untouched.
    """
    if body.mass <= 0:
        return
    body.velocity = body.velocity + body.force * (body.inv_mass * dt)
    body.omega = body.omega + body.torque * body.inv_inertia * dt


def integrate_position(body: RigidBody2D, dt: float) -> None:
    """Advance position and angle by dt using the current velocity."""
    if body.mass <= 0:
        return
    body.position = body.position + body.velocity * dt
    body.angle = body.angle + body.omega * dt

