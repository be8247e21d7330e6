# MIT License (see LICENSE)
"""
Particle contacts: generation and resolution.

Only two contact kinds exist in the fluid world: particle against particle
(circle-circle) and particle against container wall (circle-capsule).
Resolution is Sequential Impulse (Projected Gauss-Seidel) with a Baumgarte
velocity bias and Coulomb friction, followed by linear position
projection.

Conventions:
- The contact normal points from body a toward body b.
- Material mixing: restitution takes the minimum, friction the mean.
- Accumulated impulses are clamped (normal >= 0, |tangent| <= mu * normal),
  so the result of a pass never depends on how many passes ran before it.
"""
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from ..types import RigidBody2D, Circle, Segment
from ..util import unit, cross2, closest_point_on_segment

# Penetration allowed before any correction kicks in.
SLOP = 1e-4

# Approach speed below which a contact does not bounce.
RESTITUTION_THRESHOLD = 0.05

# Upper bound on the Baumgarte bias velocity.
MAX_BIAS = 20.0


@dataclass
class Contact:
    """
    One touching pair.

    Attributes:
        a, b: The two bodies; at most one of them is static.
        point: World-space contact point.
        normal: Unit normal from a toward b.
        penetration: Overlap depth (positive = overlapping).
        jn_accum: Normal impulse accumulated over solver passes.
        jt_accum: Friction impulse accumulated over solver passes.
        mass_normal: Effective mass along the normal (set by prepare_contacts).
        bias: Target separating velocity (set by prepare_contacts).
        friction: Mixed friction coefficient (set by prepare_contacts).
    """
    a: RigidBody2D
    b: RigidBody2D
    point: np.ndarray
    normal: np.ndarray
    penetration: float
    jn_accum: float = 0.0
    jt_accum: float = 0.0

    mass_normal: float = 0.0
    bias: float = 0.0
    friction: float = 0.0


# =============================================================================
# Generation
# =============================================================================

def circle_circle_contact(a: RigidBody2D, b: RigidBody2D) -> Contact | None:
    """Contact between two particles, or None if they do not overlap."""
    offset = b.position - a.position
    reach = a.shape.radius + b.shape.radius
    dist = float(np.linalg.norm(offset))
    if dist >= reach:
        return None

    # Coincident centers: any direction separates them.
    normal = unit(offset) if dist > 1e-12 else np.array([1.0, 0.0], dtype=np.float64)
    depth = reach - dist
    point = a.position + normal * (a.shape.radius - 0.5 * depth)
    return Contact(a=a, b=b, point=point, normal=normal, penetration=depth)


def circle_segment_contact(a: RigidBody2D, b: RigidBody2D) -> Contact | None:
    """
    Contact between a particle and a thick wall segment.

    Either body may be the segment; the returned normal always points
    from a toward b.
    """
    flipped = isinstance(a.shape, Segment)
    circle, wall = (b, a) if flipped else (a, b)

    center = circle.position
    s0, s1 = wall.segment_endpoints()
    to_wall = closest_point_on_segment(center, s0, s1) - center
    dist = float(np.linalg.norm(to_wall))
    reach = circle.shape.radius + wall.shape.radius
    if dist >= reach:
        return None

    if dist > 1e-12:
        normal = to_wall / dist
    else:
        # Center exactly on the wall axis: push along the wall's normal
        # toward the wall body's own position (the inside of the box).
        edge = s1 - s0
        normal = unit(np.array([-edge[1], edge[0]], dtype=np.float64))
        if float(np.dot(normal, wall.position - center)) < 0:
            normal = -normal

    depth = reach - dist
    point = center + normal * (circle.shape.radius - 0.5 * depth)
    return Contact(
        a=a,
        b=b,
        point=point,
        normal=-normal if flipped else normal,
        penetration=depth,
    )


def detect_contact(a: RigidBody2D, b: RigidBody2D) -> Contact | None:
    """Narrowphase dispatch on shape types. Wall-wall pairs never touch."""
    a_circle, b_circle = isinstance(a.shape, Circle), isinstance(b.shape, Circle)
    if a_circle and b_circle:
        return circle_circle_contact(a, b)
    if a_circle or b_circle:
        return circle_segment_contact(a, b)
    return None


# =============================================================================
# Resolution
# =============================================================================

def _arms(c: Contact) -> tuple[np.ndarray, np.ndarray]:
    return c.point - c.a.position, c.point - c.b.position


def _relative_velocity(c: Contact, ra: np.ndarray, rb: np.ndarray) -> np.ndarray:
    """Velocity of b's contact point relative to a's."""
    va = c.a.velocity + c.a.omega * np.array([-ra[1], ra[0]], dtype=np.float64)
    vb = c.b.velocity + c.b.omega * np.array([-rb[1], rb[0]], dtype=np.float64)
    return vb - va


def _effective_mass(c: Contact, ra: np.ndarray, rb: np.ndarray, axis: np.ndarray) -> float:
    """1 / (J M^-1 J^T) for an impulse along axis; 0 if neither body can move."""
    ka, kb = cross2(ra, axis), cross2(rb, axis)
    k = (
        c.a.inv_mass + c.b.inv_mass
        + ka * ka * c.a.inv_inertia
        + kb * kb * c.b.inv_inertia
    )
    return 1.0 / k if k > 1e-15 else 0.0


def _apply_impulse(c: Contact, ra: np.ndarray, rb: np.ndarray, impulse: np.ndarray) -> None:
    """Push a by -impulse and b by +impulse at the contact point."""
    a, b = c.a, c.b
    a.velocity = a.velocity - impulse * a.inv_mass
    b.velocity = b.velocity + impulse * b.inv_mass
    a.omega -= a.inv_inertia * cross2(ra, impulse)
    b.omega += b.inv_inertia * cross2(rb, impulse)


def prepare_contacts(
    contacts: list[Contact],
    dt: float,
    baumgarte_beta: float = 0.2,
) -> None:
    """
    Cache per-contact solver data. Call once per step, before the passes.

    The bias is the separating velocity the solver aims for: a Baumgarte
    term that closes the penetration beyond SLOP over about 1/beta steps,
    plus a restitution bounce when the bodies approach faster than
    RESTITUTION_THRESHOLD.

    Args:
        contacts: Contacts found this step.
        dt: Timestep in seconds.
        baumgarte_beta: Position correction factor in (0, 1].
    """
    for c in contacts:
        ra, rb = _arms(c)
        c.mass_normal = _effective_mass(c, ra, rb, c.normal)
        c.friction = 0.5 * (c.a.material.friction + c.b.material.friction)

        vn = float(np.dot(_relative_velocity(c, ra, rb), c.normal))
        bounce = 0.0
        if vn < -RESTITUTION_THRESHOLD:
            bounce = -min(c.a.material.restitution, c.b.material.restitution) * vn

        push = (baumgarte_beta / dt) * max(c.penetration - SLOP, 0.0)
        c.bias = min(push, MAX_BIAS) + bounce


def solve_contact_pgs(contact: Contact) -> None:
    """One Sequential Impulse pass over a contact: normal, then friction."""
    c = contact
    if c.mass_normal == 0.0:
        return
    ra, rb = _arms(c)
    n = c.normal

    # Normal: drive the separating velocity toward the bias, never pull.
    vn = float(np.dot(_relative_velocity(c, ra, rb), n))
    total = max(c.jn_accum + c.mass_normal * (c.bias - vn), 0.0)
    _apply_impulse(c, ra, rb, (total - c.jn_accum) * n)
    c.jn_accum = total

    # Friction: cancel sliding, bounded by the Coulomb cone.
    rv = _relative_velocity(c, ra, rb)
    slide = rv - float(np.dot(rv, n)) * n
    speed = float(np.linalg.norm(slide))
    if speed < 1e-12:
        return
    t = slide / speed
    limit = c.friction * c.jn_accum
    total_t = float(np.clip(c.jt_accum - _effective_mass(c, ra, rb, t) * speed, -limit, limit))
    _apply_impulse(c, ra, rb, (total_t - c.jt_accum) * t)
    c.jt_accum = total_t


def resolve_penetration(contact: Contact, percent: float = 0.8) -> None:
    """
    Linear position projection along the contact normal.

    Moves the bodies apart in proportion to their inverse masses so that
    `percent` of the penetration beyond SLOP is removed. Static bodies
    never move.
    """
    inv_sum = contact.a.inv_mass + contact.b.inv_mass
    depth = max(contact.penetration - SLOP, 0.0)
    if inv_sum <= 0.0 or depth == 0.0:
        return
    shift = (percent * depth / inv_sum) * contact.normal
    contact.a.position = contact.a.position - shift * contact.a.inv_mass
    contact.b.position = contact.b.position + shift * contact.b.inv_mass
