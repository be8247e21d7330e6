# MIT License (see LICENSE)
"""
Force generators for the particle fluid.

Two families live here:

- Per-body generators used inside the world engine (gravity, air friction)
  that modify a RigidBody2D in place, like any classic force accumulator.
- Array generators used by the fluid physics step (viscosity damping,
  surface tension, jitter). These take (N, 2) numpy arrays of particle
  state and return new arrays, so the step can compute everything first
  and hand the results to the engine in one pass.

Key concepts:
- Forces are accumulated before integration and cleared after it.
- Surface tension is pairwise O(N²) work, vectorized in row blocks so
  memory stays bounded for a few thousand particles.
"""
from __future__ import annotations

import numpy as np

from ..constants import INTERACTION_RADIUS
from ..types import RigidBody2D

# Rows of the pairwise distance matrix processed at once.
_BLOCK_ROWS = 256


def apply_gravity(body: RigidBody2D, g: np.ndarray) -> None:
    """
    Apply gravitational force to a body: F = m * g.

    Has no effect on static bodies (mass <= 0).
    """
    if body.mass > 0:
        body.force += body.mass * g


def apply_air_friction(body: RigidBody2D) -> None:
    """
    Remove a fixed fraction of a body's velocity: v ← v · (1 - air_friction).

    Applied once per engine step, so the decay rate depends on step rate.
    """
    k = body.material.air_friction
    if k != 0.0 and body.mass > 0:
        body.velocity *= (1.0 - k)


def damp_velocities(velocities: np.ndarray, viscosity: float) -> np.ndarray:
    """
    Per-tick multiplicative viscosity damping: v ← v · (1 - viscosity).

    This is a per-tick rule, not a continuous drag law: the decay per
    second grows with the tick rate.

    Args:
        velocities: Particle velocities, shape (N, 2).
        viscosity: Fraction of velocity removed per tick, in [0, 1).

    Returns:
        The damped velocities as a new (N, 2) array.
    """
    return np.asarray(velocities, dtype=np.float64) * (1.0 - viscosity)


def surface_tension_forces(
    positions: np.ndarray,
    strength: float,
    radius: float = INTERACTION_RADIUS,
) -> np.ndarray:
    """
    Short-range pairwise attraction between particles.

    For every pair i < j at distance 0 < d < radius, with
    u = (p_j - p_i) / d and f = strength * (1 - d / radius),
    particle i receives +f·u and particle j receives -f·u (Newton's third
    law). Coincident pairs (d == 0) are skipped.

    Each particle's net force is the sum over all its partners, computed
    in row blocks of the distance matrix. The result is the same as the
    explicit pair loop.

    Args:
        positions: Particle positions, shape (N, 2).
        strength: Peak attraction (surface tension coefficient).
        radius: Interaction cutoff distance.

    Returns:
        Net force on each particle, shape (N, 2).
    """
    pos = np.asarray(positions, dtype=np.float64)
    n = len(pos)
    out = np.zeros((n, 2), dtype=np.float64)
    if n < 2 or strength == 0.0:
        return out

    for start in range(0, n, _BLOCK_ROWS):
        stop = min(start + _BLOCK_ROWS, n)
        # diff[k, j] = p_j - p_(start+k)
        diff = pos[None, :, :] - pos[start:stop, None, :]
        dist = np.sqrt(np.einsum("kjc,kjc->kj", diff, diff))
        mask = (dist > 0.0) & (dist < radius)
        safe = np.where(mask, dist, 1.0)
        mag = np.where(mask, strength * (1.0 - safe / radius), 0.0)
        out[start:stop] = np.einsum("kj,kjc->kc", mag / safe, diff)

    return out


def jitter_forces(rng: np.random.Generator, count: int, magnitude: float) -> np.ndarray:
    """
    Small random radial forces that keep particles from locking into a lattice.

    Each particle gets a force in a uniformly random direction with
    magnitude uniform in [0, magnitude].

    Returns:
        Forces of shape (count, 2); all zeros when magnitude is 0.
    """
    if magnitude <= 0.0 or count == 0:
        return np.zeros((count, 2), dtype=np.float64)
    theta = rng.uniform(0.0, 2.0 * np.pi, size=count)
    mag = rng.uniform(0.0, magnitude, size=count)
    return np.stack([mag * np.cos(theta), mag * np.sin(theta)], axis=1)
