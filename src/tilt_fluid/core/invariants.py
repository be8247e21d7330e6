# MIT License (see LICENSE)
"""
Utilities for calculating physical invariants and conserved quantities.

Used for verifying simulation behavior and for the debug readout. These
work on (N, 2) particle arrays, and the per-body versions on RigidBody2D
lists for the world engine.
"""
from __future__ import annotations
import numpy as np

from ..types import RigidBody2D


def kinetic_energy(velocities: np.ndarray, masses: np.ndarray | float = 1.0) -> float:
    """
    Total translational kinetic energy, T = Σ 0.5 m v².

    Args:
        velocities: Velocities, shape (N, 2).
        masses: Per-particle masses (N,) or one shared mass.
    """
    v = np.asarray(velocities, dtype=np.float64)
    if v.size == 0:
        return 0.0
    v_sq = np.einsum("ij,ij->i", v, v)
    return float(0.5 * np.sum(np.asarray(masses, dtype=np.float64) * v_sq))


def linear_momentum(bodies: list[RigidBody2D]) -> np.ndarray:
    """
    Total linear momentum of the dynamic bodies, P = Σ m v.

    Returns:
        Momentum vector [Px, Py].
    """
    p = np.zeros(2, dtype=np.float64)
    for b in bodies:
        if b.mass <= 0:
            continue
        p += b.mass * b.velocity
    return p
