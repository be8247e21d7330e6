# MIT License (see LICENSE)
"""
Utility functions for vector math and numeric operations.

Low-level 2D vector helpers shared by the world engine, the fluid force
generators and touch handling. Vectors are numpy arrays of shape (2,)
unless stated otherwise.
"""
from __future__ import annotations

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Used throughout the codebase to ensure consistent numeric precision
    and allow tuple/list inputs for positions, velocities and rays.
    """
    return np.array(x, dtype=np.float64)


def norm2(v: np.ndarray) -> float:
    """Squared magnitude of a 2D vector. Avoids sqrt for performance."""
    return float(v[0] * v[0] + v[1] * v[1])


def unit(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """
    Return a unit (normalized) vector in the same direction as v.

    Returns zero vector if |v| < eps to avoid division by zero.
    """
    n = float(np.linalg.norm(v))
    if n < eps:
        return np.zeros_like(v, dtype=np.float64)
    return v / n


def cross2(a: np.ndarray, b: np.ndarray) -> float:
    """
    2D cross product (scalar result): a × b = ax*by - ay*bx.

    Positive result means b is counterclockwise from a.
    """
    return float(a[0] * b[1] - a[1] * b[0])


def closest_point_on_segment(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Closest point to p on the segment [a, b].

    Degenerate segments (a == b) collapse to the point a.
    """
    ab = b - a
    denom = norm2(ab)
    if denom < 1e-18:
        return a.copy()
    t = float(np.dot(p - a, ab)) / denom
    t = min(1.0, max(0.0, t))
    return a + t * ab
