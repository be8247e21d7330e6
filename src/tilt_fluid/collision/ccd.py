# MIT License (see LICENSE)
"""
Continuous wall test for fast particles.

Discrete contacts only see where a particle ends a step. A particle that
moved far enough to carry its center across a wall's axis gets a contact
normal pointing outward, and projection then pushes it the wrong way, out
of the box. Sweeping the center from its start-of-step position finds
those crossings so the particle can be put back on the side it came from.

Key concepts:
- TOI (Time of Impact): fraction of the step's motion, in [0, 1], at which
  the center reaches the wall axis.
- Side: the wall normal is oriented toward the start position, so it
  always points back into the region the particle left.
"""
from __future__ import annotations

import numpy as np


def segment_crossing(
    p0: np.ndarray,
    p1: np.ndarray,
    a: np.ndarray,
    b: np.ndarray,
) -> tuple[float, np.ndarray] | None:
    """
    Time at which a point moving from p0 to p1 crosses the segment a-b.

    Solves p0 + t*(p1 - p0) = a + u*(b - a) for t and u, both in [0, 1].

    Args:
        p0: Center at the start of the step as [x, y].
        p1: Center at the end of the step as [x, y].
        a: First wall endpoint.
        b: Second wall endpoint.

    Returns:
        (t, normal) where t is the time of impact and normal is the unit
        wall normal on p0's side, or None if the path does not cross.
        A path that starts exactly on the axis does not count as crossing.
    """
    edge = b - a
    length = float(np.linalg.norm(edge))
    if length < 1e-12:
        return None
    normal = np.array([-edge[1], edge[0]], dtype=np.float64) / length

    s0 = float(np.dot(p0 - a, normal))
    s1 = float(np.dot(p1 - a, normal))
    if s0 < 0.0:
        normal, s0, s1 = -normal, -s0, -s1
    # Must start strictly on one side and end on (or past) the other
    if s0 <= 0.0 or s1 > 0.0:
        return None

    t = s0 / (s0 - s1)
    hit = p0 + t * (p1 - p0)
    u = float(np.dot(hit - a, edge)) / (length * length)
    if not 0.0 <= u <= 1.0:
        return None
    return t, normal
