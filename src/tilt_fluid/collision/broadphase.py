# MIT License (see LICENSE)
"""
Broadphase collision detection using a uniform spatial hash.

Every body is hashed into the grid cells its axis-aligned bounding box
(AABB) touches; two bodies become a candidate pair when they share a
cell. The narrowphase then decides whether a candidate really touches.

In the fluid world almost every body is a small particle covering one to
four cells, while the four container walls each span a whole row or
column of cells. Walls are static, so wall-wall pairs are never reported.
"""
from __future__ import annotations
from collections import defaultdict
from itertools import combinations

import numpy as np

from ..types import RigidBody2D, Circle, Segment

AABB = tuple[float, float, float, float]


def aabb_for_body(body: RigidBody2D) -> AABB:
    """Axis-aligned bounding box (min_x, min_y, max_x, max_y)."""
    if isinstance(body.shape, Circle):
        r = body.shape.radius
        x, y = body.position
        return (x - r, y - r, x + r, y + r)

    if isinstance(body.shape, Segment):
        a, b = body.segment_endpoints()
        r = body.shape.radius
        lo = np.minimum(a, b) - r
        hi = np.maximum(a, b) + r
        return (lo[0], lo[1], hi[0], hi[1])

    raise TypeError(f"Unknown shape type: {type(body.shape)}")


class SpatialHashBroadphase:
    """
    Uniform grid of square cells keyed by integer (ix, iy).

    Attributes:
        cell: Edge length of a grid cell in world units. About four
              particle radii keeps most particles in a single cell.

    Example:
        broadphase = SpatialHashBroadphase(cell_size=0.5)
        for a, b in broadphase.pairs(world.bodies):
            ...
    """

    def __init__(self, cell_size: float = 1.0) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell = float(cell_size)

    def cell_range(self, aabb: AABB) -> tuple[range, range]:
        """Column and row index ranges covered by an AABB."""
        x0, y0, x1, y1 = (float(v) / self.cell for v in aabb)
        return (
            range(int(np.floor(x0)), int(np.floor(x1)) + 1),
            range(int(np.floor(y0)), int(np.floor(y1)) + 1),
        )

    def build_grid(self, bodies: list[RigidBody2D]) -> dict[tuple[int, int], list[RigidBody2D]]:
        """Cell -> bodies touching it, each list in insertion order."""
        grid: dict[tuple[int, int], list[RigidBody2D]] = defaultdict(list)
        for body in bodies:
            cols, rows = self.cell_range(aabb_for_body(body))
            for ix in cols:
                for iy in rows:
                    grid[(ix, iy)].append(body)
        return grid

    def pairs(self, bodies: list[RigidBody2D]) -> list[tuple[RigidBody2D, RigidBody2D]]:
        """
        Candidate pairs among bodies, each reported once.

        Raises:
            ValueError: If a body has a non-finite position.

        Returns:
            (a, b) tuples with a.id < b.id, sorted by ids so the solver
            visits contacts in the same order every step.
        """
        found: dict[tuple[int, int], tuple[RigidBody2D, RigidBody2D]] = {}
        for members in self.build_grid(bodies).values():
            if len(members) < 2:
                continue
            for a, b in combinations(members, 2):
                if a.is_static and b.is_static:
                    continue
                if a.id > b.id:
                    a, b = b, a
                found.setdefault((a.id, b.id), (a, b))
        return [found[key] for key in sorted(found)]
