# MIT License (see LICENSE)
"""
Touch interaction: screen touches become pushes along a world-space ray.

A touch is normalized to device coordinates, turned into a ray by a
projector (normally supplied by the renderer), and every particle close to
that ray gets an impulse along the ray direction:

    impulse = touch_force * (1 - d / touch_radius) * direction     if d < touch_radius
    impulse = 0                                                    otherwise

where d is the distance from the ray to the particle at z = 0. The factor
falls to 0 continuously at the boundary. The impulses are applied as
engine forces and act on the next step.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import numpy as np

from .constants import CAMERA_FOV_DEG, CAMERA_Z, TOUCH_FORCE, TOUCH_RADIUS
from .session import SimulationState
from .util import f64, unit


@dataclass(frozen=True)
class Ray:
    """
    A half-line in 3D world space.

    Attributes:
        origin: Start point [x, y, z].
        direction: Unit direction [dx, dy, dz] (normalized on creation).
    """
    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", f64(self.origin))
        d = unit(f64(self.direction))
        if not np.any(d):
            raise ValueError("Ray direction must be non-zero")
        object.__setattr__(self, "direction", d)


@dataclass(frozen=True)
class Viewport:
    """On-screen rectangle of the rendering surface, in client pixels."""
    left: float
    top: float
    width: float
    height: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Viewport":
        """
        Build from a DOMRect-like mapping.

        Keys other than left/top/width/height (x, y, right, bottom, ...)
        are ignored; a missing or None value reads as 0.
        """
        def get(key: str) -> float:
            value = data.get(key)
            return 0.0 if value is None else float(value)

        return cls(left=get("left"), top=get("top"), width=get("width"), height=get("height"))

    @property
    def is_empty(self) -> bool:
        """True unless both width and height are positive."""
        return not (self.width > 0 and self.height > 0)


# (ndc_x, ndc_y) -> world-space ray
RayProjector = Callable[[float, float], Ray]


def normalize_touch(client_x: float, client_y: float, viewport: Viewport) -> tuple[float, float]:
    """
    Client pixel coordinates to normalized device coordinates in [-1, 1].

    Screen y grows downward, so it is flipped.

    Raises:
        ValueError: If the viewport has no area.
    """
    if viewport.is_empty:
        raise ValueError(f"Cannot normalize a touch on an empty viewport: {viewport}")
    x = ((client_x - viewport.left) / viewport.width) * 2.0 - 1.0
    y = -((client_y - viewport.top) / viewport.height) * 2.0 + 1.0
    return x, y


class PerspectiveRayProjector:
    """
    Rays from a perspective camera on the +z axis looking at the origin.

    Matches the default scene camera (75 degree vertical field of view,
    placed at z = 15), for hosts that do not bring their own projector.
    """

    def __init__(self, aspect: float = 1.0, fov_deg: float = CAMERA_FOV_DEG, camera_z: float = CAMERA_Z):
        if aspect <= 0:
            raise ValueError(f"aspect must be positive, got {aspect}")
        self.aspect = float(aspect)
        self.tan_half_fov = float(np.tan(np.deg2rad(fov_deg) / 2.0))
        self.origin = np.array([0.0, 0.0, camera_z], dtype=np.float64)

    def __call__(self, ndc_x: float, ndc_y: float) -> Ray:
        direction = np.array(
            [ndc_x * self.tan_half_fov * self.aspect, ndc_y * self.tan_half_fov, -1.0],
            dtype=np.float64,
        )
        return Ray(self.origin, direction)


def ray_distance_to_point(ray: Ray, point: np.ndarray) -> float:
    """
    Distance from a ray to a 3D point.

    If the point's projection falls behind the ray origin, the distance to
    the origin is returned.
    """
    p = f64(point)
    t = float(np.dot(p - ray.origin, ray.direction))
    if t < 0.0:
        return float(np.linalg.norm(p - ray.origin))
    return float(np.linalg.norm(ray.origin + t * ray.direction - p))


def ray_distances(ray: Ray, positions: np.ndarray) -> np.ndarray:
    """Vectorized ray_distance_to_point for (N, 2) positions lifted to z = 0."""
    pos = np.asarray(positions, dtype=np.float64)
    pts = np.zeros((len(pos), 3), dtype=np.float64)
    pts[:, :2] = pos
    rel = pts - ray.origin
    t = np.maximum(rel @ ray.direction, 0.0)
    closest = ray.origin + t[:, None] * ray.direction
    return np.linalg.norm(closest - pts, axis=1)


def touch_impulses(
    positions: np.ndarray,
    ray: Ray,
    touch_force: float = TOUCH_FORCE,
    touch_radius: float = TOUCH_RADIUS,
) -> np.ndarray:
    """
    Impulse on each particle from a touch ray.

    Returns:
        Array of shape (N, 2); rows are zero for particles at or beyond
        touch_radius from the ray.
    """
    d = ray_distances(ray, positions)
    factor = np.where(d < touch_radius, touch_force * (1.0 - d / touch_radius), 0.0)
    return factor[:, None] * ray.direction[:2]


def apply_touch(
    state: SimulationState,
    screen_x: float,
    screen_y: float,
    viewport: Viewport | None,
    projector: RayProjector,
) -> int:
    """
    Push the particles near a touch.

    Args:
        state: Session to act on.
        screen_x, screen_y: Client coordinates inside viewport, or NDC if
                            viewport is None.
        viewport: Surface rectangle used to normalize the coordinates.
        projector: Turns NDC into a world-space ray.

    Returns:
        Number of particles that received an impulse; 0 for a touch on an
        empty viewport.
    """
    if viewport is not None and viewport.is_empty:
        return 0
    if viewport is not None:
        ndc_x, ndc_y = normalize_touch(screen_x, screen_y, viewport)
    else:
        ndc_x, ndc_y = float(screen_x), float(screen_y)

    ray = projector(ndc_x, ndc_y)
    engine = state.engine
    positions = engine.positions(state.particles)
    impulses = touch_impulses(positions, ray, state.config.touch_force, state.config.touch_radius)

    pushed = 0
    for h, p, f in zip(state.particles, positions, impulses):
        if f[0] == 0.0 and f[1] == 0.0:
            continue
        engine.apply_force(h, p, float(f[0]), float(f[1]))
        pushed += 1
    return pushed
