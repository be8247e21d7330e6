# MIT License (see LICENSE)
"""
Sensor fusion: filtered acceleration to world gravity, raw orientation to tilt.

Motion and orientation events are folded into a SensorFusion container by
free functions. State is last-value-wins: the physics step reads whatever
gravity the most recent motion event produced.

Gravity derivation (2D):
    gx =  filtered_ax * gravity_scale
    gy = -filtered_ay * gravity_scale   (device "down" lowers screen y)

The z axis is filtered and kept but does not feed 2D gravity.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np

from .kalman import KalmanFilter


def _axis(payload: Mapping[str, Any], key: str) -> float:
    """Read one numeric axis; a missing, None, NaN or infinite value reads as 0."""
    value = payload.get(key)
    if value is None:
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


@dataclass(frozen=True)
class MotionSample:
    """Raw acceleration including gravity, one value per device axis."""
    ax: float = 0.0
    ay: float = 0.0
    az: float = 0.0

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> "MotionSample | None":
        """
        Build a sample from a motion event.

        Accepts either flat ``ax/ay/az`` keys or a browser-style
        ``accelerationIncludingGravity: {x, y, z}`` payload. Missing or
        non-finite axes become 0. Returns None when the event carries no
        acceleration at all.
        """
        nested = event.get("accelerationIncludingGravity")
        if nested is not None:
            return cls(_axis(nested, "x"), _axis(nested, "y"), _axis(nested, "z"))
        if not any(k in event for k in ("ax", "ay", "az")):
            return None
        return cls(_axis(event, "ax"), _axis(event, "ay"), _axis(event, "az"))


@dataclass(frozen=True)
class OrientationSample:
    """Device orientation in degrees."""
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> "OrientationSample":
        return cls(_axis(event, "alpha"), _axis(event, "beta"), _axis(event, "gamma"))


@dataclass
class SensorFusion:
    """
    Sensor state shared between event handlers and the physics step.

    Attributes:
        filters: One KalmanFilter per acceleration axis ("x", "y", "z").
        acceleration: Last filtered acceleration [ax, ay, az].
        orientation: Last raw orientation sample.
        gravity: Current world gravity [gx, gy]; (0, 0) until motion arrives.
    """
    filters: dict[str, KalmanFilter] = field(
        default_factory=lambda: {axis: KalmanFilter() for axis in ("x", "y", "z")}
    )
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    orientation: OrientationSample = field(default_factory=OrientationSample)
    gravity: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))


def handle_motion(fusion: SensorFusion, sample: MotionSample, gravity_scale: float) -> np.ndarray:
    """
    Filter one acceleration sample and recompute gravity.

    Returns:
        The new gravity vector (also stored in fusion.gravity).
    """
    fx = fusion.filters["x"].filter(sample.ax)
    fy = fusion.filters["y"].filter(sample.ay)
    fz = fusion.filters["z"].filter(sample.az)
    fusion.acceleration = np.array([fx, fy, fz], dtype=np.float64)
    fusion.gravity = np.array([fx * gravity_scale, -fy * gravity_scale], dtype=np.float64)
    return fusion.gravity


def handle_orientation(fusion: SensorFusion, sample: OrientationSample) -> None:
    """Store raw orientation; no filtering is applied."""
    fusion.orientation = sample


def tilt_radians(fusion: SensorFusion) -> tuple[float, float, float]:
    """
    Container rotation derived from orientation.

    Returns:
        (rx, ry, rz): beta about X, gamma about Y and alpha about Z, in radians.
    """
    o = fusion.orientation
    rx, ry, rz = np.deg2rad([o.beta, o.gamma, o.alpha])
    return float(rx), float(ry), float(rz)


def snapshot(fusion: SensorFusion) -> dict[str, Any]:
    """Plain-data view of the sensor state for debug display."""
    o = fusion.orientation
    return {
        "acceleration": fusion.acceleration.tolist(),
        "orientation": {"alpha": o.alpha, "beta": o.beta, "gamma": o.gamma},
        "gravity": fusion.gravity.tolist(),
    }
