# MIT License (see LICENSE)
"""
Sensor input processing.

This subpackage provides:
    - KalmanFilter: 1-D smoother for one noisy sensor channel.
    - SensorFusion: three filters plus orientation, producing gravity and tilt.

Typical usage:
    from tilt_fluid.sensors import SensorFusion, MotionSample, handle_motion

    fusion = SensorFusion()
    handle_motion(fusion, MotionSample(ax=0.3, ay=-9.7), gravity_scale=1.0)
"""
from .kalman import KalmanFilter
from .fusion import (
    MotionSample,
    OrientationSample,
    SensorFusion,
    handle_motion,
    handle_orientation,
    tilt_radians,
    snapshot,
)

__all__ = [
    "KalmanFilter",
    "MotionSample",
    "OrientationSample",
    "SensorFusion",
    "handle_motion",
    "handle_orientation",
    "tilt_radians",
    "snapshot",
]
