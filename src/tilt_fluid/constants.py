# MIT License (see LICENSE)
"""
Default constants used throughout the simulation.

Physics coefficients follow the tuning of the fluid toy; the sensor
filter defaults trust new measurements quickly (Q >> R) so the gravity
field stays responsive to device tilt.
"""
from __future__ import annotations

# Scalar Kalman filter defaults (identity dynamics and measurement model).
KALMAN_R: float = 0.01   # measurement noise
KALMAN_Q: float = 3.0    # process noise
KALMAN_A: float = 1.0    # state transition
KALMAN_B: float = 0.0    # control input
KALMAN_C: float = 1.0    # measurement

# Range of the pairwise surface tension attraction.
INTERACTION_RADIUS: float = 2.0

# Touch interaction: peak impulse and radius around the touch ray.
TOUCH_FORCE: float = 0.005
TOUCH_RADIUS: float = 2.0

# Upper bound for the per-particle random jitter force.
MAX_JITTER: float = 1e-4

# Default perspective camera used to turn touches into rays.
CAMERA_FOV_DEG: float = 75.0
CAMERA_Z: float = 15.0
