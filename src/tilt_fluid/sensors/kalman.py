# MIT License (see LICENSE)
"""
One-dimensional Kalman filter for smoothing a single sensor channel.

With the default constants (identity model, Q >> R) the filter follows a
step change almost immediately while still shaving single-sample spikes:
for the samples [0, 10] it returns [0, ~9.9751].

Reference:
    https://en.wikipedia.org/wiki/Kalman_filter#Predict
"""
from __future__ import annotations
import math
from dataclasses import dataclass

from ..constants import KALMAN_A, KALMAN_B, KALMAN_C, KALMAN_Q, KALMAN_R


@dataclass
class KalmanFilter:
    """
    Recursive predict/correct estimator for one noisy scalar.

    Attributes:
        R: Measurement noise.
        Q: Process noise.
        A: State transition.
        B: Control input.
        C: Measurement model.
        x: Current estimate, None until the first sample.
        cov: Error covariance, None until the first sample.
    """
    R: float = KALMAN_R
    Q: float = KALMAN_Q
    A: float = KALMAN_A
    B: float = KALMAN_B
    C: float = KALMAN_C
    x: float | None = None
    cov: float | None = None

    def filter(self, measurement: float) -> float:
        """
        Fold one measurement into the estimate and return the new estimate.

        The first measurement initializes the filter. So does the first one
        after the estimate went NaN or infinite, so one bad sample cannot
        poison every later output.
        """
        if self.x is None or not math.isfinite(self.x):
            self.x = measurement / self.C
            self.cov = 1.0
            return self.x

        # Prediction
        pred_x = self.A * self.x + self.B
        pred_cov = self.A * self.A * self.cov + self.Q

        # Correction
        K = pred_cov * self.C / (self.C * pred_cov * self.C + self.R)
        self.x = pred_x + K * (measurement - self.C * pred_x)
        self.cov = pred_cov - K * self.C * pred_cov
        return self.x

    def reset(self) -> None:
        """Forget the estimate; the next sample re-initializes the filter."""
        self.x = None
        self.cov = None
