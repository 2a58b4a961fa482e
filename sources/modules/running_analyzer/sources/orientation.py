"""
Orientation Filters
===================
Two alternative single-axis tilt estimators:
- EWMA: low-pass of the tilt derived from the gravity vector
- Complementary: integrated gyro rate (HIGH frequency) corrected by
  accelerometer tilt (LOW frequency) to cancel drift

Angles are in degrees, tilt measured about the device x axis.
"""

from __future__ import annotations

from .math_utils import tilt_angle_deg


class EwmaAngleFilter:
    """Exponentially weighted moving average over the gravity tilt angle."""

    def __init__(self, alpha: float = 0.2):
        self.alpha = alpha
        self.filtered = 0.0

    def reset(self):
        self.filtered = 0.0

    def calculate(self, gravity_y: float, gravity_z: float) -> float:
        raw_angle = tilt_angle_deg(gravity_y, gravity_z)
        self.filtered = self.alpha * raw_angle + (1.0 - self.alpha) * self.filtered
        return self.filtered


class ComplementaryFusionFilter:
    """
    Complementary filter that blends the two sources:

    gyro integration -> short-term angle changes
    accelerometer tilt -> long-term reference, removes integration drift
    """

    def __init__(self, beta: float = 0.98):
        """
        Args:
            beta: Weight of the gyro-integrated angle (0..1)
        """
        self.beta = beta
        self.fused = 0.0

    def reset(self):
        self.fused = 0.0

    def calculate(self, acc_y: float, acc_z: float, gyro_rate_dps: float, dt_s: float) -> float:
        """
        Args:
            acc_y, acc_z: Latest accelerometer reading (m/s²)
            gyro_rate_dps: Angular rate about the tilt axis (deg/s)
            dt_s: Time since the previous gyroscope sample (s)

        Returns:
            Fused angle (deg); unchanged when dt_s is not positive
        """
        if dt_s <= 0:
            return self.fused

        acc_angle = tilt_angle_deg(acc_y, acc_z)
        gyro_angle = self.fused + gyro_rate_dps * dt_s
        self.fused = self.beta * gyro_angle + (1.0 - self.beta) * acc_angle
        return self.fused
