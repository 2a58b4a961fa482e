"""
Step detection on the acceleration magnitude.

A step is a rising edge of the low-pass filtered magnitude through a fixed
threshold, accepted only while the gyroscope reports real motion and once the
refractory period since the previous step has elapsed.

Known limitation: if the smoothed signal stays above the threshold past the
refractory window, a second step in that window is never reported, because no
new rising edge occurs until the signal drops back below the threshold.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .config import StepDetectionParams
from .math_utils import vector_magnitude


logger = logging.getLogger(__name__)


class StepDetector:
    def __init__(self, params: StepDetectionParams = StepDetectionParams()):
        self.params = params
        self.reset()

    def reset(self):
        self.previous_magnitude = 0.0
        self.last_step_ns = 0
        self.smoothed_magnitude = self.params.gravity

    def detect(self, acc: Sequence[float], gyro: Sequence[float], timestamp_ns: int) -> Optional[float]:
        """
        Feed one accelerometer reading.

        Args:
            acc: Acceleration [x, y, z] (m/s²), finite
            gyro: Latest angular rate [x, y, z] (rad/s), finite
            timestamp_ns: Sample timestamp (ns)

        Returns:
            The smoothed magnitude (impact) when a step is confirmed, None otherwise
        """
        params = self.params
        raw_magnitude = vector_magnitude(acc)
        self.smoothed_magnitude += params.smoothing_alpha * (raw_magnitude - self.smoothed_magnitude)

        gyro_magnitude = vector_magnitude(gyro)
        dynamic_motion = gyro_magnitude > params.gyro_motion_threshold

        if raw_magnitude > params.peak_log_threshold:
            logger.debug(
                "Peak check: raw=%.2f smoothed=%.2f gyro=%.2f dynamic=%s",
                raw_magnitude,
                self.smoothed_magnitude,
                gyro_magnitude,
                dynamic_motion,
            )

        rising_edge = (
            self.smoothed_magnitude > params.step_threshold
            and self.previous_magnitude <= params.step_threshold
        )
        elapsed_ns = timestamp_ns - self.last_step_ns

        impact = None
        if dynamic_motion and rising_edge and elapsed_ns > params.refractory_ns:
            self.last_step_ns = timestamp_ns
            impact = self.smoothed_magnitude
            logger.debug("Step detected: impact=%.2f, %d ms since previous", impact, elapsed_ns // 1_000_000)

        self.previous_magnitude = self.smoothed_magnitude
        return impact
