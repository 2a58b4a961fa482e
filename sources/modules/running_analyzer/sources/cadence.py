"""
Cadence estimation and impact classification for detected steps.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import CadenceParams, ImpactParams
from .math_utils import ns_to_seconds
from .models import ImpactLevel


logger = logging.getLogger(__name__)


class CadenceEstimator:
    """Exponentially smoothed steps per minute from step-to-step intervals."""

    def __init__(self, params: CadenceParams = CadenceParams()):
        self.params = params
        self.cadence: Optional[float] = None

    def reset(self):
        self.cadence = None

    @property
    def current(self) -> float:
        return self.cadence if self.cadence is not None else 0.0

    def update(self, event_ns: int, prior_event_ns: int) -> Optional[float]:
        """
        Returns the new smoothed cadence, or None when the interval is rejected.

        The caller keeps the reference timestamp and should move it to
        ``event_ns`` only when a value is returned.
        """
        dt_s = ns_to_seconds(event_ns - prior_event_ns)
        if dt_s <= self.params.min_interval_s:
            logger.debug("Rejected step interval of %.3f s", dt_s)
            return None

        spm = 60.0 / dt_s
        if self.cadence is None:
            self.cadence = spm
        else:
            weight = self.params.smoothing_weight
            self.cadence = weight * self.cadence + (1.0 - weight) * spm
        return self.cadence


class ImpactClassifier:
    def __init__(self, params: ImpactParams = ImpactParams()):
        self.params = params

    def classify(self, magnitude: float) -> ImpactLevel:
        if magnitude < self.params.low_upper:
            return ImpactLevel.LOW
        if magnitude < self.params.medium_upper:
            return ImpactLevel.MEDIUM
        return ImpactLevel.HIGH
