from __future__ import annotations

import math
from typing import Iterable

import numpy as np


def vector_magnitude(values: Iterable[float]) -> float:
    return float(np.linalg.norm(np.asarray(tuple(values), dtype=float)))


def tilt_angle_deg(y: float, z: float) -> float:
    # Rotation about the device x axis, 0° when z points along gravity
    return math.degrees(math.atan2(-y, z))


def ns_to_seconds(delta_ns: int) -> float:
    return delta_ns / 1_000_000_000.0


def rad_to_deg(value: float) -> float:
    return float(np.rad2deg(value))
