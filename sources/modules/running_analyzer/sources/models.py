"""
Value types shared by the pipeline: samples, algorithm modes, records and snapshots.

Everything handed to a reader is immutable (frozen dataclasses holding tuples),
so a snapshot can never change after it was published.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


Vector3 = Tuple[float, float, float]
ZERO_VECTOR: Vector3 = (0.0, 0.0, 0.0)

# Labels used in the history ring and the export log
RAW_LABEL = "Raw"
STEP_LABEL = "Step"
CADENCE_LABEL = "Cadence"
ANGLE_LABEL = "Angle"


class Channel(Enum):
    ACCELEROMETER = "accelerometer"
    LINEAR_ACCELERATION = "linear_acceleration"
    GYROSCOPE = "gyroscope"
    GRAVITY = "gravity"
    STEP_DETECTOR = "step_detector"

    @property
    def arity(self) -> int:
        return 0 if self is Channel.STEP_DETECTOR else 3


ACCELERATION_CHANNELS = (Channel.ACCELEROMETER, Channel.LINEAR_ACCELERATION)


class StepAlgorithm(Enum):
    CUSTOM = "custom_step_detector"
    HARDWARE = "hardware_step_detector"


class OrientationAlgorithm(Enum):
    EWMA = "ewma_orientation"
    COMPLEMENTARY_FUSION = "complementary_fusion_orientation"


AlgorithmMode = Union[StepAlgorithm, OrientationAlgorithm]
ALGORITHM_MODES: Tuple[AlgorithmMode, ...] = tuple(StepAlgorithm) + tuple(OrientationAlgorithm)


def parse_mode(mode: AlgorithmMode | str) -> AlgorithmMode:
    """Resolve a mode name (e.g. ``"ewma_orientation"``) or pass a mode through."""
    if isinstance(mode, (StepAlgorithm, OrientationAlgorithm)):
        return mode
    for candidate in ALGORITHM_MODES:
        if candidate.value == mode:
            return candidate
    names = ", ".join(m.value for m in ALGORITHM_MODES)
    raise ValueError(f"Unknown algorithm mode {mode!r}. Expected one of: {names}")


class ImpactLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Sample:
    channel: Channel
    timestamp_ns: int
    values: Tuple[float, ...] = ()


def sample_problem(sample: Sample) -> Optional[str]:
    """Describe why a sample cannot enter the pipeline, or None when it is usable."""
    if not isinstance(sample.channel, Channel):
        return f"unknown channel {sample.channel!r}"
    if isinstance(sample.timestamp_ns, bool) or not isinstance(sample.timestamp_ns, int):
        return f"timestamp must be an integer nanosecond count, got {sample.timestamp_ns!r}"
    arity = sample.channel.arity
    if arity == 0:
        return None
    if len(sample.values) != arity:
        return f"expected {arity} values, got {len(sample.values)}"
    try:
        finite = all(math.isfinite(v) for v in sample.values)
    except TypeError:
        return f"non-numeric values {sample.values!r}"
    if not finite:
        return f"non-finite values {sample.values!r}"
    return None


@dataclass(frozen=True)
class StepEvent:
    timestamp_ns: int
    impact_magnitude: float


@dataclass(frozen=True)
class MeasurementRecord:
    relative_timestamp_ns: int
    value: float
    label: str


@dataclass(frozen=True)
class ImpactCounts:
    low: int = 0
    medium: int = 0
    high: int = 0

    @property
    def total(self) -> int:
        return self.low + self.medium + self.high

    def incremented(self, level: ImpactLevel) -> "ImpactCounts":
        if level is ImpactLevel.LOW:
            return ImpactCounts(self.low + 1, self.medium, self.high)
        if level is ImpactLevel.MEDIUM:
            return ImpactCounts(self.low, self.medium + 1, self.high)
        return ImpactCounts(self.low, self.medium, self.high + 1)


class SessionPhase(Enum):
    IDLE = "idle"
    MEASURING = "measuring"


@dataclass(frozen=True)
class SessionSnapshot:
    phase: SessionPhase
    mode: AlgorithmMode
    step_count: int = 0
    cadence: float = 0.0
    impact: ImpactCounts = ImpactCounts()
    latest_acc: Vector3 = ZERO_VECTOR
    latest_gyro: Vector3 = ZERO_VECTOR
    latest_gravity: Vector3 = ZERO_VECTOR
    angle: Optional[float] = None
    dropped_samples: int = 0
    relative_timestamp_ns: int = 0
    history: Tuple[MeasurementRecord, ...] = ()

    @property
    def measuring(self) -> bool:
        return self.phase is SessionPhase.MEASURING
