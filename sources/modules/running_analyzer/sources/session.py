"""
Session aggregation: routes every incoming sample to the detector or filter of
the active algorithm and publishes an immutable snapshot after each update.

The aggregator holds no lock. Callers serialise ``start``/``stop``/``reset``/
``ingest`` (one logical writer); ``snapshot()`` is safe from any thread since it
only returns the last published immutable value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .cadence import CadenceEstimator, ImpactClassifier
from .config import DEFAULT_PIPELINE_CONFIG, HISTORY_CAPACITY, PipelineConfig
from .history import HistoryRing, MeasurementLog
from .math_utils import ns_to_seconds, rad_to_deg, vector_magnitude
from .models import (
    ACCELERATION_CHANNELS,
    ANGLE_LABEL,
    CADENCE_LABEL,
    RAW_LABEL,
    STEP_LABEL,
    ZERO_VECTOR,
    AlgorithmMode,
    Channel,
    ImpactCounts,
    MeasurementRecord,
    OrientationAlgorithm,
    Sample,
    SessionPhase,
    SessionSnapshot,
    StepAlgorithm,
    StepEvent,
    Vector3,
    parse_mode,
    sample_problem,
)
from .orientation import ComplementaryFusionFilter, EwmaAngleFilter
from .step_detector import StepDetector


logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    session_start_ns: Optional[int] = None
    last_step_ns: Optional[int] = None
    last_gyro_ns: Optional[int] = None
    relative_ns: int = 0
    step_count: int = 0
    cadence: float = 0.0
    impact: ImpactCounts = field(default_factory=ImpactCounts)
    latest_acc: Optional[Vector3] = None
    latest_gyro: Optional[Vector3] = None
    latest_gravity: Optional[Vector3] = None
    angle: Optional[float] = None
    dropped_samples: int = 0


class SessionAggregator:
    def __init__(self, config: PipelineConfig = DEFAULT_PIPELINE_CONFIG, mode: AlgorithmMode | str | None = None):
        self.config = config
        self._mode = parse_mode(mode if mode is not None else config.default_mode)
        self._phase = SessionPhase.IDLE

        self.step_detector = StepDetector(config.step)
        self.cadence_estimator = CadenceEstimator(config.cadence)
        self.impact_classifier = ImpactClassifier(config.impact)
        self.ewma_filter = EwmaAngleFilter(config.orientation.ewma_alpha)
        self.fusion_filter = ComplementaryFusionFilter(config.orientation.fusion_beta)

        self.history = HistoryRing(HISTORY_CAPACITY)
        self.measurement_log = MeasurementLog()
        self._state = SessionState()
        self._snapshot = self._publish()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def mode(self) -> AlgorithmMode:
        return self._mode

    def set_mode(self, mode: AlgorithmMode | str) -> bool:
        """Select the algorithm for the next session. Rejected while measuring."""
        mode = parse_mode(mode)
        if self._phase is SessionPhase.MEASURING:
            logger.warning("Ignoring mode change to %s while a session is measuring", mode.value)
            return False
        self._mode = mode
        self._snapshot = self._publish()
        return True

    def start(self) -> bool:
        if self._phase is SessionPhase.MEASURING:
            logger.warning("Session already measuring, start ignored")
            return False
        self.reset()
        self._phase = SessionPhase.MEASURING
        self._snapshot = self._publish()
        logger.info("Session started with %s", self._mode.value)
        return True

    def stop(self) -> bool:
        if self._phase is SessionPhase.IDLE:
            logger.warning("No session is measuring, stop ignored")
            return False
        self._phase = SessionPhase.IDLE
        self._snapshot = self._publish()
        logger.info(
            "Session stopped: %d steps, %d records pending export",
            self._state.step_count,
            len(self.measurement_log),
        )
        return True

    def reset(self):
        """Re-zero counters, detector and filter memory, history and export log."""
        self.step_detector.reset()
        self.cadence_estimator.reset()
        self.ewma_filter.reset()
        self.fusion_filter.reset()
        self.history.clear()
        self.measurement_log.clear()
        self._state = SessionState()
        self._snapshot = self._publish()
        logger.debug("Session state reset")

    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    # ------------------------------------------------------------------
    # Sample routing
    # ------------------------------------------------------------------
    def ingest(self, sample: Sample) -> SessionSnapshot:
        if self._phase is not SessionPhase.MEASURING:
            logger.debug("Dropping %s sample, no session is measuring", sample.channel)
            return self._snapshot

        problem = sample_problem(sample)
        if problem is not None:
            self._state.dropped_samples += 1
            logger.warning("Dropping malformed sample: %s", problem)
            self._snapshot = self._publish()
            return self._snapshot

        state = self._state
        if state.session_start_ns is None:
            # First sample only sets the zero point and the first step reference
            state.session_start_ns = sample.timestamp_ns
            state.last_step_ns = sample.timestamp_ns
            return self._snapshot

        state.relative_ns = sample.timestamp_ns - state.session_start_ns
        values = tuple(float(v) for v in sample.values)

        if sample.channel in ACCELERATION_CHANNELS:
            self._on_acceleration(sample.timestamp_ns, values)
        elif sample.channel is Channel.GYROSCOPE:
            self._on_gyroscope(sample.timestamp_ns, values)
        elif sample.channel is Channel.GRAVITY:
            self._on_gravity(values)
        elif sample.channel is Channel.STEP_DETECTOR:
            self._on_hardware_step(sample.timestamp_ns)

        self._snapshot = self._publish()
        return self._snapshot

    def _on_acceleration(self, timestamp_ns: int, acc: Vector3):
        state = self._state
        state.latest_acc = acc
        magnitude = vector_magnitude(acc)

        if self._mode is StepAlgorithm.CUSTOM:
            impact = self.step_detector.detect(acc, state.latest_gyro or ZERO_VECTOR, timestamp_ns)
            if impact is not None:
                self._on_step(StepEvent(timestamp_ns, impact))
                self._record(magnitude, STEP_LABEL)
                return
        self._record(magnitude, RAW_LABEL)

    def _on_step(self, event: StepEvent):
        self._count_step(event.timestamp_ns)
        level = self.impact_classifier.classify(event.impact_magnitude)
        self._state.impact = self._state.impact.incremented(level)

    def _on_hardware_step(self, timestamp_ns: int):
        if self._mode is not StepAlgorithm.HARDWARE:
            return
        self._count_step(timestamp_ns)
        self._record(self._state.cadence, CADENCE_LABEL)

    def _count_step(self, timestamp_ns: int):
        state = self._state
        state.step_count += 1
        cadence = self.cadence_estimator.update(timestamp_ns, state.last_step_ns)
        if cadence is not None:
            state.cadence = cadence
            state.last_step_ns = timestamp_ns

    def _on_gyroscope(self, timestamp_ns: int, gyro: Vector3):
        state = self._state
        state.latest_gyro = gyro
        if self._mode is not OrientationAlgorithm.COMPLEMENTARY_FUSION:
            return

        previous_ns = state.last_gyro_ns
        if previous_ns is None:
            state.last_gyro_ns = timestamp_ns
            return
        dt_s = ns_to_seconds(timestamp_ns - previous_ns)
        if dt_s <= 0:
            logger.warning("Skipping gyroscope sample with non-positive dt (%.6f s)", dt_s)
            return
        state.last_gyro_ns = timestamp_ns
        if state.latest_acc is None:
            return

        acc = state.latest_acc
        state.angle = self.fusion_filter.calculate(acc[1], acc[2], rad_to_deg(gyro[0]), dt_s)
        self._record(state.angle, ANGLE_LABEL)

    def _on_gravity(self, gravity: Vector3):
        state = self._state
        state.latest_gravity = gravity
        if self._mode is OrientationAlgorithm.EWMA:
            state.angle = self.ewma_filter.calculate(gravity[1], gravity[2])
            self._record(state.angle, ANGLE_LABEL)

    def _record(self, value: float, label: str):
        record = MeasurementRecord(self._state.relative_ns, float(value), label)
        self.history.append(record)
        self.measurement_log.append(record)

    def _publish(self) -> SessionSnapshot:
        state = self._state
        return SessionSnapshot(
            phase=self._phase,
            mode=self._mode,
            step_count=state.step_count,
            cadence=state.cadence,
            impact=state.impact,
            latest_acc=state.latest_acc or ZERO_VECTOR,
            latest_gyro=state.latest_gyro or ZERO_VECTOR,
            latest_gravity=state.latest_gravity or ZERO_VECTOR,
            angle=state.angle,
            dropped_samples=state.dropped_samples,
            relative_timestamp_ns=state.relative_ns,
            history=self.history.snapshot(),
        )
