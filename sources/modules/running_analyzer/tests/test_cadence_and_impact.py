import pytest

from sources.modules.running_analyzer.sources.cadence import CadenceEstimator, ImpactClassifier
from sources.modules.running_analyzer.sources.config import ImpactParams
from sources.modules.running_analyzer.sources.models import ImpactLevel

SECOND = 1_000_000_000


def test_first_accepted_interval_sets_cadence():
    estimator = CadenceEstimator()
    assert estimator.update(SECOND // 2, 0) == pytest.approx(120.0)
    assert estimator.current == pytest.approx(120.0)


def test_short_interval_is_rejected():
    estimator = CadenceEstimator()
    assert estimator.update(200_000_000, 0) is None
    assert estimator.cadence is None
    assert estimator.current == 0.0


def test_interval_at_threshold_is_rejected():
    estimator = CadenceEstimator()
    assert estimator.update(250_000_000, 0) is None


def test_cadence_is_smoothed_with_equal_weights():
    estimator = CadenceEstimator()
    estimator.update(SECOND // 2, 0)  # 120 spm
    # 0.4 s -> 150 spm, halfway between
    assert estimator.update(SECOND // 2 + 400_000_000, SECOND // 2) == pytest.approx(135.0)


def test_rejected_interval_keeps_previous_cadence():
    estimator = CadenceEstimator()
    estimator.update(SECOND, 0)  # 60 spm
    assert estimator.update(SECOND + 100_000_000, SECOND) is None
    assert estimator.current == pytest.approx(60.0)


def test_reset_forgets_cadence():
    estimator = CadenceEstimator()
    estimator.update(SECOND, 0)
    estimator.reset()
    assert estimator.current == 0.0
    assert estimator.update(SECOND // 2, 0) == pytest.approx(120.0)


@pytest.mark.parametrize(
    "magnitude, level",
    [
        (12.99, ImpactLevel.LOW),
        (13.0, ImpactLevel.MEDIUM),
        (15.99, ImpactLevel.MEDIUM),
        (16.0, ImpactLevel.HIGH),
        (40.0, ImpactLevel.HIGH),
    ],
)
def test_impact_boundaries(magnitude, level):
    assert ImpactClassifier().classify(magnitude) is level


def test_impact_thresholds_are_configurable():
    classifier = ImpactClassifier(ImpactParams(low_upper=12.0, medium_upper=14.0))
    assert classifier.classify(12.5) is ImpactLevel.MEDIUM
    assert classifier.classify(14.0) is ImpactLevel.HIGH
