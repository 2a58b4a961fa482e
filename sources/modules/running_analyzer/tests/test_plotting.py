from sources.modules.running_analyzer.sources.history import MeasurementLog
from sources.modules.running_analyzer.sources.models import MeasurementRecord
from sources.modules.running_analyzer.sources.plotting import generate_session_plots


def test_one_plot_per_metric(tmp_path):
    log = MeasurementLog()
    for i in range(20):
        log.append(MeasurementRecord(i * 10_000_000, 9.8, "Raw"))
    log.append(MeasurementRecord(200_000_000, 25.0, "Step"))
    log.append(MeasurementRecord(210_000_000, 12.5, "Angle"))

    paths = generate_session_plots(log.to_frame(), "demo", tmp_path)

    assert sorted(p.name for p in paths) == ["demo_magnitude.png", "demo_orientation.png"]
    assert all(p.stat().st_size > 0 for p in paths)


def test_empty_frame_makes_no_plots(tmp_path):
    assert generate_session_plots(MeasurementLog().to_frame(), "demo", tmp_path) == []
