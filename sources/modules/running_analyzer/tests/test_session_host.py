import threading
import time

from sources.modules.running_analyzer.sources.models import OrientationAlgorithm, StepAlgorithm
from sources.modules.running_analyzer.sources.session import SessionAggregator
from sources.modules.running_analyzer.sources.session_host import SessionHost

from sensor_signals import acc, at, running_stream


def test_host_matches_direct_ingestion():
    stream = running_stream([100, 150, 200], 300)

    direct = SessionAggregator()
    direct.start()
    for sample in stream:
        direct.ingest(sample)
    direct.stop()

    host = SessionHost(queue_size=16)
    assert host.start()
    assert host.feed(stream) == len(stream)
    final = host.stop(timeout=5.0)

    assert not host.running
    assert final == direct.snapshot()
    assert final.step_count == 3


def test_submit_after_stop_is_refused():
    host = SessionHost()
    assert host.submit(acc(at(0))) is False
    host.start()
    host.stop(timeout=5.0)
    assert host.submit(acc(at(1))) is False


def test_mode_is_locked_while_running():
    host = SessionHost()
    host.start()
    assert host.set_mode(OrientationAlgorithm.EWMA) is False
    assert host.start() is False
    host.stop(timeout=5.0)
    assert host.set_mode(StepAlgorithm.HARDWARE) is True
    assert host.snapshot().mode is StepAlgorithm.HARDWARE


def test_second_stop_waits_for_timed_out_drain():
    host = SessionHost(SessionAggregator(mode=StepAlgorithm.HARDWARE), queue_size=50_000)
    host.start()
    host.feed(acc(at(i)) for i in range(20_000))

    host.stop(timeout=0.0)
    assert host.submit(acc(at(20_000))) is False
    final = host.stop(timeout=5.0)

    assert not host.running
    assert not final.measuring
    # Every queued sample except the zero point was ingested
    assert len(host.aggregator.measurement_log) == 20_000 - 1


def test_restart_after_timed_out_stop_starts_clean():
    stream = running_stream([100, 150, 200], 300)
    direct = SessionAggregator()
    direct.start()
    for sample in stream:
        direct.ingest(sample)
    direct.stop()

    host = SessionHost(queue_size=50_000)
    host.start()
    host.feed(acc(at(i)) for i in range(20_000))
    host.stop(timeout=0.0)

    assert host.start()
    assert host.snapshot().history == ()
    assert host.feed(stream) == len(stream)
    final = host.stop(timeout=5.0)

    assert final == direct.snapshot()
    assert len(host.aggregator.measurement_log) == len(stream) - 1


def test_restart_with_nothing_submitted_has_empty_log():
    host = SessionHost(queue_size=50_000)
    host.start()
    host.feed(acc(at(i)) for i in range(20_000))
    host.stop(timeout=0.0)

    host.start()
    final = host.stop(timeout=5.0)

    assert len(host.aggregator.measurement_log) == 0
    assert final.relative_timestamp_ns == 0


def test_every_accepted_sample_is_ingested_when_stop_races_submit():
    host = SessionHost(SessionAggregator(mode=StepAlgorithm.HARDWARE), queue_size=8)
    host.start()
    accepted = []

    def produce():
        for i in range(1_000_000):
            if not host.submit(acc(at(i))):
                break
            accepted.append(i)

    producer = threading.Thread(target=produce)
    producer.start()
    deadline = time.monotonic() + 5.0
    while len(accepted) < 100 and producer.is_alive() and time.monotonic() < deadline:
        time.sleep(0.001)

    host.stop(timeout=5.0)
    producer.join(timeout=5.0)

    assert not producer.is_alive()
    assert not host.running
    assert len(accepted) >= 100
    assert len(host.aggregator.measurement_log) == len(accepted) - 1
