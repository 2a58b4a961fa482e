"""
Synthetic sensor streams for the pipeline tests.

Timestamps start at 10 s so the first step is never inside the detector's
initial refractory window.
"""

from sources.modules.running_analyzer.sources.models import Channel, Sample

T0_NS = 10_000_000_000
SAMPLE_PERIOD_NS = 10_000_000  # 100 Hz
BASELINE = 9.8
MOVING_GYRO = (1.0, 0.0, 0.0)  # rad/s, above the motion gate


def at(index, t0=T0_NS, period=SAMPLE_PERIOD_NS):
    return t0 + index * period


def acc(timestamp_ns, magnitude=BASELINE):
    return Sample(Channel.ACCELEROMETER, timestamp_ns, (0.0, 0.0, float(magnitude)))


def gyro(timestamp_ns, values=MOVING_GYRO):
    return Sample(Channel.GYROSCOPE, timestamp_ns, tuple(float(v) for v in values))


def gravity(timestamp_ns, y, z):
    return Sample(Channel.GRAVITY, timestamp_ns, (0.0, float(y), float(z)))


def hardware_step(timestamp_ns):
    return Sample(Channel.STEP_DETECTOR, timestamp_ns)


def spike_magnitudes(n_samples, spike_indices, spike=30.0, baseline=BASELINE):
    """Flat baseline with single-sample spikes at the given indices."""
    spikes = set(spike_indices)
    return [spike if i in spikes else baseline for i in range(n_samples)]


def running_stream(spike_indices, n_samples, spike=30.0):
    """
    Zero-point sample, one gyro reading, then accelerometer samples.

    The gyro stays cached by the aggregator, so every accelerometer sample
    passes the motion gate.
    """
    samples = [gyro(at(0)), gyro(at(0) + 1)]
    for i, magnitude in enumerate(spike_magnitudes(n_samples, spike_indices, spike=spike), start=1):
        samples.append(acc(at(i), magnitude))
    return samples
