"""
Running metrics package for phone motion sensors.

Modules:
    - config: constants & tunable parameters.
    - models: samples, algorithm modes, records and snapshots.
    - step_detector: threshold / refractory step detection.
    - cadence: cadence estimation and impact classification.
    - orientation: EWMA and complementary tilt filters.
    - session: per-sample aggregation into session snapshots.
    - session_host: threaded ingestion around one aggregator.
    - exporting: CSV export of the measurement log.
    - data_loading: utilities to read recorded sensor txt files.
    - run_session: CLI entry point for replaying recordings.
"""
