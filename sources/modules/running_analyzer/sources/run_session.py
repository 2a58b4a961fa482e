from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_PIPELINE_CONFIG, INPUT_DIR, PipelineConfig, ensure_output_dir, load_config
from .data_loading import iter_samples, list_sessions, load_recording
from .exporting import ExportResult, export_measurements
from .models import ALGORITHM_MODES, AlgorithmMode, SessionSnapshot, parse_mode
from .plotting import generate_session_plots
from .session import SessionAggregator


@dataclass
class ReplayResult:
    session_id: str
    snapshot: SessionSnapshot
    samples: int
    export: Optional[ExportResult] = None
    plots: List[Path] = field(default_factory=list)


def replay_session(
    session_id: str,
    mode: AlgorithmMode | str | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
    input_dir: Path | None = None,
    output_dir: Path | None = None,
    export: bool = False,
    make_plots: bool = False,
) -> ReplayResult:
    recording = load_recording(session_id, input_dir)
    aggregator = SessionAggregator(config=config, mode=mode)
    aggregator.start()

    samples = 0
    for sample in iter_samples(recording):
        aggregator.ingest(sample)
        samples += 1
    aggregator.stop()

    result = ReplayResult(session_id=session_id, snapshot=aggregator.snapshot(), samples=samples)

    if make_plots:
        plot_dir = ensure_output_dir(output_dir)
        result.plots = generate_session_plots(aggregator.measurement_log.to_frame(), session_id, plot_dir)
    if export:
        result.export = export_measurements(aggregator.measurement_log, output_dir)
    return result


def format_summary(result: ReplayResult) -> List[str]:
    snap = result.snapshot
    lines = [
        f"[RPA] Session {result.session_id} ({snap.mode.value}): {result.samples} samples",
        f"  Steps: {snap.step_count}  Cadence: {snap.cadence:.1f} spm",
        f"  Impact low/medium/high: {snap.impact.low}/{snap.impact.medium}/{snap.impact.high}",
    ]
    if snap.angle is not None:
        lines.append(f"  Final angle: {snap.angle:.2f} deg")
    if snap.dropped_samples:
        lines.append(f"  Dropped samples: {snap.dropped_samples}")
    return lines


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Replay recorded phone sensor sessions through the running metrics pipeline.")
    parser.add_argument(
        "--session",
        type=str,
        help="Session identifier, e.g. 2025-10-28-10-19-35. Default: most recent.",
    )
    parser.add_argument("--list-sessions", action="store_true", help="List available sessions and exit.")
    parser.add_argument("--all", action="store_true", help="Process every available session.")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ALGORITHM_MODES],
        default=None,
        help="Algorithm to run (default from config).",
    )
    parser.add_argument("--config", type=Path, help="YAML file overriding pipeline parameters.")
    parser.add_argument("--input-dir", type=Path, default=INPUT_DIR, help="Directory with recorded txt files.")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for CSV exports and plots.")
    parser.add_argument("--export", action="store_true", help="Export the measurement log to CSV.")
    parser.add_argument("--plot", action="store_true", help="Generate magnitude/cadence/orientation plots.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config) if args.config else DEFAULT_PIPELINE_CONFIG
    mode = parse_mode(args.mode) if args.mode else None

    sessions = list_sessions(args.input_dir)
    if not sessions:
        raise SystemExit(f"No sessions found inside {args.input_dir}.")

    if args.list_sessions:
        print("Available sessions:")
        for sess in sessions:
            print(f"  - {sess}")
        return

    if args.session and args.session not in sessions:
        raise SystemExit(f"Unknown session {args.session!r}. Use --list-sessions to see what is available.")

    target_sessions: List[str]
    if args.all:
        target_sessions = sessions
    else:
        target_sessions = [args.session or sessions[-1]]

    for sess in target_sessions:
        result = replay_session(
            sess,
            mode=mode,
            config=config,
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            export=args.export,
            make_plots=args.plot,
        )
        for line in format_summary(result):
            print(line)
        if result.export is not None:
            if result.export.ok:
                print(f"   CSV saved: {result.export.path}")
            else:
                print(f"   Export skipped: {result.export.outcome.value} {result.export.error or ''}".rstrip())
        for plot_path in result.plots:
            print(f"   Plot saved: {plot_path}")


if __name__ == "__main__":
    main()
