from __future__ import annotations

from pathlib import Path
from typing import List

import matplotlib.pyplot as plt
import pandas as pd

from .models import ANGLE_LABEL, CADENCE_LABEL, RAW_LABEL, STEP_LABEL


def _plot_labelled_series(
    df: pd.DataFrame,
    labels: List[str],
    title: str,
    ylabel: str,
    output_path: Path,
) -> Path:
    plt.figure(figsize=(10, 4))
    have_any = False
    for label in labels:
        rows = df[df["label"] == label]
        if rows.empty:
            continue
        if label == STEP_LABEL:
            plt.scatter(rows["time_s"], rows["value"], label=label, color="tab:red", s=14, zorder=3)
        else:
            plt.plot(rows["time_s"], rows["value"], label=label, linewidth=1.0)
        have_any = True
    plt.title(title)
    plt.xlabel("Time [s]")
    plt.ylabel(ylabel)
    plt.grid(True, alpha=0.3)
    if have_any:
        plt.legend()
    plt.tight_layout()
    plt.savefig(output_path, dpi=200)
    plt.close()
    return output_path


def generate_session_plots(frame: pd.DataFrame, session_id: str, output_dir: Path) -> List[Path]:
    """Save one PNG per metric present in ``frame`` (a ``MeasurementLog.to_frame()``)."""
    output_paths: List[Path] = []
    if frame.empty:
        return output_paths

    present = set(frame["label"])

    if present & {RAW_LABEL, STEP_LABEL}:
        output_paths.append(
            _plot_labelled_series(
                frame,
                [RAW_LABEL, STEP_LABEL],
                "Acceleration magnitude and steps",
                "Magnitude [m/s²]",
                output_dir / f"{session_id}_magnitude.png",
            )
        )

    if CADENCE_LABEL in present:
        output_paths.append(
            _plot_labelled_series(
                frame,
                [CADENCE_LABEL],
                "Cadence vs Time",
                "Cadence [steps/min]",
                output_dir / f"{session_id}_cadence.png",
            )
        )

    if ANGLE_LABEL in present:
        output_paths.append(
            _plot_labelled_series(
                frame,
                [ANGLE_LABEL],
                "Orientation vs Time",
                "Angle [deg]",
                output_dir / f"{session_id}_orientation.png",
            )
        )

    return output_paths
