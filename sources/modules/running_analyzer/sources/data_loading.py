from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List

import numpy as np
import pandas as pd

from .config import INPUT_DIR
from .models import Channel, Sample


SENSOR_METADATA = {
    Channel.ACCELEROMETER: {
        "prefix": "FILE_SENSOR_ACC",
        "columns": ["timestamp", "x", "y", "z"],
    },
    Channel.LINEAR_ACCELERATION: {
        "prefix": "FILE_LINEAR_ACC",
        "columns": ["timestamp", "x", "y", "z"],
    },
    Channel.GYROSCOPE: {
        "prefix": "FILE_GYRO",
        "columns": ["timestamp", "x", "y", "z"],
    },
    Channel.GRAVITY: {
        "prefix": "FILE_GRAVITY",
        "columns": ["timestamp", "x", "y", "z"],
    },
    Channel.STEP_DETECTOR: {
        "prefix": "FILE_STEP_DETECTOR",
        "columns": ["timestamp"],
    },
}


@dataclass
class RecordingData:
    session_id: str
    sensors: Dict[Channel, pd.DataFrame]

    def get(self, channel: Channel) -> pd.DataFrame:
        return self.sensors.get(channel, pd.DataFrame(columns=SENSOR_METADATA[channel]["columns"]))

    @property
    def sample_count(self) -> int:
        return sum(len(df) for df in self.sensors.values())


def list_sessions(input_dir: Path | None = None) -> List[str]:
    input_dir = input_dir or INPUT_DIR
    sessions = set()
    for metadata in SENSOR_METADATA.values():
        prefix = metadata["prefix"]
        for file_path in input_dir.glob(f"{prefix}*.txt"):
            session = file_path.stem[len(prefix):]
            if session:
                sessions.add(session)
    return sorted(sessions)


def _load_sensor_file(channel: Channel, session_id: str, input_dir: Path) -> pd.DataFrame:
    metadata = SENSOR_METADATA[channel]
    path = input_dir / f"{metadata['prefix']}{session_id}.txt"
    if not path.exists():
        return pd.DataFrame(columns=metadata["columns"])
    df = pd.read_csv(path, header=None, names=metadata["columns"], usecols=range(len(metadata["columns"])))
    for col in metadata["columns"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    # Rows without a usable timestamp cannot be placed in the stream
    df = df.dropna(subset=["timestamp"])
    df["timestamp"] = df["timestamp"].astype(np.int64)
    return df.drop_duplicates(subset="timestamp").reset_index(drop=True)


def load_recording(session_id: str, input_dir: Path | None = None) -> RecordingData:
    input_dir = input_dir or INPUT_DIR
    sensors = {channel: _load_sensor_file(channel, session_id, input_dir) for channel in SENSOR_METADATA}
    return RecordingData(session_id=session_id, sensors=sensors)


def iter_samples(recording: RecordingData) -> Iterator[Sample]:
    """
    Merge all channels into one stream ordered by timestamp.

    The sort is stable: samples sharing a timestamp keep channel order.
    Values are passed through as read; NaN cells are left for the consumer to reject.
    """
    frames = []
    values_by_channel = {}
    for channel, metadata in SENSOR_METADATA.items():
        df = recording.get(channel)
        if df.empty:
            continue
        value_cols = [c for c in metadata["columns"] if c != "timestamp"]
        values_by_channel[channel] = df[value_cols].to_numpy(dtype=float)
        frames.append(
            pd.DataFrame(
                {
                    "timestamp": df["timestamp"].to_numpy(dtype=np.int64),
                    "channel": [channel] * len(df),
                    "row": np.arange(len(df)),
                }
            )
        )

    if not frames:
        return

    merged = pd.concat(frames, ignore_index=True).sort_values("timestamp", kind="mergesort")
    for timestamp, channel, row in zip(merged["timestamp"], merged["channel"], merged["row"]):
        values = values_by_channel[channel][row]
        yield Sample(channel=channel, timestamp_ns=int(timestamp), values=tuple(float(v) for v in values))
