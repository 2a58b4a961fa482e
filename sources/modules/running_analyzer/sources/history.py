"""
In-memory measurement storage: the bounded chart ring and the export log.
"""
from __future__ import annotations

from collections import deque
from typing import List, Tuple

import pandas as pd

from .config import HISTORY_CAPACITY
from .models import MeasurementRecord


class HistoryRing:
    """Fixed-capacity FIFO of the most recent records, oldest evicted first"""

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._entries = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def append(self, record: MeasurementRecord):
        self._entries.append(record)

    def clear(self):
        self._entries.clear()

    def snapshot(self) -> Tuple[MeasurementRecord, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class MeasurementLog:
    """Unbounded per-session record log, drained by the exporter"""

    COLUMNS = ["timestamp_ns", "time_s", "value", "label"]

    def __init__(self):
        self._records: List[MeasurementRecord] = []

    def append(self, record: MeasurementRecord):
        self._records.append(record)

    def records(self) -> Tuple[MeasurementRecord, ...]:
        return tuple(self._records)

    def discard_first(self, count: int):
        """Drop the oldest ``count`` records (the ones already exported)."""
        del self._records[:count]

    def clear(self):
        self._records.clear()

    def to_frame(self) -> pd.DataFrame:
        if not self._records:
            return pd.DataFrame(columns=self.COLUMNS)
        frame = pd.DataFrame(
            {
                "timestamp_ns": [r.relative_timestamp_ns for r in self._records],
                "value": [r.value for r in self._records],
                "label": [r.label for r in self._records],
            }
        )
        frame["time_s"] = frame["timestamp_ns"] / 1e9
        return frame[self.COLUMNS]

    def __len__(self) -> int:
        return len(self._records)
