"""
CSV export of the session measurement log.

Layout (``;`` delimited, ``\\n`` between rows, no trailing newline)::

    Timestamp;Value;MetricType
    00:00:01.250;11.8200
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from .config import ensure_output_dir
from .history import MeasurementLog
from .models import MeasurementRecord


logger = logging.getLogger(__name__)

DELIMITER = ";"
HEADER = DELIMITER.join(["Timestamp", "Value", "MetricType"])

_MS_PER_DAY = 24 * 60 * 60 * 1000


class ExportOutcome(Enum):
    EXPORTED = "exported"
    NO_DATA = "no_data"
    WRITE_FAILED = "write_failed"


@dataclass(frozen=True)
class ExportResult:
    outcome: ExportOutcome
    path: Optional[Path] = None
    record_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is ExportOutcome.EXPORTED


def format_timestamp(relative_ns: int) -> str:
    """HH:mm:ss.mmm of a session-relative timestamp, wrapped at 24 h."""
    if relative_ns < 0:
        return "00:00:00.000"
    total_ms = (relative_ns // 1_000_000) % _MS_PER_DAY
    hours = total_ms // 3_600_000
    minutes = (total_ms % 3_600_000) // 60_000
    seconds = (total_ms % 60_000) // 1000
    millis = total_ms % 1000
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def format_row(record: MeasurementRecord) -> str:
    return f"{format_timestamp(record.relative_timestamp_ns)}{DELIMITER}{record.value:.4f}"


def render_records(records: Iterable[MeasurementRecord]) -> str:
    return "\n".join([HEADER] + [format_row(r) for r in records])


def export_filename(now: datetime) -> str:
    return f"RunningData_{now.strftime('%H-%M-%S')}.csv"


def export_measurements(
    log: MeasurementLog,
    output_dir: Path | None = None,
    now: datetime | None = None,
) -> ExportResult:
    """
    Write the pending records of ``log`` to a CSV file.

    The exported records are removed from the log only after the file has been
    written; on failure the log is left untouched.
    """
    records = log.records()
    if not records:
        logger.info("Nothing to export")
        return ExportResult(ExportOutcome.NO_DATA)

    now = now or datetime.now()
    try:
        target_dir = ensure_output_dir(output_dir)
        path = target_dir / export_filename(now)
        path.write_text(render_records(records), encoding="utf-8")
    except OSError as exc:
        logger.error("Export of %d records failed: %s", len(records), exc)
        return ExportResult(ExportOutcome.WRITE_FAILED, record_count=len(records), error=str(exc))

    log.discard_first(len(records))
    logger.info("Exported %d records to %s", len(records), path)
    return ExportResult(ExportOutcome.EXPORTED, path=path, record_count=len(records))
