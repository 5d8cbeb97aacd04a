"""Tabular batch file materialization for sync runs."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from wallet_sync.domain import BATCH_FILE_COLUMNS, TransactionRecord


def job_build_batch_file_name(created_at: datetime) -> str:
    """Return the minute-granularity batch file name, `YYYY-MM-DDTHH-MM.csv`."""

    return f"{created_at.strftime('%Y-%m-%dT%H-%M')}.csv"


def job_write_batch_file(
    records: Sequence[TransactionRecord],
    directory: Path,
    created_at: datetime | None = None,
) -> Path:
    """Write records as a batch file named after the local wall-clock minute.

    A file written in the same minute is overwritten.

    Args:
        records: Records in Edenred order.
        directory: Output directory, created when absent.
        created_at: Timestamp used for the file name, local now by default.

    Returns:
        Path: Written batch file path.

    Raises:
        OSError: Raised when the directory or file cannot be written.
    """

    output_directory = Path(directory)
    output_directory.mkdir(parents=True, exist_ok=True)
    batch_path = output_directory / job_build_batch_file_name(created_at or datetime.now())

    with batch_path.open("w", encoding="utf-8", newline="") as batch_file:
        writer = csv.writer(batch_file, lineterminator="\n")
        writer.writerow(BATCH_FILE_COLUMNS)
        for record in records:
            writer.writerow(record.record_to_row())
    return batch_path
