"""Batch file rules shared by the writer and the Wallet upload pipeline.

Deduplication compares each CSV row against the creation time encoded in the
filename of the last batch Wallet already imported. Rows are dated by their
first 16 characters only, so a row whose leading `date` cell is not a
`YYYY-MM-DDTHH:MM` timestamp is dropped by trimming.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Final


BATCH_FILE_COLUMNS: Final[tuple[str, ...]] = ("date", "note", "amount", "expense")
BATCH_FILE_HEADER: Final[str] = ",".join(BATCH_FILE_COLUMNS)
BATCH_FILE_EXTENSION_LENGTH: Final[int] = 4
ROW_TIMESTAMP_PREFIX_LENGTH: Final[int] = 16

# Date, then either `THH:MM` (own batch names) or `:HH` (last `-` was the date/time delimiter).
_BATCH_TIMESTAMP_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})(?:T(?P<hour>\d{2}):(?P<minute>\d{2})|:(?P<hour_only>\d{2}))$"
)


class TrimParseWarning(UserWarning):
    """Batch cutoff could not be derived; trimming is skipped and upload proceeds.

    Attributes:
        file_name: Remote batch filename that failed to parse.
    """

    def __init__(self, message: str, file_name: str | None = None):
        super().__init__(message)
        self.file_name = file_name


def domain_batch_content_has_header(content: str) -> bool:
    """Return whether batch file content carries the fixed column header."""

    return BATCH_FILE_HEADER in content


def domain_parse_batch_cutoff(file_name: str | None) -> datetime:
    """Derive the dedup cutoff timestamp from a remote batch filename.

    The trailing extension is stripped and the last `-` of the stem is read as
    a date/time delimiter, so `2024-03-15T14-30.csv` yields `2024-03-15T14:30`
    and `transactions-2024-03-15-14.csv` yields `2024-03-15T14`.

    Args:
        file_name: Original filename reported by Wallet for the batch.

    Returns:
        datetime: Naive cutoff timestamp.

    Raises:
        TrimParseWarning: Raised when no timestamp can be derived from the filename.
    """

    if not file_name or len(file_name) <= BATCH_FILE_EXTENSION_LENGTH:
        raise TrimParseWarning("Couldn't read last uploaded date", file_name)

    file_stem = file_name[:-BATCH_FILE_EXTENSION_LENGTH]
    stem_head, separator, stem_tail = file_stem.rpartition("-")
    if not separator:
        raise TrimParseWarning("Couldn't read last uploaded date", file_name)

    timestamp_match = _BATCH_TIMESTAMP_PATTERN.search(f"{stem_head}:{stem_tail}")
    if timestamp_match is None:
        raise TrimParseWarning("Couldn't read last uploaded date", file_name)

    hour_text = timestamp_match.group("hour") or timestamp_match.group("hour_only")
    minute_text = timestamp_match.group("minute") or "00"
    try:
        return datetime.strptime(
            f"{timestamp_match.group('date')}T{hour_text}:{minute_text}",
            "%Y-%m-%dT%H:%M",
        )
    except ValueError as error:
        raise TrimParseWarning("Couldn't read last uploaded date", file_name) from error


def domain_parse_row_timestamp(row: str) -> datetime | None:
    """Parse the fixed-width leading timestamp of one CSV row.

    Args:
        row: Raw CSV line.

    Returns:
        datetime | None: Naive timestamp, or None when the prefix is not a timestamp.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    row_prefix = row[:ROW_TIMESTAMP_PREFIX_LENGTH]
    try:
        row_timestamp = datetime.fromisoformat(row_prefix)
    except ValueError:
        return None
    return row_timestamp.replace(tzinfo=None)


def domain_trim_batch_rows(content: str, cutoff: datetime) -> list[str]:
    """Return data rows dated at or after the cutoff.

    Rows are split on `\\n` only, the batch writer's line terminator; notes
    may contain `\\r` or Unicode line separators.

    Args:
        content: Full batch file content including the header.
        cutoff: Creation time of the last imported batch.

    Returns:
        list[str]: Surviving data rows in file order, header excluded.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    surviving_rows: list[str] = []
    for row in content.split("\n"):
        row_timestamp = domain_parse_row_timestamp(row)
        if row_timestamp is not None and row_timestamp >= cutoff:
            surviving_rows.append(row)
    return surviving_rows


def domain_render_batch_content(rows: list[str]) -> str:
    """Render batch file content as the header followed by data rows."""

    return "\n".join([BATCH_FILE_HEADER, *rows])
