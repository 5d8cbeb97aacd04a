"""Domain models and batch file rules used across layer boundaries."""

from .batch_file import (
    BATCH_FILE_COLUMNS,
    BATCH_FILE_HEADER,
    ROW_TIMESTAMP_PREFIX_LENGTH,
    TrimParseWarning,
    domain_batch_content_has_header,
    domain_parse_batch_cutoff,
    domain_parse_row_timestamp,
    domain_render_batch_content,
    domain_trim_batch_rows,
)
from .models import (
    HealthStatus,
    TransactionRecord,
    domain_format_amount,
    domain_map_movement_to_record,
    domain_parse_amount,
)
from .timeline import domain_build_stage_event

__all__ = [
    "BATCH_FILE_COLUMNS",
    "BATCH_FILE_HEADER",
    "ROW_TIMESTAMP_PREFIX_LENGTH",
    "HealthStatus",
    "TransactionRecord",
    "TrimParseWarning",
    "domain_batch_content_has_header",
    "domain_build_stage_event",
    "domain_format_amount",
    "domain_map_movement_to_record",
    "domain_parse_amount",
    "domain_parse_batch_cutoff",
    "domain_parse_row_timestamp",
    "domain_render_batch_content",
    "domain_trim_batch_rows",
]
