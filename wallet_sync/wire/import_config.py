"""Format configuration payload sent after each CSV upload.

The message tells Wallet how to parse the uploaded batch file: which CSV
column feeds which record field, the delimiter, the timezone and the
timestamp pattern of the `date` column.
"""

from __future__ import annotations

from typing import Any, Final

from .codec import wire_encode
from .schema import WireSchemaType


IMPORT_FIELD_AMOUNT: Final[int] = 1
IMPORT_FIELD_NOTE: Final[int] = 2
IMPORT_FIELD_DATE: Final[int] = 3
IMPORT_FIELD_EXPENSE: Final[int] = 6

# Ordered like the batch file header: date,note,amount,expense.
IMPORT_CONFIG_COLUMN_FIELDS: Final[tuple[int, ...]] = (
    IMPORT_FIELD_DATE,
    IMPORT_FIELD_NOTE,
    IMPORT_FIELD_AMOUNT,
    IMPORT_FIELD_EXPENSE,
)
IMPORT_CONFIG_DELIMITER: Final[str] = ","
IMPORT_CONFIG_TIMEZONE: Final[str] = "UTC"
IMPORT_CONFIG_TIMESTAMP_PATTERN: Final[str] = "yyyy-MM-dd'T'HH:mm:ss.SSSSSSZ"


def wire_build_import_config_payload() -> dict[str, Any]:
    """Build the structured format configuration message.

    Returns:
        dict[str, Any]: Message value for `WireSchemaType.IMPORT_CONFIG`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    column_order = [
        {"id": field_id, "id2": column_index}
        for column_index, field_id in enumerate(IMPORT_CONFIG_COLUMN_FIELDS)
    ]
    file_format = {
        "id": 1,
        "id2": 5,
        "id3": 1,
        "id4": IMPORT_CONFIG_DELIMITER,
        "id5": IMPORT_CONFIG_TIMEZONE,
        "id6": 5,
        "id7": IMPORT_CONFIG_TIMESTAMP_PATTERN,
    }
    return {"unknown": column_order, "format": [file_format]}


def wire_encode_import_config() -> bytes:
    """Encode the format configuration message for the records endpoint."""

    return wire_encode(WireSchemaType.IMPORT_CONFIG, wire_build_import_config_payload())
