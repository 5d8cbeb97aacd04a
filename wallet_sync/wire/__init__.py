"""Wire-format package for Wallet protobuf messages."""

from .codec import WireCodecError, WireDecodeError, WireEncodeError, wire_decode, wire_encode
from .import_config import (
	IMPORT_CONFIG_COLUMN_FIELDS,
	IMPORT_CONFIG_DELIMITER,
	IMPORT_CONFIG_TIMESTAMP_PATTERN,
	IMPORT_CONFIG_TIMEZONE,
	wire_build_import_config_payload,
	wire_encode_import_config,
)
from .schema import WireSchemaType, wire_message_class

__all__ = [
	"IMPORT_CONFIG_COLUMN_FIELDS",
	"IMPORT_CONFIG_DELIMITER",
	"IMPORT_CONFIG_TIMESTAMP_PATTERN",
	"IMPORT_CONFIG_TIMEZONE",
	"WireCodecError",
	"WireDecodeError",
	"WireEncodeError",
	"WireSchemaType",
	"wire_build_import_config_payload",
	"wire_decode",
	"wire_encode",
	"wire_encode_import_config",
	"wire_message_class",
]
