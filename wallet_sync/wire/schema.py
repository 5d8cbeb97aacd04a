"""Protobuf schema for the BudgetBakers Wallet import endpoints.

The Wallet web client exchanges proto2 messages with the `ribeez` API. The
schema is not published, so the descriptors below pin the field numbers this
service relies on and register them in a private descriptor pool.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message


WIRE_SCHEMA_PACKAGE: Final[str] = "budgetbakers"
WIRE_SCHEMA_FILE_NAME: Final[str] = "budgetbakers/messages.proto"

_FIELD = descriptor_pb2.FieldDescriptorProto


class WireSchemaType(str, Enum):
    """Message types exchanged with the Wallet import API."""

    USER = "User"
    IMPORTS = "Imports"
    IMPORT_FILE = "ImportFile"
    COLUMN_ORDER = "ColumnOrder"
    FILE_FORMAT = "FileFormat"
    IMPORT_CONFIG = "Timestamp"


def _wire_add_field(
    message_proto: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    label: int = _FIELD.LABEL_REQUIRED,
    type_name: str | None = None,
    json_name: str | None = None,
) -> None:
    """Append one field definition to a message descriptor.

    Args:
        message_proto: Message descriptor being built.
        name: Proto field name.
        number: Wire field number.
        field_type: Descriptor field type constant.
        label: Descriptor label constant.
        type_name: Fully qualified message type for nested message fields.
        json_name: JSON field name used by the dict codec.

    Returns:
        None: Mutates `message_proto` in place.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    field_proto = message_proto.field.add()
    field_proto.name = name
    field_proto.number = number
    field_proto.type = field_type
    field_proto.label = label
    field_proto.json_name = json_name or name
    if type_name is not None:
        field_proto.type_name = f".{WIRE_SCHEMA_PACKAGE}.{type_name}"


def wire_build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Build the file descriptor declaring every Wallet import message.

    Returns:
        descriptor_pb2.FileDescriptorProto: proto2 file descriptor.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    file_proto = descriptor_pb2.FileDescriptorProto(
        name=WIRE_SCHEMA_FILE_NAME,
        package=WIRE_SCHEMA_PACKAGE,
        syntax="proto2",
    )

    user_proto = file_proto.message_type.add(name=WireSchemaType.USER.value)
    _wire_add_field(user_proto, "id", 1, _FIELD.TYPE_STRING)

    import_file_proto = file_proto.message_type.add(name=WireSchemaType.IMPORT_FILE.value)
    _wire_add_field(import_file_proto, "id", 1, _FIELD.TYPE_STRING)
    _wire_add_field(
        import_file_proto,
        "file_name",
        2,
        _FIELD.TYPE_STRING,
        label=_FIELD.LABEL_OPTIONAL,
        json_name="fileName",
    )

    imports_proto = file_proto.message_type.add(name=WireSchemaType.IMPORTS.value)
    _wire_add_field(
        imports_proto,
        "files",
        1,
        _FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED,
        type_name=WireSchemaType.IMPORT_FILE.value,
    )

    # Column slot -> Wallet record field.
    column_order_proto = file_proto.message_type.add(name=WireSchemaType.COLUMN_ORDER.value)
    _wire_add_field(column_order_proto, "id", 1, _FIELD.TYPE_INT32)
    _wire_add_field(column_order_proto, "id2", 2, _FIELD.TYPE_INT32)

    file_format_proto = file_proto.message_type.add(name=WireSchemaType.FILE_FORMAT.value)
    _wire_add_field(file_format_proto, "id", 1, _FIELD.TYPE_INT32)
    _wire_add_field(file_format_proto, "id2", 2, _FIELD.TYPE_INT32)
    _wire_add_field(file_format_proto, "id3", 3, _FIELD.TYPE_INT32)
    _wire_add_field(file_format_proto, "id4", 4, _FIELD.TYPE_STRING)
    _wire_add_field(file_format_proto, "id5", 5, _FIELD.TYPE_STRING)
    _wire_add_field(file_format_proto, "id6", 6, _FIELD.TYPE_INT32)
    _wire_add_field(file_format_proto, "id7", 7, _FIELD.TYPE_STRING)

    import_config_proto = file_proto.message_type.add(name=WireSchemaType.IMPORT_CONFIG.value)
    _wire_add_field(
        import_config_proto,
        "unknown",
        1,
        _FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED,
        type_name=WireSchemaType.COLUMN_ORDER.value,
    )
    _wire_add_field(
        import_config_proto,
        "format",
        2,
        _FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED,
        type_name=WireSchemaType.FILE_FORMAT.value,
    )
    return file_proto


_WIRE_DESCRIPTOR_POOL = descriptor_pool.DescriptorPool()
_WIRE_DESCRIPTOR_POOL.AddSerializedFile(wire_build_file_descriptor().SerializeToString())


def wire_message_class(schema_type: WireSchemaType) -> type[Message]:
    """Resolve the concrete message class for one schema type.

    Args:
        schema_type: Wallet message type.

    Returns:
        type[Message]: Generated protobuf message class.

    Raises:
        KeyError: Raised when the schema type is not registered in the pool.
    """

    message_descriptor = _WIRE_DESCRIPTOR_POOL.FindMessageTypeByName(
        f"{WIRE_SCHEMA_PACKAGE}.{WireSchemaType(schema_type).value}"
    )
    return message_factory.GetMessageClass(message_descriptor)
