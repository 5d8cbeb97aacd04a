"""Dict codec for Wallet protobuf messages.

The codec is not self-describing: callers pick the schema type that matches
the endpoint they talked to.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from google.protobuf import json_format
from google.protobuf.message import DecodeError, EncodeError

from .schema import WireSchemaType, wire_message_class


class WireCodecError(ValueError):
    """Base exception for Wallet message codec failures.

    Attributes:
        schema_type: Message type being encoded or decoded.
    """

    def __init__(self, message: str, schema_type: WireSchemaType | None = None):
        super().__init__(message)
        self.schema_type = schema_type


class WireDecodeError(WireCodecError):
    """Payload bytes do not conform to the declared message schema."""


class WireEncodeError(WireCodecError):
    """Structured value cannot be encoded with the declared message schema."""


def wire_decode(schema_type: WireSchemaType, payload: bytes) -> dict[str, Any]:
    """Decode protobuf payload bytes into a JSON-style dict.

    Args:
        schema_type: Expected message type for the payload.
        payload: Raw response body bytes.

    Returns:
        dict[str, Any]: Decoded message keyed by JSON field names.

    Raises:
        WireDecodeError: Raised when bytes are truncated, malformed or miss required fields.
    """

    message = wire_message_class(schema_type)()
    try:
        message.ParseFromString(bytes(payload))
    except DecodeError as error:
        raise WireDecodeError(f"{schema_type.value} payload could not be decoded", schema_type) from error

    if not message.IsInitialized():
        missing_fields = ", ".join(message.FindInitializationErrors())
        raise WireDecodeError(
            f"{schema_type.value} payload is missing required fields: {missing_fields}",
            schema_type,
        )
    return json_format.MessageToDict(message)


def wire_encode(schema_type: WireSchemaType, value: Mapping[str, Any]) -> bytes:
    """Encode a JSON-style dict into protobuf bytes.

    Args:
        schema_type: Message type to encode.
        value: Structured message value keyed by proto or JSON field names.

    Returns:
        bytes: Serialized message.

    Raises:
        WireEncodeError: Raised for unknown fields, wrong value types or missing required fields.
    """

    message = wire_message_class(schema_type)()
    try:
        json_format.ParseDict(dict(value), message)
    except json_format.ParseError as error:
        raise WireEncodeError(f"{schema_type.value} value is invalid: {error}", schema_type) from error

    if not message.IsInitialized():
        missing_fields = ", ".join(message.FindInitializationErrors())
        raise WireEncodeError(
            f"{schema_type.value} value is missing required fields: {missing_fields}",
            schema_type,
        )
    try:
        return message.SerializeToString()
    except EncodeError as error:
        raise WireEncodeError(f"{schema_type.value} value could not be encoded", schema_type) from error
