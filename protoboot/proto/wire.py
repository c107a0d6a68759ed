"""Descriptor bytes: embedded text, serialized files and custom option values.

Serialized descriptors are ``FileDescriptorProto`` messages. Custom options
are fields numbered from 1000 up on the ``*Options`` messages, which
``descriptor_pb2`` keeps as unknown fields; they are read and written through
a carrier message whose fields mirror the option extensions.
"""

import base64
import binascii
import functools
from collections.abc import Iterable, Sequence
from typing import Any

from google.protobuf import descriptor_pb2, descriptor_pool, message, message_factory
from google.protobuf.unknown_fields import UnknownFieldSet

from .errors import DecodeError
from .types import FIRST_CUSTOM_OPTION, FieldType, Label

_CARRIER_FILE = "protoboot/carrier.proto"
_CARRIER_TYPE = "protoboot.carrier.Carrier"

# (field number, field type, label) of one custom option
OptionField = tuple[int, FieldType, Label]


def decode_embedded(chunks: Iterable[str]) -> bytes:
    """Join base64 chunks embedded in a generated module back into bytes."""
    try:
        return base64.b64decode("".join(chunks), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid embedded descriptor data: {e}") from e


def decode_file(data: bytes) -> descriptor_pb2.FileDescriptorProto:
    """Parse a serialized file descriptor.

    Raises:
        DecodeError: If the data is truncated or malformed.
    """
    try:
        proto = descriptor_pb2.FileDescriptorProto.FromString(data)
    except message.DecodeError as e:
        raise DecodeError(f"Invalid file descriptor: {e}") from e
    if not proto.name:
        raise DecodeError("File descriptor has no name")
    return proto


def encode_file(proto: descriptor_pb2.FileDescriptorProto) -> bytes:
    return proto.SerializeToString(deterministic=True)


def _field_name(number: int) -> str:
    return f"option_{number}"


@functools.lru_cache(maxsize=None)
def _carrier_class(fields: tuple[OptionField, ...]) -> type[message.Message]:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = _CARRIER_FILE
    file_proto.package = _CARRIER_TYPE.rpartition(".")[0]

    carrier = file_proto.message_type.add()
    carrier.name = _CARRIER_TYPE.rpartition(".")[2]
    for number, field_type, label in fields:
        field = carrier.field.add()
        field.name = _field_name(number)
        field.number = number
        # Enum values share the int32 encoding
        field.type = FieldType.INT32 if field_type == FieldType.ENUM else field_type
        field.label = Label.REPEATED if label == Label.REPEATED else Label.OPTIONAL

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return message_factory.GetMessageClass(pool.FindMessageTypeByName(_CARRIER_TYPE))


def custom_option_numbers(options: message.Message) -> list[int]:
    """Numbers of the custom options set on an ``*Options`` message."""
    numbers = {
        field.field_number
        for field in UnknownFieldSet(options)
        if field.field_number >= FIRST_CUSTOM_OPTION
    }
    return sorted(numbers)


def read_custom_values(options: message.Message, fields: Sequence[OptionField]) -> dict[int, Any]:
    """Read the custom options of `options` numbered as in `fields`.

    Repeated options give a tuple of every value present; for other options
    the last value present wins.

    Raises:
        DecodeError: If an option is not encoded as its field type.
    """
    carrier_class = _carrier_class(tuple(sorted(fields)))
    try:
        carrier = carrier_class.FromString(options.SerializeToString())
    except message.DecodeError as e:
        raise DecodeError(f"Invalid custom options: {e}") from e

    # Values with the wrong wire type end up as unknown fields of the carrier
    wanted = {number for number, _, _ in fields}
    for field in UnknownFieldSet(carrier):
        if field.field_number in wanted:
            raise DecodeError(
                f"Custom option {field.field_number} has wire type {field.wire_type}"
            )

    values: dict[int, Any] = {}
    for number, _, label in fields:
        name = _field_name(number)
        if label == Label.REPEATED:
            found = getattr(carrier, name)
            if found:
                values[number] = tuple(found)
        elif carrier.HasField(name):
            values[number] = getattr(carrier, name)
    return values


def _coerce(value: Any, field_type: FieldType) -> Any:
    if field_type == FieldType.BYTES and isinstance(value, str):
        return value.encode("utf-8")
    if field_type in (FieldType.DOUBLE, FieldType.FLOAT):
        return float(value)
    return value


def write_custom_values(
    options: message.Message, values: Sequence[tuple[int, FieldType, Any]]
) -> None:
    """Append (number, field type, value) custom options to `options`.

    The values are kept as unknown fields of `options`, ordered by number;
    values sharing a number keep their given order.
    """
    if any(field_type == FieldType.MESSAGE for _, field_type, _ in values):
        raise ValueError("Message-typed custom options are not supported")

    fields = {(number, field_type, Label.REPEATED) for number, field_type, _ in values}
    carrier = _carrier_class(tuple(sorted(fields)))()
    for number, field_type, value in values:
        getattr(carrier, _field_name(number)).append(_coerce(value, field_type))
    options.MergeFromString(carrier.SerializeToString(deterministic=True))
