"""Serialization of file units into the descriptor bytes embedded in generated modules."""

import base64
from typing import Any

from google.protobuf import descriptor_pb2
from google.protobuf.message import Message

from protoboot.proto.types import DESCRIPTOR_PROTO, OPTIONS_TYPES, FieldType, Label
from protoboot.proto.wire import encode_file, write_custom_values

from .naming import visit_messages
from .types import CustomOption, EnumType, FieldDecl, FileUnit, MessageType, Options

CHUNK_WIDTH = 60


def _qualified(name: str) -> str:
    """Fully qualified type reference, as descriptor.proto spells it."""
    return f".{name}"


def _custom_values(custom: list[CustomOption]) -> list[tuple[int, FieldType, Any]]:
    return [(o.number, FieldType[o.type.upper()], o.value) for o in custom]


def _set_options(proto: Message, options: Options) -> None:
    # Leave `options` unset when there is nothing to record
    if options.deprecated:
        proto.options.deprecated = True
    if options.custom:
        write_custom_values(proto.options, _custom_values(options.custom))


def _field(decl: FieldDecl, proto: descriptor_pb2.FieldDescriptorProto) -> None:
    proto.name = decl.name
    proto.number = decl.number
    proto.label = Label[decl.label.upper()]
    proto.type = FieldType[decl.type.upper()]
    if decl.type_name:
        proto.type_name = _qualified(decl.type_name)
    if decl.extendee:
        proto.extendee = _qualified(decl.extendee)
    if decl.default is not None:
        proto.default_value = decl.default
    _set_options(proto, decl.options)


def _enum(enum: EnumType, proto: descriptor_pb2.EnumDescriptorProto) -> None:
    proto.name = enum.name
    for value in enum.values:
        value_proto = proto.value.add()
        value_proto.name = value.name
        value_proto.number = value.number
        _set_options(value_proto, value.options)
    _set_options(proto, enum.options)


def _message(message: MessageType, proto: descriptor_pb2.DescriptorProto) -> None:
    proto.name = message.name
    for decl in message.fields:
        _field(decl, proto.field.add())
    for nested in message.nested_types:
        _message(nested, proto.nested_type.add())
    for enum in message.enum_types:
        _enum(enum, proto.enum_type.add())
    for decl in message.extensions:
        _field(decl, proto.extension.add())
    for extension_range in message.extension_ranges:
        proto.extension_range.add(start=extension_range.start, end=extension_range.end)
    _set_options(proto, message.options)


def extends_options(file: FileUnit) -> bool:
    """Whether `file` declares an extension of one of the options messages."""
    decls = list(file.extensions)
    for visit in visit_messages(file):
        decls += visit.message.extensions
    return any(decl.extendee in OPTIONS_TYPES for decl in decls)


def to_raw(file: FileUnit) -> descriptor_pb2.FileDescriptorProto:
    """Convert a file unit into a ``FileDescriptorProto``.

    Files extending the options messages gain a dependency on descriptor.proto.
    The namespace, umbrella name and public classes options only steer code
    generation and are not recorded.
    """
    proto = descriptor_pb2.FileDescriptorProto()
    proto.name = file.name
    if file.package:
        proto.package = file.package
    proto.dependency.extend(file.dependencies)
    if extends_options(file):
        proto.dependency.append(DESCRIPTOR_PROTO)

    for message in file.message_types:
        _message(message, proto.message_type.add())
    for enum in file.enum_types:
        _enum(enum, proto.enum_type.add())
    for decl in file.extensions:
        _field(decl, proto.extension.add())

    options = file.options
    if options.lite_runtime:
        proto.options.optimize_for = descriptor_pb2.FileOptions.LITE_RUNTIME
    if options.deprecated:
        proto.options.deprecated = True
    if options.custom:
        write_custom_values(proto.options, _custom_values(options.custom))
    return proto


def encode(file: FileUnit) -> bytes:
    """Serialize a file unit's complete metadata."""
    return encode_file(to_raw(file))


def encode_chunks(file: FileUnit, width: int = CHUNK_WIDTH) -> list[str]:
    """Return the base64 form of `encode(file)` split into `width`-character chunks.

    Every chunk but the last is exactly `width` characters long. Joining the
    chunks yields the complete base64 text.
    """
    if width <= 0:
        raise ValueError("Chunk width must be positive")
    text = base64.b64encode(encode(file)).decode("ascii")
    return [text[i : i + width] for i in range(0, len(text), width)]
