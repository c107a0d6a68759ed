"""Field types, labels and the options messages custom options attach to.

Numbers follow descriptor.proto, so values convert directly to and from the
``FieldDescriptorProto`` enums of ``google.protobuf.descriptor_pb2``.
"""

from enum import IntEnum

from google.protobuf import descriptor_pb2

_Field = descriptor_pb2.FieldDescriptorProto


class FieldType(IntEnum):
    """Field value types."""

    DOUBLE = _Field.TYPE_DOUBLE
    FLOAT = _Field.TYPE_FLOAT
    INT64 = _Field.TYPE_INT64
    UINT64 = _Field.TYPE_UINT64
    INT32 = _Field.TYPE_INT32
    FIXED64 = _Field.TYPE_FIXED64
    FIXED32 = _Field.TYPE_FIXED32
    BOOL = _Field.TYPE_BOOL
    STRING = _Field.TYPE_STRING
    MESSAGE = _Field.TYPE_MESSAGE
    BYTES = _Field.TYPE_BYTES
    UINT32 = _Field.TYPE_UINT32
    ENUM = _Field.TYPE_ENUM
    SFIXED32 = _Field.TYPE_SFIXED32
    SFIXED64 = _Field.TYPE_SFIXED64
    SINT32 = _Field.TYPE_SINT32
    SINT64 = _Field.TYPE_SINT64


class Label(IntEnum):
    """Field cardinality."""

    OPTIONAL = _Field.LABEL_OPTIONAL
    REQUIRED = _Field.LABEL_REQUIRED
    REPEATED = _Field.LABEL_REPEATED


# Extendee names of the options messages custom options attach to
FILE_OPTIONS = descriptor_pb2.FileOptions.DESCRIPTOR.full_name
MESSAGE_OPTIONS = descriptor_pb2.MessageOptions.DESCRIPTOR.full_name
FIELD_OPTIONS = descriptor_pb2.FieldOptions.DESCRIPTOR.full_name
ENUM_OPTIONS = descriptor_pb2.EnumOptions.DESCRIPTOR.full_name
ENUM_VALUE_OPTIONS = descriptor_pb2.EnumValueOptions.DESCRIPTOR.full_name

OPTIONS_TYPES = frozenset(
    [FILE_OPTIONS, MESSAGE_OPTIONS, FIELD_OPTIONS, ENUM_OPTIONS, ENUM_VALUE_OPTIONS]
)

# The file declaring the options messages
DESCRIPTOR_PROTO = descriptor_pb2.DESCRIPTOR.name

# Custom option numbers start here; lower numbers belong to builtin options
FIRST_CUSTOM_OPTION = 1000

MAX_FIELD_NUMBER = 536870911
