"""Custom option interpretation and the record kept for each loaded file.

Descriptors themselves are ``google.protobuf`` descriptors, built and linked
by a protobuf descriptor pool. Custom options are the part protobuf cannot
read without generated extension classes: they stay unknown fields of the
raw ``*Options`` messages until `interpret_options` resolves them against an
extension registry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from google.protobuf import descriptor_pb2
from google.protobuf.descriptor import EnumValueDescriptor
from google.protobuf.message import Message as ProtoMessage

from .errors import DescriptorError
from .types import (
    ENUM_OPTIONS,
    ENUM_VALUE_OPTIONS,
    FIELD_OPTIONS,
    FILE_OPTIONS,
    MESSAGE_OPTIONS,
    FieldType,
)
from .wire import custom_option_numbers, read_custom_values

if TYPE_CHECKING:
    from google.protobuf.descriptor import FileDescriptor

    from .registry import ExtensionRegistry

logger = logging.getLogger(__name__)


class _Sealable:
    """Allows attribute writes until sealed."""

    _sealed = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self._sealed:
            raise AttributeError(f"{type(self).__name__} is read-only")
        object.__setattr__(self, name, value)

    def _seal(self) -> None:
        object.__setattr__(self, "_sealed", True)


def _key(extension: Any) -> str:
    return extension if isinstance(extension, str) else extension.full_name


class CustomOptions(Mapping[str, Any]):
    """Custom option values of one descriptor, keyed by extension full name.

    Lookups accept an extension handle as well as its full name.
    """

    def __init__(self, options_type: str, values: Mapping[str, Any] | None = None) -> None:
        self.options_type = options_type
        self._values = MappingProxyType(dict(values or {}))

    @property
    def extensions(self) -> Mapping[str, Any]:
        return self._values

    def get(self, extension: Any, default: Any = None) -> Any:
        return self._values.get(_key(extension), default)

    def __getitem__(self, extension: Any) -> Any:
        return self._values[_key(extension)]

    def __contains__(self, extension: object) -> bool:
        key = extension if isinstance(extension, str) else getattr(extension, "full_name", None)
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"CustomOptions({dict(self._values)!r})"


class LoadedFile(_Sealable):
    """Everything the pool keeps for one assigned file. Read-only."""

    def __init__(
        self,
        descriptor: FileDescriptor,
        proto: descriptor_pb2.FileDescriptorProto,
        serialized: bytes,
        extension_registry: ExtensionRegistry,
        file_options: CustomOptions,
        options: Mapping[str, CustomOptions],
    ) -> None:
        self.name = proto.name
        self.descriptor = descriptor
        self.proto = proto
        self.serialized = serialized
        self.extension_registry = extension_registry
        self.file_options = file_options
        self.options = MappingProxyType(dict(options))
        self._seal()

    def __repr__(self) -> str:
        return f"<LoadedFile {self.name}>"


def option_key(descriptor: Any) -> str:
    """Key of a message, field, enum or enum value descriptor in `LoadedFile.options`.

    Enum values are scoped by their enum: "geo.Unit.FEET".
    """
    if isinstance(descriptor, EnumValueDescriptor):
        return f"{descriptor.type.full_name}.{descriptor.name}"
    return descriptor.full_name


def _join(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


def _enum_elements(
    enum: descriptor_pb2.EnumDescriptorProto, scope: str
) -> Iterator[tuple[str, str, ProtoMessage]]:
    full_name = _join(scope, enum.name)
    yield full_name, ENUM_OPTIONS, enum.options
    for value in enum.value:
        yield f"{full_name}.{value.name}", ENUM_VALUE_OPTIONS, value.options


def _message_elements(
    message: descriptor_pb2.DescriptorProto, scope: str
) -> Iterator[tuple[str, str, ProtoMessage]]:
    full_name = _join(scope, message.name)
    yield full_name, MESSAGE_OPTIONS, message.options
    for field in list(message.field) + list(message.extension):
        yield f"{full_name}.{field.name}", FIELD_OPTIONS, field.options
    for enum in message.enum_type:
        yield from _enum_elements(enum, full_name)
    for nested in message.nested_type:
        yield from _message_elements(nested, full_name)


def _elements(proto: descriptor_pb2.FileDescriptorProto) -> Iterator[tuple[str, str, ProtoMessage]]:
    """Yield (option key, options type, raw options) for every element of a file."""
    for message in proto.message_type:
        yield from _message_elements(message, proto.package)
    for enum in proto.enum_type:
        yield from _enum_elements(enum, proto.package)
    for extension in proto.extension:
        yield _join(proto.package, extension.name), FIELD_OPTIONS, extension.options


def _interpret(
    options: ProtoMessage, options_type: str, registry: ExtensionRegistry, owner: str
) -> CustomOptions:
    numbers = custom_option_numbers(options)
    if not numbers:
        return CustomOptions(options_type)

    extensions = []
    for number in numbers:
        extension = registry.find(options_type, number)
        if extension is None:
            raise DescriptorError(
                f"{owner}: cannot resolve custom option {number} of {options_type}"
            )
        if extension.field_type == FieldType.MESSAGE:
            raise DescriptorError(
                f"{owner}: custom option {extension.full_name} has a message type"
            )
        extensions.append(extension)

    values = read_custom_values(options, [(e.number, e.field_type, e.label) for e in extensions])
    return CustomOptions(
        options_type, {e.full_name: values[e.number] for e in extensions if e.number in values}
    )


def interpret_options(
    proto: descriptor_pb2.FileDescriptorProto, registry: ExtensionRegistry
) -> tuple[CustomOptions, dict[str, CustomOptions]]:
    """Resolve the custom options of every element of a file.

    Returns:
        The file's own options, and the options of its messages, fields,
        extensions, enums and enum values keyed by `option_key`.

    Raises:
        DescriptorError: If a custom option has no registered extension.
    """
    file_options = _interpret(proto.options, FILE_OPTIONS, registry, proto.name)
    options = {
        key: _interpret(raw, options_type, registry, key)
        for key, options_type, raw in _elements(proto)
    }
    logger.debug(
        "Interpreted options of %s: %d element(s) with custom options",
        proto.name,
        sum(1 for o in options.values() if o),
    )
    return file_options, options
