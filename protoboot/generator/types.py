"""Type definitions for descriptor sets fed to the code generator."""

from dataclasses import dataclass, field
from typing import Any

from dataclasses_json import DataClassJsonMixin


@dataclass
class CustomOption(DataClassJsonMixin):
    """A custom option, already resolved to its extension.

    - name: full name of the extension defining the option
    - number: the extension's field number
    - type: the extension's field type (e.g. "int32", "string")
    """

    name: str
    number: int
    type: str
    value: Any


@dataclass
class Options(DataClassJsonMixin):
    """Options of a message, field, enum or enum value."""

    deprecated: bool = False
    custom: list[CustomOption] = field(default_factory=list)


@dataclass
class FileOptions(DataClassJsonMixin):
    """File-level options.

    - namespace: dotted Python package the generated module lives in
    - umbrella_name: generated module name (default: "<basename>_pb")
    - lite_runtime: generate without reflective descriptors
    - public_classes: list generated names in the module's __all__
    """

    namespace: str = ""
    umbrella_name: str = ""
    lite_runtime: bool = False
    public_classes: bool = True
    deprecated: bool = False
    custom: list[CustomOption] = field(default_factory=list)


@dataclass
class FieldDecl(DataClassJsonMixin):
    """A message field or an extension declaration.

    - type_name: fully qualified name for "message" and "enum" fields
    - extendee: fully qualified name of the extended type (extensions only)
    """

    name: str
    number: int
    type: str
    label: str = "optional"
    type_name: str = ""
    extendee: str = ""
    default: str | None = None
    options: Options = field(default_factory=Options)


@dataclass
class EnumValue(DataClassJsonMixin):
    name: str
    number: int
    options: Options = field(default_factory=Options)


@dataclass
class EnumType(DataClassJsonMixin):
    name: str
    values: list[EnumValue] = field(default_factory=list)
    options: Options = field(default_factory=Options)


@dataclass
class ExtensionRange(DataClassJsonMixin):
    """Field numbers from `start` up to, not including, `end` open to extensions."""

    start: int
    end: int


@dataclass
class MessageType(DataClassJsonMixin):
    """A message type; may nest messages, enums and extensions.

    Other messages may only be extended with numbers in `extension_ranges`.
    """

    name: str
    fields: list[FieldDecl] = field(default_factory=list)
    nested_types: list["MessageType"] = field(default_factory=list)
    enum_types: list[EnumType] = field(default_factory=list)
    extensions: list[FieldDecl] = field(default_factory=list)
    extension_ranges: list[ExtensionRange] = field(default_factory=list)
    options: Options = field(default_factory=Options)


@dataclass
class FileUnit(DataClassJsonMixin):
    """One compiled schema file.

    `dependencies` lists file names; they must appear earlier in the
    descriptor set than this file.
    """

    name: str
    package: str = ""
    dependencies: list[str] = field(default_factory=list)
    message_types: list[MessageType] = field(default_factory=list)
    enum_types: list[EnumType] = field(default_factory=list)
    extensions: list[FieldDecl] = field(default_factory=list)
    options: FileOptions = field(default_factory=FileOptions)


@dataclass
class DescriptorSet(DataClassJsonMixin):
    """Every file of a compilation, dependencies before dependents."""

    files: list[FileUnit] = field(default_factory=list)

    def find(self, name: str) -> FileUnit | None:
        return next((f for f in self.files if f.name == name), None)


FIELD_TYPES = frozenset(
    [
        "double",
        "float",
        "int64",
        "uint64",
        "int32",
        "fixed64",
        "fixed32",
        "bool",
        "string",
        "bytes",
        "uint32",
        "sfixed32",
        "sfixed64",
        "sint32",
        "sint64",
        "message",
        "enum",
    ]
)

LABELS = frozenset(["optional", "required", "repeated"])


def full_name(scope: str, name: str) -> str:
    """Join a scope (package or message full name) and a local name."""
    return f"{scope}.{name}" if scope else name
