"""Loading and validation of descriptor sets."""

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from dataclasses_json.core import Json
from google.protobuf import descriptor_pb2

from protoboot.proto.types import (
    DESCRIPTOR_PROTO,
    ENUM_OPTIONS,
    ENUM_VALUE_OPTIONS,
    FIELD_OPTIONS,
    FILE_OPTIONS,
    FIRST_CUSTOM_OPTION,
    MAX_FIELD_NUMBER,
    MESSAGE_OPTIONS,
    OPTIONS_TYPES,
)

from .extensions import registration_closure
from .types import (
    FIELD_TYPES,
    LABELS,
    CustomOption,
    DescriptorSet,
    EnumType,
    FieldDecl,
    FileUnit,
    MessageType,
    Options,
    full_name,
)

logger = logging.getLogger(__name__)

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")

# (kind, definition) of a full name
Symbol = tuple[str, Any]


class ValidationError(RuntimeError):
    """Raised when a descriptor set violates a precondition of code generation."""


def _walk_messages(messages: list[MessageType], scope: str) -> Iterator[tuple[str, MessageType]]:
    for message in messages:
        name = full_name(scope, message.name)
        yield name, message
        yield from _walk_messages(message.nested_types, name)


def _walk_enums(file: FileUnit) -> Iterator[tuple[str, EnumType]]:
    for enum in file.enum_types:
        yield file.package, enum
    for scope, message in _walk_messages(file.message_types, file.package):
        for enum in message.enum_types:
            yield scope, enum


def _declarations(file: FileUnit) -> Iterator[tuple[str, FieldDecl, bool]]:
    """Yield (scope, declaration, is extension) for every field and extension."""
    for scope, message in _walk_messages(file.message_types, file.package):
        for decl in message.fields:
            yield scope, decl, False
        for decl in message.extensions:
            yield scope, decl, True
    for decl in file.extensions:
        yield file.package, decl, True


def _all_options(file: FileUnit) -> Iterator[tuple[str, str, Options]]:
    """Yield (owner, options type, options) for every element of `file`."""
    for scope, message in _walk_messages(file.message_types, file.package):
        yield scope, MESSAGE_OPTIONS, message.options
    for scope, decl, _ in _declarations(file):
        yield full_name(scope, decl.name), FIELD_OPTIONS, decl.options
    for scope, enum in _walk_enums(file):
        yield full_name(scope, enum.name), ENUM_OPTIONS, enum.options
        for value in enum.values:
            yield full_name(scope, value.name), ENUM_VALUE_OPTIONS, value.options


def _check_name(owner: str, name: str) -> None:
    if not _NAME.match(name):
        raise ValidationError(f"{owner}: {name!r} is not a valid name")


def _validate_custom(owner: str, options: list[CustomOption]) -> None:
    for option in options:
        if option.number < FIRST_CUSTOM_OPTION:
            raise ValidationError(
                f"{owner}: custom option {option.name} uses number {option.number}, "
                f"custom options start at {FIRST_CUSTOM_OPTION}"
            )
        if option.type not in FIELD_TYPES or option.type == "message":
            raise ValidationError(f"{owner}: custom option {option.name} has type {option.type}")


def _validate_decl(owner: str, decl: FieldDecl, is_extension: bool) -> None:
    where = f"{owner}.{decl.name}" if owner else decl.name
    _check_name(owner or "file", decl.name)
    if decl.type not in FIELD_TYPES:
        raise ValidationError(f"{where}: unknown field type {decl.type}")
    if decl.label not in LABELS:
        raise ValidationError(f"{where}: unknown label {decl.label}")
    if decl.type in ("message", "enum") and not decl.type_name:
        raise ValidationError(f"{where}: {decl.type} field needs a type_name")
    if not 0 < decl.number <= MAX_FIELD_NUMBER:
        raise ValidationError(f"{where}: field numbers must be between 1 and {MAX_FIELD_NUMBER}")
    if decl.default is not None and (decl.type == "message" or decl.label == "repeated"):
        raise ValidationError(f"{where}: message and repeated fields take no default")
    if is_extension and not decl.extendee:
        raise ValidationError(f"{where}: extension needs an extendee")
    if is_extension and decl.label == "required":
        raise ValidationError(f"{where}: extensions cannot be required")


def _validate_message(file: FileUnit, scope: str, message: MessageType) -> None:
    for extension_range in message.extension_ranges:
        if not 0 < extension_range.start < extension_range.end <= MAX_FIELD_NUMBER + 1:
            raise ValidationError(
                f"{file.name}: {scope} has an invalid extension range "
                f"{extension_range.start} to {extension_range.end}"
            )

    numbers: dict[int, str] = {}
    for decl in message.fields:
        _validate_decl(scope, decl, is_extension=False)
        if decl.number in numbers:
            raise ValidationError(
                f"{file.name}: {scope}.{decl.name} reuses field number "
                f"{decl.number} of {numbers[decl.number]}"
            )
        if any(r.start <= decl.number < r.end for r in message.extension_ranges):
            raise ValidationError(
                f"{file.name}: {scope}.{decl.name} uses number {decl.number}, "
                f"which is reserved for extensions"
            )
        numbers[decl.number] = decl.name
    for decl in message.extensions:
        _validate_decl(scope, decl, is_extension=True)


def validate_file(file: FileUnit) -> None:
    """Validate a single file in isolation."""
    for part in file.package.split(".") if file.package else []:
        _check_name(file.name, part)

    for scope, message in _walk_messages(file.message_types, file.package):
        _check_name(file.name, message.name)
        _validate_message(file, scope, message)
    for decl in file.extensions:
        _validate_decl(file.package, decl, is_extension=True)
    for scope, enum in _walk_enums(file):
        _check_name(file.name, enum.name)
        if not enum.values:
            raise ValidationError(f"{file.name}: enum {full_name(scope, enum.name)} has no values")
        for value in enum.values:
            _check_name(file.name, value.name)

    _validate_custom(file.name, file.options.custom)
    for owner, _, options in _all_options(file):
        _validate_custom(f"{file.name}: {owner}", options.custom)


def _symbols(file: FileUnit) -> dict[str, Symbol]:
    """Map every full name `file` defines to its kind and definition."""
    symbols: dict[str, Symbol] = {}

    def define(name: str, kind: str, definition: Any) -> None:
        if name in symbols:
            raise ValidationError(f"{file.name}: {name} is defined more than once")
        symbols[name] = (kind, definition)

    for scope, message in _walk_messages(file.message_types, file.package):
        define(scope, "message", message)
    for scope, decl, is_extension in _declarations(file):
        define(full_name(scope, decl.name), "extension" if is_extension else "field", decl)
    for scope, enum in _walk_enums(file):
        define(full_name(scope, enum.name), "enum", enum)
        # Enum values are scoped as siblings of their enum
        for value in enum.values:
            define(full_name(scope, value.name), "enum value", value)
    return symbols


def _builtin_symbols() -> dict[str, tuple[str, str]]:
    """Names defined by descriptor.proto, which every pool holds."""
    owners = {"google": ("package", DESCRIPTOR_PROTO)}
    package = descriptor_pb2.DESCRIPTOR.package
    owners[package] = ("package", DESCRIPTOR_PROTO)
    for name in list(descriptor_pb2.DESCRIPTOR.message_types_by_name) + list(
        descriptor_pb2.DESCRIPTOR.enum_types_by_name
    ):
        owners[f"{package}.{name}"] = ("type", DESCRIPTOR_PROTO)
    return owners


def _claim(file: FileUnit, symbols: dict[str, Symbol], owners: dict[str, tuple[str, str]]) -> None:
    """Record the names `file` defines, rejecting any already taken."""
    parts = file.package.split(".") if file.package else []
    for i in range(len(parts)):
        package = ".".join(parts[: i + 1])
        kind, owner = owners.setdefault(package, ("package", file.name))
        if kind != "package":
            raise ValidationError(f"{file.name}: package {package} is already defined in {owner}")

    for name, (kind, _) in symbols.items():
        if name in owners:
            raise ValidationError(f"{file.name}: {name} is already defined in {owners[name][1]}")
        owners[name] = (kind, file.name)


def _check_references(
    file: FileUnit, visible: dict[str, Symbol], extensions: dict[tuple[str, int], str]
) -> None:
    """Resolve the type names and extendees of `file` against the names it can see."""
    for scope, decl, is_extension in _declarations(file):
        where = f"{file.name}: {full_name(scope, decl.name)}"
        if decl.type in ("message", "enum"):
            kind = visible.get(decl.type_name, ("", None))[0]
            if kind != decl.type:
                raise ValidationError(f"{where} refers to unknown {decl.type} {decl.type_name}")
        if not is_extension:
            continue

        if decl.extendee in OPTIONS_TYPES:
            if decl.number < FIRST_CUSTOM_OPTION:
                raise ValidationError(
                    f"{where}: extensions of {decl.extendee} start at {FIRST_CUSTOM_OPTION}"
                )
        else:
            kind, extendee = visible.get(decl.extendee, ("", None))
            if kind != "message":
                raise ValidationError(f"{where} extends unknown message {decl.extendee}")
            if not any(r.start <= decl.number < r.end for r in extendee.extension_ranges):
                raise ValidationError(
                    f"{where}: {decl.number} is not in an extension range of {decl.extendee}"
                )

        key = (decl.extendee, decl.number)
        name = full_name(scope, decl.name)
        if key in extensions:
            raise ValidationError(
                f"{where} conflicts with {extensions[key]}: both extend "
                f"{decl.extendee} with number {decl.number}"
            )
        extensions[key] = name


def _check_custom_options(file: FileUnit, visible: dict[str, Symbol]) -> None:
    """Check every custom option names an extension `file` can see."""
    elements = [(file.name, FILE_OPTIONS, file.options)] + list(_all_options(file))
    for owner, options_type, options in elements:
        for option in options.custom:
            kind, decl = visible.get(option.name, ("", None))
            if kind != "extension" or decl.extendee != options_type:
                raise ValidationError(
                    f"{file.name}: {owner}: custom option {option.name} is not an "
                    f"extension of {options_type} visible from this file"
                )
            if decl.number != option.number or decl.type != option.type:
                raise ValidationError(
                    f"{file.name}: {owner}: custom option {option.name} does not match "
                    f"its extension ({decl.type} = {decl.number})"
                )


def validate(descriptor_set: DescriptorSet) -> None:
    """Validate the preconditions of code generation for a whole set.

    Files must be unique, every dependency must be present and listed earlier
    than its dependents (which also rules out cycles), and a full runtime file
    may not depend on a lite runtime file. Every name must be defined once,
    type names and extendees must resolve within a file's dependency closure,
    extension numbers must fit their extendee and may not be claimed twice,
    and custom options must name an extension the file can see.
    """
    seen: dict[str, FileUnit] = {}
    names = {f.name for f in descriptor_set.files}
    owners = _builtin_symbols()
    symbols: dict[str, dict[str, Symbol]] = {}
    extensions: dict[tuple[str, int], str] = {}

    for file in descriptor_set.files:
        if file.name in seen:
            raise ValidationError(f"File {file.name} appears more than once")

        for dependency in file.dependencies:
            if dependency == file.name:
                raise ValidationError(f"File {file.name} depends on itself")
            if dependency not in names:
                raise ValidationError(f"{file.name} depends on {dependency}, which is missing")
            if dependency not in seen:
                raise ValidationError(
                    f"{file.name} depends on {dependency}, which is not ordered before it "
                    f"(cyclic or out of order dependencies)"
                )
            if seen[dependency].options.lite_runtime and not file.options.lite_runtime:
                raise ValidationError(
                    f"{file.name} uses the full runtime but depends on lite runtime "
                    f"file {dependency}"
                )

        validate_file(file)
        symbols[file.name] = _symbols(file)
        _claim(file, symbols[file.name], owners)

        visible = dict(symbols[file.name])
        for dependency in registration_closure(file, list(seen.values())):
            visible.update(symbols[dependency.name])
        _check_references(file, visible, extensions)
        _check_custom_options(file, visible)

        seen[file.name] = file


def load(text: str | Json) -> DescriptorSet:
    """Load and validate a JSON descriptor set.

    Accepts either ``{"files": [...]}`` or a bare list of files.
    """
    data = json.loads(text) if isinstance(text, str) else text
    if isinstance(data, list):
        data = {"files": data}

    descriptor_set = DescriptorSet.from_dict(data)
    validate(descriptor_set)

    logger.info("Loaded %d file(s)", len(descriptor_set.files))
    return descriptor_set
