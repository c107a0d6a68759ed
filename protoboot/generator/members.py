"""Source emitters for generated enums, message classes and extension handles."""

from collections.abc import Collection

from .extensions import extension_attribute
from .naming import (
    MESSAGE_NAMES,
    MODULE_NAMES,
    MessageVisit,
    deduplicate,
    enum_member,
    identifier,
    visit_messages,
)
from .slots import accessor_slot, descriptor_slot, field_attributes, tuple_source
from .types import EnumType, FieldDecl, FileUnit, full_name

INDENT = "    "


def _indent(lines: list[str], level: int) -> list[str]:
    prefix = INDENT * level
    return [prefix + line if line else line for line in lines]


def extension_source(
    decl: FieldDecl, scope: str, nested: bool, reserved: Collection[str] = MODULE_NAMES
) -> str:
    """Statement creating the handle of one extension."""
    args = [
        f'"{full_name(scope, decl.name)}"',
        str(decl.number),
        f'"{decl.extendee}"',
        f"_pbt.FieldType.{decl.type.upper()}",
        f"_pbt.Label.{decl.label.upper()}",
    ]
    if decl.type_name:
        args.append(f'type_name="{decl.type_name}"')
    return f"{extension_attribute(decl, nested, reserved)} = _pbm.Extension({', '.join(args)})"


def enum_lines(
    enum: EnumType, nested: bool = False, reserved: Collection[str] = MODULE_NAMES
) -> list[str]:
    """Source of an ``enum.IntEnum`` class for `enum`."""
    name = identifier(enum.name, MESSAGE_NAMES if nested else reserved)
    lines = [f"class {name}(_enum.IntEnum):"]
    if enum.options.deprecated:
        lines += [f'{INDENT}"""Deprecated."""', ""]
    members = deduplicate(enum_member(value.name) for value in enum.values)
    for member, value in zip(members, enum.values):
        lines.append(f"{INDENT}{member} = {value.number}")
    return lines


def message_lines(
    visit: MessageVisit,
    children: dict[tuple[str, ...], list[MessageVisit]],
    lite: bool,
    reserved: Collection[str] = MODULE_NAMES,
) -> list[str]:
    """Source of the class generated for one message, nested types included.

    `children` maps a message path to the visits of its direct nested types.
    """
    message = visit.message
    name = identifier(message.name, reserved if visit.parent is None else MESSAGE_NAMES)
    attributes = field_attributes(visit)
    repeated = [a for a, f in zip(attributes, message.fields) if f.label == "repeated"]

    body: list[str] = []
    if message.options.deprecated:
        body += ['"""Deprecated."""', ""]
    body.append("_slot_table = _slots")
    body.append(f'_descriptor_slot = "{descriptor_slot(visit)}"')
    if not lite:
        body.append(f'_accessor_slot = "{accessor_slot(visit)}"')
    body.append(f"_field_names = {tuple_source(attributes)}")
    if repeated:
        body.append(f"_repeated_fields = frozenset({tuple_source(repeated)})")

    for enum in message.enum_types:
        body += [""] + enum_lines(enum, nested=True)
    for child in children.get(visit.path, []):
        body += [""] + message_lines(child, children, lite)
    if message.extensions:
        body.append("")
        for decl in message.extensions:
            body.append(extension_source(decl, visit.full_name, nested=True))

    return [f"class {name}(_pbm.Message):"] + _indent(body, 1)


def messages_source(
    file: FileUnit, lite: bool, reserved: Collection[str] = MODULE_NAMES
) -> list[str]:
    """Source of every top-level message class of `file`, two blank lines apart."""
    children: dict[tuple[str, ...], list[MessageVisit]] = {}
    top: list[MessageVisit] = []
    for visit in visit_messages(file):
        if visit.parent is None:
            top.append(visit)
        else:
            children.setdefault(visit.parent.path, []).append(visit)

    lines: list[str] = []
    for visit in top:
        if lines:
            lines += ["", ""]
        lines += message_lines(visit, children, lite, reserved)
    return lines


def enums_source(file: FileUnit, reserved: Collection[str] = MODULE_NAMES) -> list[str]:
    """Source of every top-level enum class of `file`, two blank lines apart."""
    lines: list[str] = []
    for enum in file.enum_types:
        if lines:
            lines += ["", ""]
        lines += enum_lines(enum, reserved=reserved)
    return lines
