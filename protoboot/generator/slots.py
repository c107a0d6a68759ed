"""Static metadata slots of generated modules and the code that fills them."""

from collections.abc import Collection
from dataclasses import dataclass
from enum import StrEnum, auto

from .extensions import extension_attribute
from .naming import (
    MESSAGE_NAMES,
    MODULE_NAMES,
    MessageVisit,
    class_path,
    deduplicate,
    identifier,
    slot_name,
    visit_messages,
)
from .types import FileUnit

FILE_SLOT = "descriptor"


class SlotKind(StrEnum):
    FILE = auto()
    DESCRIPTOR = auto()
    ACCESSOR_TABLE = auto()


@dataclass
class Slot:
    name: str
    kind: SlotKind
    type_name: str = ""


def descriptor_slot(visit: MessageVisit) -> str:
    return slot_name(visit.full_name, "descriptor")


def accessor_slot(visit: MessageVisit) -> str:
    return slot_name(visit.full_name, "accessor_table")


def field_attributes(visit: MessageVisit) -> list[str]:
    """Attribute names of a generated message's fields, in declaration order."""
    return deduplicate(identifier(f.name, MESSAGE_NAMES) for f in visit.message.fields)


def tuple_source(items: list[str]) -> str:
    """Python literal of a tuple of strings."""
    quoted = [f'"{item}"' for item in items]
    if len(quoted) == 1:
        return f"({quoted[0]},)"
    return f"({', '.join(quoted)})"


def declare_slots(file: FileUnit, lite: bool = False) -> list[Slot]:
    """Declare the slots of a generated module in message visit order.

    Full mode: the file descriptor slot, then a descriptor slot and an
    accessor table slot per message. Lite mode: a type slot per message.
    """
    slots = [] if lite else [Slot(FILE_SLOT, SlotKind.FILE)]
    for visit in visit_messages(file):
        slots.append(Slot(descriptor_slot(visit), SlotKind.DESCRIPTOR, visit.full_name))
        if not lite:
            slots.append(Slot(accessor_slot(visit), SlotKind.ACCESSOR_TABLE, visit.full_name))
    return slots


def _message_source(visit: MessageVisit) -> str:
    name = visit.message.name
    if visit.parent is None:
        return f'root.message_types_by_name["{name}"]'
    return f'slots.get("{descriptor_slot(visit.parent)}").nested_types_by_name["{name}"]'


def _initialize_full(file: FileUnit, reserved: Collection[str]) -> list[str]:
    lines = [f'slots.assign("{FILE_SLOT}", root)']
    binds = [
        f"{extension_attribute(decl, False, reserved)}"
        f'.bind(root.extensions_by_name["{decl.name}"])'
        for decl in file.extensions
    ]

    for visit in visit_messages(file):
        desc = descriptor_slot(visit)
        names = tuple_source(field_attributes(visit))
        lines.append(f'slots.assign("{desc}", {_message_source(visit)})')
        lines.append(
            f'slots.assign("{accessor_slot(visit)}", '
            f'_pbm.FieldAccessorTable(slots.get("{desc}"), {names}))'
        )
        owner = class_path(visit.path, reserved)
        for decl in visit.message.extensions:
            binds.append(
                f"{owner}.{extension_attribute(decl, nested=True)}"
                f'.bind(slots.get("{desc}").extensions_by_name["{decl.name}"])'
            )

    return lines + binds


def _initialize_lite(file: FileUnit, reserved: Collection[str]) -> list[str]:
    return [
        f'slots.assign("{descriptor_slot(visit)}", '
        f'_pbl.TypeHandle("{visit.full_name}", {class_path(visit.path, reserved)}))'
        for visit in visit_messages(file)
    ]


def initializer_lines(
    file: FileUnit, lite: bool = False, reserved: Collection[str] = MODULE_NAMES
) -> list[str]:
    """Emit the initialize pass, one statement per line, in slot order.

    In full mode the statements run inside the binder, where ``root`` is the
    file descriptor and ``slots`` the module's slot table; messages are looked
    up by name and extension handles are bound last. In lite mode only the
    type slots are filled. `reserved` holds the top-level names generated
    classes must not take.
    """
    if lite:
        return _initialize_lite(file, reserved)
    return _initialize_full(file, reserved)
