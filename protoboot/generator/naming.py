"""Naming helpers: module names, slot names and Python identifiers."""

import keyword
import posixpath
import re
from collections.abc import Collection, Iterable, Iterator
from dataclasses import dataclass

from .types import FileUnit, MessageType, full_name

_NON_IDENT = re.compile(r"[^0-9A-Za-z_]")

# Names a generated module defines itself or uses as parameters
MODULE_NAMES = frozenset(
    [
        "descriptor",
        "register_all_extensions",
        "registry",
        "root",
        "slots",
        "_DESCRIPTOR_DATA",
        "_assign_descriptors",
        "_assign_lite_slots",
        "_enum",
        "_pbl",
        "_pbm",
        "_pbp",
        "_pbr",
        "_pbs",
        "_pbt",
        "_slots",
    ]
)

# Attributes of the Message base class, and module names read inside class
# bodies, that fields and nested types must not shadow
MESSAGE_NAMES = frozenset(
    [
        "descriptor",
        "accessor_table",
        "_slot_table",
        "_descriptor_slot",
        "_accessor_slot",
        "_field_names",
        "_repeated_fields",
        "_enum",
        "_pbm",
        "_pbt",
        "_slots",
    ]
)

# Names enum classes claim for themselves
ENUM_NAMES = frozenset(["mro", "name", "value"])


def to_snake_case(name: str) -> str:
    """Convert a file basename such as "GeoShapes-v2" to "geo_shapes_v2"."""
    name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name)
    name = _NON_IDENT.sub("_", name)
    return name.lower().strip("_") or "_"


def identifier(name: str, reserved: Collection[str] = ()) -> str:
    """Make `name` usable as a Python identifier.

    Names starting with a double underscore, which classes mangle, get a "V"
    prefix. Keywords and names in `reserved` get a trailing underscore.
    """
    name = _NON_IDENT.sub("_", name)
    if name[:1].isdigit():
        name = "_" + name
    if name.startswith("__"):
        name = "V" + name
    if keyword.iskeyword(name) or name in reserved:
        name += "_"
    return name


def enum_member(name: str) -> str:
    """Make `name` usable as a member of an ``enum.IntEnum`` class."""
    name = identifier(name, ENUM_NAMES)
    if len(name) > 2 and name[0] == name[-1] == "_" and name[1] != "_" and name[-2] != "_":
        # _sunder_ names belong to enum
        name = "V" + name
    return name


def deduplicate(names: Iterable[str]) -> list[str]:
    """Append underscores to repeated names until every name is distinct."""
    seen: set[str] = set()
    result = []
    for name in names:
        while name in seen:
            name += "_"
        seen.add(name)
        result.append(name)
    return result


def module_names(aliases: Iterable[str]) -> frozenset[str]:
    """Reserved top-level names of a module binding its imports to `aliases`."""
    return MODULE_NAMES | frozenset(aliases)


def umbrella_name(file: FileUnit) -> str:
    """Name of the module generated for `file`."""
    if file.options.umbrella_name:
        return identifier(file.options.umbrella_name)
    base = posixpath.basename(file.name)
    if base.endswith(".proto"):
        base = base[: -len(".proto")]
    return f"{to_snake_case(base)}_pb"


def namespace(file: FileUnit) -> str:
    return ".".join(identifier(part) for part in file.options.namespace.split(".") if part)


def module_path(file: FileUnit) -> str:
    """Dotted import path of the module generated for `file`."""
    ns = namespace(file)
    return f"{ns}.{umbrella_name(file)}" if ns else umbrella_name(file)


def module_alias(file: FileUnit) -> str:
    """Name a dependent module binds `file`'s module to."""
    return module_path(file).replace(".", "_")


def output_path(file: FileUnit) -> str:
    """Relative path of the generated module for `file`."""
    return module_path(file).replace(".", "/") + ".py"


def slot_name(type_full_name: str, kind: str) -> str:
    """Name of a static slot, e.g. "internal_static_geo.Point_descriptor".

    The full name is kept dotted, so distinct types never share a slot.
    """
    return f"internal_static_{type_full_name}_{kind}"


@dataclass
class MessageVisit:
    """A message reached while walking a file, with its position in the tree."""

    message: MessageType
    full_name: str
    path: tuple[str, ...]
    parent: "MessageVisit | None"


def visit_messages(file: FileUnit) -> Iterator[MessageVisit]:
    """Walk every message of `file` depth-first, parents before children."""

    def walk(
        messages: list[MessageType], scope: str, path: tuple[str, ...], parent: MessageVisit | None
    ) -> Iterator[MessageVisit]:
        for message in messages:
            name = full_name(scope, message.name)
            visit = MessageVisit(message, name, path + (message.name,), parent)
            yield visit
            yield from walk(message.nested_types, visit.full_name, visit.path, visit)

    return walk(file.message_types, file.package, (), None)


def class_path(path: tuple[str, ...], reserved: Collection[str] = MODULE_NAMES) -> str:
    """Attribute path of a generated class, e.g. ("Shape", "Kind") -> "Shape.Kind".

    `reserved` holds the names the top-level class must not take.
    """
    if not path:
        return ""
    names = [identifier(path[0], reserved)] + [identifier(n, MESSAGE_NAMES) for n in path[1:]]
    return ".".join(names)
