"""Python code generator: one module per file unit, bootstrapping its own descriptor."""

import logging
from importlib import resources

from jinja2 import Environment, PackageLoader

from . import encoder, extensions, members, naming, slots
from .types import DescriptorSet, FileUnit

logger = logging.getLogger(__name__)

RUNTIME_FILES = [
    "__init__.py",
    "types.py",
    "errors.py",
    "wire.py",
    "registry.py",
    "slots.py",
    "descriptor.py",
    "message.py",
    "pool.py",
    "lite.py",
]

env = Environment(
    loader=PackageLoader("protoboot.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")


class GenerationError(RuntimeError):
    """Raised when a module cannot be generated from a descriptor set."""


def _imports(file: FileUnit, closure: list[FileUnit]) -> list[str]:
    """Import statements for the direct dependencies, then the rest of the closure."""
    by_name = {f.name: f for f in closure}
    ordered = [by_name[name] for name in file.dependencies]
    ordered += [f for f in closure if f.name not in file.dependencies]

    lines = []
    for dependency in ordered:
        path = naming.module_path(dependency)
        alias = naming.module_alias(dependency)
        lines.append(f"import {path}" if path == alias else f"import {path} as {alias}")
    return lines


def _exports(file: FileUnit, reserved: frozenset[str]) -> list[str]:
    if not file.options.public_classes:
        return []
    names = [naming.identifier(e.name, reserved) for e in file.enum_types]
    names += [naming.identifier(m.name, reserved) for m in file.message_types]
    names += [extensions.extension_attribute(d, False, reserved) for d in file.extensions]
    return names + ["descriptor", "register_all_extensions"]


def render(
    file: FileUnit | str,
    files: DescriptorSet | list[FileUnit],
    runtime_import: str = "protoboot.proto",
    conservative: bool = True,
) -> str:
    """Render the module generated for `file`.

    Args:
        file: The file unit, or its name in `files`.
        files: Every file of the compilation; dependencies are looked up here.
        runtime_import: Import path of the descriptor runtime package.
        conservative: Always build an extension registry at load time, even
            when no extension is visible from the file.

    Raises:
        GenerationError: If the file or one of its dependencies is not in `files`.
    """
    units = files.files if isinstance(files, DescriptorSet) else files
    name = file if isinstance(file, str) else file.name
    unit = next((f for f in units if f.name == name), None)
    if unit is None:
        raise GenerationError(f"File {name} is not in the descriptor set")

    try:
        closure = extensions.registration_closure(unit, units)
    except KeyError as e:
        raise GenerationError(str(e.args[0])) from e

    lite = unit.options.lite_runtime
    by_name = {d.name: d for d in closure}
    direct = [naming.module_alias(by_name[dep]) for dep in unit.dependencies]
    aliases = [naming.module_alias(d) for d in closure]
    # Generated names may not shadow the imported dependency modules
    reserved = naming.module_names(aliases)

    declared = slots.declare_slots(unit, lite=lite)
    chunks = [] if lite else encoder.encode_chunks(unit)
    uses_enum = bool(unit.enum_types) or any(
        v.message.enum_types for v in naming.visit_messages(unit)
    )

    logger.debug(
        "Rendering %s as %s (%s, %d slot(s))",
        unit.name,
        naming.module_path(unit),
        "lite" if lite else "full",
        len(declared),
    )

    return template.render(
        file=unit,
        lite=lite,
        runtime_import=runtime_import,
        imports=_imports(unit, closure),
        exports=_exports(unit, reserved),
        registration=extensions.registration_lines(unit, reserved),
        extensions=[
            members.extension_source(d, unit.package, False, reserved) for d in unit.extensions
        ],
        slots=[s.name for s in declared],
        enums=members.enums_source(unit, reserved),
        uses_enum=uses_enum,
        messages=members.messages_source(unit, lite, reserved),
        chunks=chunks,
        initializers=slots.initializer_lines(unit, lite=lite, reserved=reserved),
        uses_extensions=extensions.uses_extensions(unit, units, conservative=conservative),
        dependencies=direct,
        closure=aliases,
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("protoboot.proto").joinpath(filename).read_text()
        result[filename] = content
    return result
