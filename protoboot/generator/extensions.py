"""Static analysis of extension visibility and the registration code it produces."""

from collections.abc import Collection

from .naming import MESSAGE_NAMES, MODULE_NAMES, class_path, identifier, visit_messages
from .types import DescriptorSet, FieldDecl, FileUnit, full_name


def extension_attribute(
    decl: FieldDecl, nested: bool, reserved: Collection[str] = MODULE_NAMES
) -> str:
    """Name of the generated handle for an extension declaration.

    `reserved` applies to file-level extensions; nested ones avoid the
    attributes of their message class.
    """
    return identifier(decl.name, MESSAGE_NAMES if nested else reserved)


def local_extensions(
    file: FileUnit, reserved: Collection[str] = MODULE_NAMES
) -> list[tuple[str, str]]:
    """Return (full name, Python expression) for each extension declared in `file`.

    File-level extensions come first, then the extensions nested in each
    message in visit order.
    """
    result = [
        (full_name(file.package, decl.name), extension_attribute(decl, False, reserved))
        for decl in file.extensions
    ]
    for visit in visit_messages(file):
        owner = class_path(visit.path, reserved)
        for decl in visit.message.extensions:
            attribute = extension_attribute(decl, nested=True)
            result.append((full_name(visit.full_name, decl.name), f"{owner}.{attribute}"))
    return result


def registration_lines(file: FileUnit, reserved: Collection[str] = MODULE_NAMES) -> list[str]:
    """Body of the generated ``register_all_extensions(registry)`` function."""
    lines = [f"registry.add({expr})" for _, expr in local_extensions(file, reserved)]
    return lines or ["pass"]


def _files_by_name(files: DescriptorSet | list[FileUnit]) -> dict[str, FileUnit]:
    units = files.files if isinstance(files, DescriptorSet) else files
    return {f.name: f for f in units}


def registration_closure(file: FileUnit, files: DescriptorSet | list[FileUnit]) -> list[FileUnit]:
    """Every file in the transitive dependency closure of `file`, each once.

    Files are listed depth-first in the order dependencies are declared, so a
    file reachable along several paths appears at its first visit only.
    """
    by_name = _files_by_name(files)
    seen: dict[str, FileUnit] = {}

    def visit(name: str) -> None:
        if name in seen or name == file.name:
            return
        dependency = by_name.get(name)
        if dependency is None:
            raise KeyError(f"{file.name} depends on unknown file {name}")
        seen[name] = dependency
        for transitive in dependency.dependencies:
            visit(transitive)

    for name in file.dependencies:
        visit(name)
    return list(seen.values())


def collect_transitive(
    file: FileUnit, files: DescriptorSet | list[FileUnit]
) -> list[tuple[str, str]]:
    """List (file name, extension full name) for every extension `file` can see.

    Local extensions come first, then those of each file in the dependency
    closure.
    """
    result = [(file.name, name) for name, _ in local_extensions(file)]
    for dependency in registration_closure(file, files):
        result.extend((dependency.name, name) for name, _ in local_extensions(dependency))
    return result


def uses_extensions(
    file: FileUnit,
    files: DescriptorSet | list[FileUnit] | None = None,
    conservative: bool = True,
) -> bool:
    """Whether the generated binder should build an extension registry.

    By default this always answers True. With ``conservative=False`` it checks
    whether any extension is visible from `file`.
    """
    if conservative:
        return True
    if files is None:
        return bool(local_extensions(file))
    return bool(collect_transitive(file, files))


def bootstrap_order(file: FileUnit, files: DescriptorSet | list[FileUnit]) -> list[str]:
    """File names in the order importing `file`'s module bootstraps them.

    Dependencies finish before their dependents, and a file shared by several
    dependents is bootstrapped once, the first time it is imported.
    """
    by_name = _files_by_name(files)
    order: list[str] = []

    def visit(name: str) -> None:
        if name in order:
            return
        unit = by_name.get(name)
        if unit is None:
            raise KeyError(f"{file.name} depends on unknown file {name}")
        for dependency in unit.dependencies:
            visit(dependency)
        order.append(name)

    for dependency in file.dependencies:
        visit(dependency)
    order.append(file.name)
    return order
