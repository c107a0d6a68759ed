"""Extension registry used to interpret custom options at load time."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .errors import DescriptorError, ExtensionConflictError

if TYPE_CHECKING:
    from .message import Extension

logger = logging.getLogger(__name__)


class ExtensionRegistry:
    """Maps (extendee full name, field number) to extension handles.

    Registration is additive and duplicate tolerant: adding an extension that
    is already present under the same key is a no-op, so a file reached
    through several dependency paths can register its extensions any number
    of times. A *different* extension on an occupied key is a conflict.

    Example:
        registry = ExtensionRegistry()
        shapes_pb.register_all_extensions(registry)
        geo_pb.register_all_extensions(registry)
        ext = registry.find("geo.Point", 100)
    """

    def __init__(self) -> None:
        self._by_key: dict[tuple[str, int], Extension] = {}
        self._by_name: dict[str, Extension] = {}
        self._frozen = False

    def add(self, extension: Extension) -> None:
        """Register an extension handle."""
        if self._frozen:
            raise DescriptorError("Extension registry is frozen")

        key = (extension.extendee, extension.number)
        existing = self._by_key.get(key)
        if existing is not None:
            if existing is extension or existing.full_name == extension.full_name:
                return
            raise ExtensionConflictError(
                f"Extension {extension.full_name} conflicts with {existing.full_name}: "
                f"both extend {extension.extendee} with number {extension.number}"
            )

        self._by_key[key] = extension
        self._by_name[extension.full_name] = extension
        logger.debug("Registered extension %s on %s", extension.full_name, extension.extendee)

    def find(self, extendee: str, number: int) -> Extension | None:
        """Look up the extension of `extendee` with field number `number`."""
        return self._by_key.get((extendee, number))

    def find_by_name(self, full_name: str) -> Extension | None:
        return self._by_name.get(full_name)

    def extensions_for(self, extendee: str) -> list[Extension]:
        """Return every extension of `extendee`, ordered by field number."""
        found = [ext for (name, _), ext in self._by_key.items() if name == extendee]
        return sorted(found, key=lambda ext: ext.number)

    def freeze(self) -> None:
        """Reject further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[Extension]:
        return iter(self._by_key.values())

    def __contains__(self, full_name: object) -> bool:
        return full_name in self._by_name

    def __repr__(self) -> str:
        return f"ExtensionRegistry({sorted(self._by_name)})"
