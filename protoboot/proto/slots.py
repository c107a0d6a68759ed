"""Write-once storage for a generated module's static metadata handles."""

from collections.abc import Iterator
from typing import Any

from .errors import SlotError

_UNSET: Any = object()


class SlotTable:
    """Named slots declared up front and assigned exactly once.

    Generated modules declare every slot before the descriptor tree exists and
    hand the table to their binder, which fills it in once the tree is built.

    Example:
        slots = SlotTable("descriptor", "internal_static_geo.Point_descriptor")
        slots.assign("descriptor", root)
        slots.get("descriptor")
    """

    def __init__(self, *names: str) -> None:
        self._values: dict[str, Any] = {}
        for name in names:
            if name in self._values:
                raise SlotError(f"Slot {name} declared twice")
            self._values[name] = _UNSET

    def assign(self, name: str, value: Any) -> None:
        """Write a slot. Each slot may be written once, with a non-None value."""
        if name not in self._values:
            raise SlotError(f"Slot {name} was not declared")
        if value is None:
            raise SlotError(f"Slot {name} cannot hold None")
        if self._values[name] is not _UNSET:
            raise SlotError(f"Slot {name} is already assigned")
        self._values[name] = value

    def get(self, name: str) -> Any:
        """Read a slot. Reading before assignment is an error."""
        try:
            value = self._values[name]
        except KeyError:
            raise SlotError(f"Slot {name} was not declared") from None
        if value is _UNSET:
            raise SlotError(f"Slot {name} read before assignment")
        return value

    def is_assigned(self, name: str) -> bool:
        return self._values.get(name, _UNSET) is not _UNSET

    def names(self) -> tuple[str, ...]:
        """Slot names in declaration order."""
        return tuple(self._values)

    def unassigned(self) -> list[str]:
        return [name for name, value in self._values.items() if value is _UNSET]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        assigned = len(self._values) - len(self.unassigned())
        return f"SlotTable({assigned}/{len(self._values)} assigned)"
