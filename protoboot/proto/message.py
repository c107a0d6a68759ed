"""Base classes for generated messages and extension handles."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from .errors import DescriptorError, SlotError
from .types import FieldType, Label

if TYPE_CHECKING:
    from google.protobuf.descriptor import Descriptor, FieldDescriptor

    from .slots import SlotTable


class FieldAccessorTable:
    """Pairs a message's generated attribute names with its field descriptors.

    Names are matched to fields by position, so generated attribute names may
    differ from schema field names (e.g. escaped Python keywords).
    """

    def __init__(self, descriptor: Descriptor, attribute_names: Sequence[str]) -> None:
        if len(attribute_names) != len(descriptor.fields):
            raise DescriptorError(
                f"{descriptor.full_name}: {len(attribute_names)} accessor name(s) "
                f"for {len(descriptor.fields)} field(s)"
            )
        self.descriptor = descriptor
        self._fields = dict(zip(attribute_names, descriptor.fields))

    def __getitem__(self, attribute_name: str) -> FieldDescriptor:
        return self._fields[attribute_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def items(self) -> list[tuple[str, FieldDescriptor]]:
        return list(self._fields.items())


class Extension:
    """Static handle of an extension field.

    Generated modules create one handle per declared extension. In full mode
    the binder attaches the matching `FieldDescriptor`; lite modules leave it
    unbound.
    """

    def __init__(
        self,
        full_name: str,
        number: int,
        extendee: str,
        field_type: FieldType,
        label: Label = Label.OPTIONAL,
        type_name: str = "",
    ) -> None:
        self.full_name = full_name
        self.number = number
        self.extendee = extendee
        self.field_type = field_type
        self.label = label
        self.type_name = type_name
        self._descriptor: FieldDescriptor | None = None

    @property
    def descriptor(self) -> FieldDescriptor | None:
        return self._descriptor

    @property
    def is_repeated(self) -> bool:
        return self.label == Label.REPEATED

    def bind(self, descriptor: FieldDescriptor) -> None:
        """Attach the resolved descriptor. Allowed once."""
        if self._descriptor is not None:
            raise SlotError(f"Extension {self.full_name} is already bound")
        if descriptor.full_name != self.full_name or descriptor.number != self.number:
            raise DescriptorError(
                f"Extension {self.full_name}={self.number} bound to "
                f"{descriptor.full_name}={descriptor.number}"
            )
        self._descriptor = descriptor

    def __repr__(self) -> str:
        return f"Extension({self.full_name!r}, {self.number}, extendee={self.extendee!r})"


class Message:
    """Base class for generated message types.

    Generated subclasses define:
        _slot_table: ClassVar[SlotTable]  # the module's static slots
        _descriptor_slot: ClassVar[str]  # slot holding this type's handle
        _accessor_slot: ClassVar[str | None]  # None in lite mode
        _field_names: ClassVar[tuple[str, ...]]
        _repeated_fields: ClassVar[frozenset[str]]

    Example:
        point = Point(x=1, y=2)
        Point.descriptor().fields_by_name["x"].number
    """

    _slot_table: ClassVar[SlotTable]
    _descriptor_slot: ClassVar[str]
    _accessor_slot: ClassVar[str | None] = None
    _field_names: ClassVar[tuple[str, ...]] = ()
    _repeated_fields: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, **kwargs: Any) -> None:
        for name in self._field_names:
            if name in kwargs:
                value = kwargs.pop(name)
            elif name in self._repeated_fields:
                value = []
            else:
                value = None
            setattr(self, name, value)
        if kwargs:
            raise TypeError(
                f"{type(self).__name__} has no field(s) {', '.join(sorted(kwargs))}"
            )

    @classmethod
    def descriptor(cls) -> Any:
        """Return this type's static handle.

        A protobuf `Descriptor` in full mode, a `TypeHandle` in lite mode.
        """
        return cls._slot_table.get(cls._descriptor_slot)

    @classmethod
    def accessor_table(cls) -> FieldAccessorTable:
        if cls._accessor_slot is None:
            raise SlotError(f"{cls.__name__} has no field accessor table in lite mode")
        return cls._slot_table.get(cls._accessor_slot)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, n) == getattr(other, n) for n in self._field_names)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        args = ", ".join(f"{n}={getattr(self, n)!r}" for n in self._field_names)
        return f"{type(self).__name__}({args})"
