"""Process-wide descriptor storage and the load-time bootstrap sequence."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from enum import StrEnum, auto
from typing import Any

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf.descriptor import Descriptor, FileDescriptor

from .descriptor import CustomOptions, LoadedFile, interpret_options, option_key
from .errors import DescriptorError
from .registry import ExtensionRegistry
from .slots import SlotTable
from .types import DESCRIPTOR_PROTO
from .wire import decode_embedded, decode_file

logger = logging.getLogger(__name__)


class BootstrapState(StrEnum):
    """Lifecycle of one file's descriptor."""

    UNLOADED = auto()
    BYTES_EMBEDDED = auto()  # Embedded chunks decoded to bytes
    RAW_TREE_BUILT = auto()  # Linked tree exists, binder not yet run
    ASSIGNED = auto()  # Slots bound, options interpreted


Binder = Callable[[FileDescriptor, SlotTable], ExtensionRegistry | None]
Listener = Callable[[str, BootstrapState], None]


class DescriptorPool:
    """Arena of bootstrapped file descriptors keyed by file name.

    Each file is built at most once. Building requires every dependency to be
    ASSIGNED already; generated modules guarantee this by importing their
    dependency modules first. A failed build leaves no trace in the states or
    files of the pool.

    Descriptors are linked by a private ``google.protobuf`` descriptor pool.
    That pool is append-only: a file it accepted stays there even if its
    bootstrap fails later on, and a retry must carry identical bytes.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._pool = descriptor_pool.DescriptorPool()
        self._added: dict[str, tuple[bytes, FileDescriptor]] = {}
        self._files: dict[str, LoadedFile] = {}
        self._states: dict[str, BootstrapState] = {}
        self._listeners: list[Listener] = []

        # Options extensions extend the messages declared here
        try:
            self._pool.FindFileByName(DESCRIPTOR_PROTO)
        except KeyError:
            self._pool.AddSerializedFile(descriptor_pb2.DESCRIPTOR.serialized_pb)

    def add_listener(self, listener: Listener) -> None:
        """Call `listener(file_name, state)` on every state transition."""
        self._listeners.append(listener)

    def state(self, name: str) -> BootstrapState:
        return self._states.get(name, BootstrapState.UNLOADED)

    def find_file(self, name: str) -> FileDescriptor | None:
        loaded = self._files.get(name)
        return loaded.descriptor if loaded else None

    def loaded_file(self, name: str) -> LoadedFile | None:
        """Return the pool's record of an assigned file."""
        return self._files.get(name)

    def find_message_type(self, full_name: str) -> Descriptor | None:
        try:
            found = self._pool.FindMessageTypeByName(full_name)
        except KeyError:
            return None
        return found if found.file.name in self._files else None

    def custom_options(self, descriptor: Any) -> CustomOptions | None:
        """Return the interpreted custom options of a descriptor.

        Accepts file, message, field, extension, enum and enum value
        descriptors of assigned files; returns None for anything else.
        """
        if isinstance(descriptor, FileDescriptor):
            loaded = self._files.get(descriptor.name)
            return loaded.file_options if loaded else None

        key = option_key(descriptor)
        for loaded in self._files.values():
            found = loaded.options.get(key)
            if found is not None:
                return found
        return None

    def files(self) -> list[FileDescriptor]:
        """Assigned files, in the order they completed."""
        return [loaded.descriptor for loaded in self._files.values()]

    def build_generated_file(
        self,
        name: str,
        chunks: Iterable[str],
        dependencies: Sequence[FileDescriptor | None],
        binder: Binder,
        slots: SlotTable,
    ) -> FileDescriptor:
        """Get or build the descriptor of a generated module.

        Args:
            name: File name the module was generated from.
            chunks: The module's embedded base64 descriptor chunks.
            dependencies: Descriptors of the direct dependencies, in order.
            binder: Called once the tree exists; fills `slots` and returns the
                extension registry used to interpret custom options.
            slots: The module's static slot table.

        Returns:
            The assigned file descriptor.

        Raises:
            DescriptorError: If the data is corrupt, dependencies are missing
                or mismatched, protobuf rejects the descriptor, a custom
                option cannot be resolved or the binder leaves a slot empty.
        """
        with self._lock:
            existing = self._files.get(name)
            if existing is not None:
                return self._rebind(existing, chunks, binder, slots)
            if self.state(name) != BootstrapState.UNLOADED:
                raise DescriptorError(f"{name} is already being bootstrapped")

            try:
                return self._build(name, chunks, dependencies, binder, slots)
            except Exception as e:
                logger.error("Failed to bootstrap %s: %s", name, e)
                self._transition(name, BootstrapState.UNLOADED)
                raise

    def _build(
        self,
        name: str,
        chunks: Iterable[str],
        dependencies: Sequence[FileDescriptor | None],
        binder: Binder,
        slots: SlotTable,
    ) -> FileDescriptor:
        self._transition(name, BootstrapState.BYTES_EMBEDDED)
        data = decode_embedded(chunks)
        proto = decode_file(data)
        if proto.name != name:
            raise DescriptorError(f"Embedded descriptor is for {proto.name}, expected {name}")

        self._check_dependencies(proto, dependencies)
        root = self._add(proto, data)
        self._transition(name, BootstrapState.RAW_TREE_BUILT)

        registry = binder(root, slots)
        if registry is None:
            registry = ExtensionRegistry()
        file_options, options = interpret_options(proto, registry)
        registry.freeze()
        self._check_slots(name, slots)

        self._files[name] = LoadedFile(root, proto, data, registry, file_options, options)
        self._transition(name, BootstrapState.ASSIGNED)
        return root

    def _check_dependencies(
        self,
        proto: descriptor_pb2.FileDescriptorProto,
        dependencies: Sequence[FileDescriptor | None],
    ) -> None:
        names = []
        for dependency in dependencies:
            if dependency is None:
                raise DescriptorError(f"{proto.name} depends on a lite runtime file")
            loaded = self._files.get(dependency.name)
            if loaded is None or loaded.descriptor is not dependency:
                raise DescriptorError(
                    f"Dependency {dependency.name} of {proto.name} has not been bootstrapped"
                )
            names.append(dependency.name)

        # descriptor.proto is always present and has no generated module
        declared = [d for d in proto.dependency if d != DESCRIPTOR_PROTO]
        if names != declared:
            raise DescriptorError(
                f"Dependencies passed for {proto.name} {names} do not match "
                f"those in its descriptor {declared}"
            )

    def _add(self, proto: descriptor_pb2.FileDescriptorProto, data: bytes) -> FileDescriptor:
        added = self._added.get(proto.name)
        if added is not None:
            if added[0] != data:
                raise DescriptorError(f"{proto.name} is already defined with different contents")
            return added[1]

        try:
            root = self._pool.AddSerializedFile(data)
        except (TypeError, KeyError, ValueError) as e:
            raise DescriptorError(f"Cannot build {proto.name}: {e}") from e
        self._added[proto.name] = (data, root)
        logger.debug("Linked %s", proto.name)
        return root

    @staticmethod
    def _check_slots(name: str, slots: SlotTable) -> None:
        missing = slots.unassigned()
        if missing:
            raise DescriptorError(f"{name}: binder left slot(s) unassigned: {', '.join(missing)}")

    def _rebind(
        self, existing: LoadedFile, chunks: Iterable[str], binder: Binder, slots: SlotTable
    ) -> FileDescriptor:
        # A module executed again (e.g. reloaded) reuses the descriptor built
        # the first time and only fills in its fresh slots.
        if decode_embedded(chunks) != existing.serialized:
            raise DescriptorError(f"{existing.name} is already defined with different contents")
        binder(existing.descriptor, slots)
        self._check_slots(existing.name, slots)
        logger.debug("Rebound slots of %s", existing.name)
        return existing.descriptor

    def _transition(self, name: str, state: BootstrapState) -> None:
        if state == BootstrapState.UNLOADED:
            self._states.pop(name, None)
        else:
            self._states[name] = state
        logger.debug("%s -> %s", name, state)
        for listener in self._listeners:
            listener(name, state)


_default_pool = DescriptorPool()


def default_pool() -> DescriptorPool:
    """Return the process-wide pool generated modules bootstrap into."""
    return _default_pool


def reset_default_pool() -> DescriptorPool:
    """Replace the process-wide pool with an empty one and return it."""
    global _default_pool
    _default_pool = DescriptorPool()
    return _default_pool
