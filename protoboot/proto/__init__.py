"""protoboot descriptor runtime.

Generated modules import this package to rebuild their descriptors at load
time. Descriptors are ``google.protobuf`` descriptors; besides protobuf the
runtime needs only the standard library, so it can also be written next to
generated code with ``protoboot runtime``.
"""

from .descriptor import CustomOptions, LoadedFile
from .errors import DecodeError, DescriptorError, ExtensionConflictError, SlotError
from .lite import TypeHandle
from .message import Extension, FieldAccessorTable, Message
from .pool import BootstrapState, DescriptorPool, default_pool, reset_default_pool
from .registry import ExtensionRegistry
from .slots import SlotTable
from .types import FieldType, Label

__all__ = [
    "BootstrapState",
    "CustomOptions",
    "DecodeError",
    "DescriptorError",
    "DescriptorPool",
    "Extension",
    "ExtensionConflictError",
    "ExtensionRegistry",
    "FieldAccessorTable",
    "FieldType",
    "Label",
    "LoadedFile",
    "Message",
    "SlotError",
    "SlotTable",
    "TypeHandle",
    "default_pool",
    "reset_default_pool",
]
