"""Exceptions raised by the protoboot descriptor runtime."""


class DescriptorError(RuntimeError):
    """Raised when a file descriptor cannot be built at load time.

    This is fatal for the module being imported: the descriptor pool keeps no
    partial state for the failed file.
    """


class DecodeError(DescriptorError):
    """Raised when embedded descriptor data is corrupt."""


class ExtensionConflictError(DescriptorError):
    """Raised when two different extensions claim the same extendee and number."""


class SlotError(RuntimeError):
    """Raised on misuse of a write-once static metadata slot."""
