"""protoboot - Schema compiler backend with self-bootstrapping descriptors."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protoboot")
except PackageNotFoundError:
    __version__ = "(local)"
