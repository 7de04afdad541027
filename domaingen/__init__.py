"""domaingen - Domain model code generator."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("domaingen")
except PackageNotFoundError:
    __version__ = "(local)"
