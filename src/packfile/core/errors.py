"""Exceptions raised by the PackFile core."""

__all__ = ["PackError", "PackFormatError", "PackInvariantError"]


class PackError(Exception):
    """Base class for all PackFile errors."""


class PackFormatError(PackError, ValueError):
    """The backing file is not a valid pack (bad magic, version, table)."""


class PackInvariantError(PackError, RuntimeError):
    """An entry has neither cached content nor a known on-disk location."""
