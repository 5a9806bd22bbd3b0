"""Exception types raised by :mod:`nsmover`.

Everything the library raises on purpose derives from :class:`RenameError`
so that callers (and the CLI) can catch a single type.  Plain I/O failures
are not wrapped: an ``OSError`` raised half way through a rename propagates
as is and leaves whatever was already written on disk.
"""

from __future__ import annotations


class RenameError(Exception):
    """Base class for every error raised by nsmover."""


class InvalidArgument(RenameError, ValueError):
    """A path argument is blank or does not exist."""


class ResolutionError(RenameError):
    """No configured source root contains the given path."""


class HeaderParseError(RenameError):
    """A file has no usable ``ns`` declaration."""


class ReaderError(HeaderParseError):
    """The s-expression reader hit malformed input."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset
