#!/usr/bin/env python3
"""
Exception types raised by the iTunes library reader.

Load-phase failures (InvalidPathError, LibraryIOError, DecodeError) come out
of ``ItunesLibrary.open``; query-phase failures (NotReadyError, NotFoundError)
come out of the individual query methods.
"""

NOT_READY_MESSAGE = "No data ready (call open() first)!"


class ItunesLibraryError(Exception):
    """Base class for all library reader errors."""


class InvalidPathError(ItunesLibraryError, ValueError):
    """Path is missing, not a file, or not readable."""


class LibraryIOError(ItunesLibraryError, OSError):
    """The library file could not be read."""


class DecodeError(ItunesLibraryError, ValueError):
    """The library file is not a valid property list."""


class NotReadyError(ItunesLibraryError, RuntimeError):
    """A query was made before a library was successfully opened."""

    def __init__(self, message: str = NOT_READY_MESSAGE):
        super().__init__(message)


class NotFoundError(ItunesLibraryError, LookupError):
    """No track or playlist exists for the requested id."""
