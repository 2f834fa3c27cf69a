#!/usr/bin/env python3
"""
iTunes Library - read iTunes / Music library exports

A Python package that loads an exported iTunes or Music library property
list into memory and answers track, playlist and metadata queries.
"""

__version__ = "1.0.0"

from .core.exceptions import (
    DecodeError,
    InvalidPathError,
    ItunesLibraryError,
    LibraryIOError,
    NotFoundError,
    NotReadyError,
)
from .core.library import ItunesLibrary
from .core.models import PLAYLIST_FIELDS, TRACK_FIELDS, Playlist, Track, project
from .core.normalizer import normalize_keys

__all__ = [
    "ItunesLibrary",
    "Track",
    "Playlist",
    "TRACK_FIELDS",
    "PLAYLIST_FIELDS",
    "project",
    "normalize_keys",
    "ItunesLibraryError",
    "InvalidPathError",
    "LibraryIOError",
    "DecodeError",
    "NotReadyError",
    "NotFoundError",
]
