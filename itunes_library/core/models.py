#!/usr/bin/env python3
"""
Data models for the iTunes library reader.

Tracks and playlists are fixed-shape projections of the normalized library
tree: every record carries exactly the fields listed in ``TRACK_FIELDS`` or
``PLAYLIST_FIELDS``. Property lists have no null value, so ``None`` on a
model always means the field was absent from the export.
"""

import urllib.parse
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from .exceptions import NotReadyError

TRACK_FIELDS: Tuple[str, ...] = (
    "track_id",
    "size",
    "total_time",
    "date_modified",
    "date_added",
    "bit_rate",
    "sample_rate",
    "persistent_id",
    "track_type",
    "file_folder_count",
    "library_folder_count",
    "name",
    "artist",
    "album",
    "genre",
    "kind",
    "location",
)

PLAYLIST_FIELDS: Tuple[str, ...] = (
    "master",
    "playlist_id",
    "playlist_persistent_id",
    "all_items",
    "visible",
    "name",
    "playlist_items",
    "distinguished_kind",
    "music",
    "smart_info",
    "smart_criteria",
    "movies",
    "tv_shows",
    "podcasts",
    "itunesu",
    "audiobooks",
    "books",
)


def project(raw: Any, fields: Tuple[str, ...]) -> Dict[str, Any]:
    """
    Select a fixed set of fields from a raw record.

    Args:
        raw: Normalized raw mapping. Anything that is not a mapping is
            treated as an empty record.
        fields: Allow-list of field names.

    Returns:
        A new dictionary with exactly ``fields`` as keys; fields missing
        from ``raw`` map to None.
    """
    if not isinstance(raw, Mapping):
        return dict.fromkeys(fields)
    return {name: raw.get(name) for name in fields}


@dataclass
class Track:
    """Represents a single library track."""

    track_id: Optional[int] = None
    size: Optional[int] = None
    total_time: Optional[int] = None  # in milliseconds
    date_modified: Optional[datetime] = None
    date_added: Optional[datetime] = None
    bit_rate: Optional[int] = None
    sample_rate: Optional[int] = None
    persistent_id: Optional[str] = None
    track_type: Optional[str] = None
    file_folder_count: Optional[int] = None
    library_folder_count: Optional[int] = None
    name: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    kind: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "Track":
        """Create a Track from a normalized raw track dictionary."""
        return cls(**project(raw, TRACK_FIELDS))

    @property
    def file_path(self) -> Optional[str]:
        """Filesystem path decoded from ``location``."""
        if not self.location:
            return None
        location = self.location
        if location.startswith("file://localhost/"):
            location = location[len("file://localhost") :]
        elif location.startswith("file://"):
            location = location[len("file://") :]
        return urllib.parse.unquote(location)

    def to_dict(self) -> Dict[str, Any]:
        """Convert Track to dictionary, excluding absent fields."""
        return {
            name: getattr(self, name)
            for name in TRACK_FIELDS
            if getattr(self, name) is not None
        }


TrackResolver = Callable[[Any], Track]


@dataclass
class Playlist:
    """Represents a library playlist, static or smart."""

    master: Optional[bool] = None
    playlist_id: Optional[int] = None
    playlist_persistent_id: Optional[str] = None
    all_items: Optional[bool] = None
    visible: Optional[bool] = None
    name: Optional[str] = None
    playlist_items: Optional[List[Dict[str, Any]]] = None
    distinguished_kind: Optional[int] = None
    music: Optional[bool] = None
    smart_info: Optional[bytes] = None
    smart_criteria: Optional[bytes] = None
    movies: Optional[bool] = None
    tv_shows: Optional[bool] = None
    podcasts: Optional[bool] = None
    itunesu: Optional[bool] = None
    audiobooks: Optional[bool] = None
    books: Optional[bool] = None

    # Looks up tracks in the snapshot this playlist was read from
    _resolver: Optional[TrackResolver] = field(
        default=None, repr=False, compare=False
    )

    @classmethod
    def from_raw(
        cls, raw: Any, resolver: Optional[TrackResolver] = None
    ) -> "Playlist":
        """Create a Playlist from a normalized raw playlist dictionary."""
        return cls(**project(raw, PLAYLIST_FIELDS), _resolver=resolver)

    @property
    def is_smart(self) -> bool:
        return self.smart_info is not None or self.smart_criteria is not None

    @property
    def item_count(self) -> int:
        return len(self.playlist_items) if self.playlist_items else 0

    def get_playlist_items(self, resolve_full: bool = True) -> List[Any]:
        """
        Get the tracks referenced by this playlist, in playlist order.

        Args:
            resolve_full: When True, each ``{"track_id": ...}`` reference is
                resolved to a full Track; when False the raw references are
                returned unchanged.

        Returns:
            List of Track objects or raw item dictionaries.

        Raises:
            NotFoundError: A referenced track id does not exist.
            NotReadyError: The playlist is not attached to a loaded library.
        """
        if not self.playlist_items:
            return []
        if not resolve_full:
            return list(self.playlist_items)
        if self._resolver is None:
            raise NotReadyError()

        resolver = self._resolver
        return [
            resolver(item.get("track_id") if isinstance(item, Mapping) else None)
            for item in self.playlist_items
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert Playlist to dictionary, excluding absent fields."""
        return {
            name: getattr(self, name)
            for name in PLAYLIST_FIELDS
            if getattr(self, name) is not None
        }
