#!/usr/bin/env python3
"""
In-memory iTunes library store and query API.

An ``ItunesLibrary`` reads an exported library once and answers any number of
queries against the normalized tree. Each successful ``open`` swaps in a new
snapshot; queries always read a single snapshot from start to finish.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Dict, List, Optional

from loguru import logger

from itunes_library.utils.plist_reader import (
    PathLike,
    read_library_file,
    validate_library_path,
)

from .config import ConfigurationManager, get_config
from .exceptions import NotFoundError, NotReadyError
from .models import Playlist, Track
from .normalizer import normalize_keys

Snapshot = Dict[str, Any]


def _track_from_snapshot(snapshot: Snapshot, track_id: Any) -> Track:
    """Look up one track in ``snapshot`` by id."""
    if track_id is None:
        raise NotFoundError("Track ID is null!")

    tracks = snapshot.get("tracks") or {}
    raw = tracks.get(str(track_id))
    if raw is None:
        raw = tracks.get(track_id)
    if raw is None:
        raise NotFoundError(f"No track found for id {track_id!r}")
    return Track.from_raw(raw)


def _track_sort_key(item: Any) -> Any:
    key, raw = item
    track_id = raw.get("track_id") if isinstance(raw, dict) else None
    if not isinstance(track_id, int):
        try:
            track_id = int(key)
        except (TypeError, ValueError):
            # Non-numeric ids sort after numeric ones, by their key text
            return (1, 0, str(key))
    return (0, track_id, str(key))


class ItunesLibrary:
    """Reader for an exported iTunes / Music library"""

    def __init__(self, config: Optional[ConfigurationManager] = None):
        self.config = config or get_config()
        self._snapshot: Optional[Snapshot] = None
        self._load_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    # Loading

    @property
    def ready(self) -> bool:
        return self._snapshot is not None

    def open(self, path: PathLike) -> None:
        """
        Load a library export, replacing any previously loaded library.

        Args:
            path: Path to the exported library XML (or binary plist) file.

        Raises:
            InvalidPathError: The path is not an existing, readable file.
            LibraryIOError: The file could not be read.
            DecodeError: The file is not a valid property list.
        """
        validate_library_path(path)
        self._load(path)

    def open_async(self, path: PathLike) -> "Future[None]":
        """
        Load a library export on a background thread.

        The path is validated before anything is scheduled, so an invalid
        path raises ``InvalidPathError`` here rather than through the future.

        Returns:
            A future that completes when the library is ready, or carries the
            load error.
        """
        validate_library_path(path)
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="itunes-library-load"
                )
            return self._executor.submit(self._load, path)

    def _load(self, path: PathLike) -> None:
        parsing = self.config.parsing_options
        with self._load_lock:
            try:
                tree = read_library_file(
                    path,
                    strip_control=parsing["strip_control_characters"],
                    forbid_entities=parsing["forbid_entities"],
                )
            except Exception:
                keep = self.config.library_options["keep_snapshot_on_reload_failure"]
                if self._snapshot is not None and keep:
                    logger.warning("⚠️  Reload failed, keeping previous library")
                elif self._snapshot is not None:
                    logger.warning("⚠️  Reload failed, discarding previous library")
                    self._snapshot = None
                raise

            normalize_keys(tree)
            self._snapshot = tree

        logger.info(
            f"✅ Library loaded: {len(tree.get('tracks') or {})} tracks, "
            f"{len(tree.get('playlists') or [])} playlists"
        )

    def close(self) -> None:
        """Shut down the background loader, waiting for a pending load."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    def __enter__(self) -> "ItunesLibrary":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_raw_data(self) -> Optional[Snapshot]:
        """Return the normalized library tree, or None if nothing is loaded."""
        return self._snapshot

    def _require_snapshot(self) -> Snapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise NotReadyError()
        return snapshot

    # Tracks

    def get_track_by_id(self, track_id: Any) -> Track:
        """
        Get a single track.

        Args:
            track_id: Track ID as an int or its string form.

        Raises:
            NotReadyError: No library has been loaded.
            NotFoundError: ``track_id`` is None or unknown.
        """
        return _track_from_snapshot(self._require_snapshot(), track_id)

    def get_all_tracks(self) -> List[Track]:
        """
        Get every track in the library.

        Tracks are ordered by numeric track ID unless
        ``library.sort_tracks_by_id`` is disabled, in which case the export's
        own order is kept.
        """
        snapshot = self._require_snapshot()
        items = list((snapshot.get("tracks") or {}).items())
        if self.config.library_options["sort_tracks_by_id"]:
            items.sort(key=_track_sort_key)
        return [Track.from_raw(raw) for _, raw in items]

    # Playlists

    def get_playlist_by_id(self, playlist_id: Any) -> Playlist:
        """
        Get the first playlist whose ``playlist_id`` matches ``playlist_id``.

        Ids match on their string form, so ``100`` and ``"100"`` both work.

        Raises:
            NotReadyError: No library has been loaded.
            NotFoundError: ``playlist_id`` is None or unknown.
        """
        snapshot = self._require_snapshot()
        if playlist_id is None:
            raise NotFoundError("Playlist ID is null!")

        # Compared by string form, as track ids are
        wanted = str(playlist_id)
        for raw in snapshot.get("playlists") or []:
            if not isinstance(raw, dict) or raw.get("playlist_id") is None:
                continue
            if str(raw["playlist_id"]) == wanted:
                return self._playlist_from_raw(snapshot, raw)
        raise NotFoundError(f"No playlist found for id {playlist_id!r}")

    def get_all_playlists(self) -> List[Playlist]:
        """Get every playlist, in export order."""
        snapshot = self._require_snapshot()
        return [
            self._playlist_from_raw(snapshot, raw)
            for raw in snapshot.get("playlists") or []
        ]

    def _playlist_from_raw(self, snapshot: Snapshot, raw: Any) -> Playlist:
        return Playlist.from_raw(
            raw, resolver=partial(_track_from_snapshot, snapshot)
        )

    # Library metadata

    def _get_metadata(self, name: str) -> Any:
        return self._require_snapshot().get(name)

    def get_major_version(self) -> Any:
        return self._get_metadata("major_version")

    def get_minor_version(self) -> Any:
        return self._get_metadata("minor_version")

    def get_application_version(self) -> Any:
        return self._get_metadata("application_version")

    def get_date(self) -> Any:
        """Export date of the library."""
        return self._get_metadata("date")

    def get_features(self) -> Any:
        return self._get_metadata("features")

    def get_show_content_ratings(self) -> Any:
        return self._get_metadata("show_content_ratings")

    def get_library_persistent_id(self) -> Any:
        return self._get_metadata("library_persistent_id")

    def get_music_folder(self) -> Any:
        return self._get_metadata("music_folder")
