#!/usr/bin/env python3
"""
Reading and decoding of iTunes library export files.

Turns a path into a decoded (not yet normalized) property list tree and maps
every failure onto the library's own exception types.
"""

import os
import plistlib
import re
from pathlib import Path
from typing import Any, Union
from xml.etree.ElementTree import ParseError
from xml.parsers.expat import ExpatError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET
from loguru import logger

from itunes_library.core.exceptions import DecodeError, InvalidPathError, LibraryIOError

PathLike = Union[str, "os.PathLike[str]"]

BINARY_PLIST_HEADER = b"bplist00"

_CONTROL_CHARACTERS = re.compile(r"[\n\t\r]")


def validate_library_path(path: Any) -> Path:
    """
    Check that ``path`` names an existing, readable, regular file.

    Raises:
        InvalidPathError: If the path is None, not path-like, missing,
            a directory, or unreadable.
    """
    if path is None or not isinstance(path, (str, os.PathLike)):
        raise InvalidPathError(f"Invalid file path: {path!r}")

    file_path = Path(path)
    if not file_path.exists():
        raise InvalidPathError(f"Invalid file path: {file_path} does not exist")
    if file_path.is_dir():
        raise InvalidPathError(f"Invalid file path: {file_path} is a directory")
    if not os.access(file_path, os.R_OK):
        raise InvalidPathError(f"Invalid file path: {file_path} is not readable")
    return file_path


def strip_control_characters(text: str) -> str:
    """Remove newline, tab and carriage return characters."""
    return _CONTROL_CHARACTERS.sub("", text)


def decode_library(
    raw: bytes, strip_control: bool = True, forbid_entities: bool = True
) -> Any:
    """
    Decode the bytes of a library export.

    Args:
        raw: File contents.
        strip_control: Remove newline/tab/CR characters before decoding XML.
        forbid_entities: Screen XML with defusedxml before handing it to
            plistlib, rejecting entity declarations.

    Returns:
        The decoded root value.

    Raises:
        DecodeError: The contents are not a valid property list.
    """
    if raw.startswith(BINARY_PLIST_HEADER):
        try:
            return plistlib.loads(raw, fmt=plistlib.FMT_BINARY)
        except (
            plistlib.InvalidFileException,
            ValueError,
            OverflowError,
            TypeError,
        ) as e:
            raise DecodeError(f"Invalid binary property list: {e}") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Library file is not valid UTF-8: {e}") from e

    if strip_control:
        text = strip_control_characters(text)
    data = text.encode("utf-8")

    if forbid_entities:
        try:
            DefusedET.fromstring(data, forbid_dtd=False, forbid_entities=True)
        except DefusedXmlException as e:
            raise DecodeError(f"Unsafe XML in library file: {e}") from e
        except ParseError as e:
            raise DecodeError(f"Malformed XML in library file: {e}") from e

    try:
        return plistlib.loads(data, fmt=plistlib.FMT_XML)
    except (
        plistlib.InvalidFileException,
        ExpatError,
        ValueError,
        KeyError,
        AttributeError,
        TypeError,
    ) as e:
        # plistlib reports a malformed <date> as AttributeError
        raise DecodeError(f"Invalid property list: {e}") from e


def read_library_file(
    path: PathLike, strip_control: bool = True, forbid_entities: bool = True
) -> Any:
    """
    Read and decode a library export file.

    Raises:
        InvalidPathError: See ``validate_library_path``.
        LibraryIOError: The file could not be read.
        DecodeError: The file is not a valid property list.
    """
    file_path = validate_library_path(path)

    logger.info(f"Reading library from: {file_path}")
    try:
        raw = file_path.read_bytes()
    except OSError as e:
        logger.error(f"❌ Failed to read library file {file_path}: {e}")
        raise LibraryIOError(f"Failed to read {file_path}: {e}") from e

    try:
        tree = decode_library(
            raw, strip_control=strip_control, forbid_entities=forbid_entities
        )
    except DecodeError as e:
        logger.error(f"❌ Failed to decode library file {file_path}: {e}")
        raise

    if not isinstance(tree, dict):
        logger.error(f"❌ Library root in {file_path} is not a dictionary")
        raise DecodeError(
            f"Library root must be a dictionary, got {type(tree).__name__}"
        )

    logger.debug(f"Decoded {len(raw)} bytes from {file_path}")
    return tree
