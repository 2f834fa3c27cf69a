"""
Core functionality for the iTunes library reader
"""

from .library import ItunesLibrary
from .models import Playlist, Track

__all__ = [
    "ItunesLibrary",
    "Playlist",
    "Track",
]
