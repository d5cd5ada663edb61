"""
Remote playlist sources.
"""

from .base import PlaylistSource
from .http import DEFAULT_PLAYLIST_URL, HttpPlaylistSource

__all__ = [
    "PlaylistSource",
    "HttpPlaylistSource",
    "DEFAULT_PLAYLIST_URL",
]
