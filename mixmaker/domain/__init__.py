"""Playlist domain: liked songs, suggestions, track resolution and orchestration."""

from .library import fetch_liked_songs, iter_saved_track_pages
from .models import CreatedPlaylist, LikedSong, PlaylistState, PlaylistSuggestion, Song
from .orchestrator import PlaylistOrchestrator
from .resolver import TrackResolver
from .snapshot import SnapshotStore
from .suggestions import PlaylistSuggester

__all__ = [
    "CreatedPlaylist",
    "LikedSong",
    "PlaylistOrchestrator",
    "PlaylistState",
    "PlaylistSuggester",
    "PlaylistSuggestion",
    "SnapshotStore",
    "Song",
    "TrackResolver",
    "fetch_liked_songs",
    "iter_saved_track_pages",
]
