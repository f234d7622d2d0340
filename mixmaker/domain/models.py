#!/usr/bin/env python
"""
Pydantic models for liked songs and language-model playlist suggestions.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Spotify limits for playlist metadata
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 300

EMBED_URL_TEMPLATE = "https://open.spotify.com/embed/playlist/{playlist_id}?utm_source=generator"


class LikedSong(BaseModel):
    """A saved track as fetched from the user's library (first artist only)."""

    model_config = ConfigDict(frozen=True)

    title: str
    artist: str
    id: str

    @classmethod
    def from_saved_item(cls, item: dict) -> "LikedSong":
        track = item.get("track") or {}
        artists = track.get("artists") or [{}]
        return cls(
            title=track.get("name") or "",
            artist=artists[0].get("name") or "",
            id=track.get("id") or "",
        )


class Song(BaseModel):
    """A song suggested by the language model; it may not exist on Spotify."""

    model_config = ConfigDict(extra="ignore")

    title: str
    artist: str
    country: Optional[str] = None

    @field_validator("title", "artist", mode="before")
    @classmethod
    def _strip(cls, value: object) -> str:
        return str(value or "").strip()


class PlaylistSuggestion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    songs: List[Song] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> str:
        return "" if value is None else str(value)

    def sanitized(self) -> "PlaylistSuggestion":
        """Copy with name/description trimmed and cut to Spotify's limits."""
        return PlaylistSuggestion(
            name=self.name.strip()[:MAX_NAME_LENGTH],
            description=self.description.strip()[:MAX_DESCRIPTION_LENGTH],
            songs=list(self.songs),
        )


class PlaylistState(str, Enum):
    SUGGESTED = "suggested"
    RESOLVING = "resolving"
    RESOLVED_EMPTY = "resolved_empty"
    RESOLVED_NONEMPTY = "resolved_nonempty"
    SKIPPED = "skipped"
    CREATED = "created"
    POPULATED = "populated"
    FAILED = "failed"


class CreatedPlaylist(BaseModel):
    id: str
    name: str
    description: str = ""
    track_count: int = 0
    state: PlaylistState = PlaylistState.POPULATED

    @property
    def embed_url(self) -> str:
        return EMBED_URL_TEMPLATE.format(playlist_id=self.id)


__all__ = [
    "LikedSong",
    "Song",
    "PlaylistSuggestion",
    "PlaylistState",
    "CreatedPlaylist",
    "MAX_NAME_LENGTH",
    "MAX_DESCRIPTION_LENGTH",
]
