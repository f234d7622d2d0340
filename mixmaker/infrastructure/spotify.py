#!/usr/bin/env python
"""
Spotify Web API session.

A ``SpotifySession`` pairs one immutable token with a spotipy client built
from it. Every call site receives the session explicitly; nothing mutates a
shared client's credentials.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

import requests
import spotipy
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

if TYPE_CHECKING:  # pragma: no cover
    from mixmaker.auth.tokens import Token

logger = logging.getLogger(__name__)

# Server errors are retried by the transport adapter. 429 stays out of the
# forcelist so it reaches the request throttle with its Retry-After header.
_SERVER_ERROR_CODES = (500, 502, 503, 504)


def _build_http_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=3,
        backoff_factor=0.25,
        status_forcelist=_SERVER_ERROR_CODES,
        allowed_methods=["GET", "POST"],
        respect_retry_after_header=False,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_http_session = _build_http_session()


def build_spotify_client(access_token: str, requests_timeout: int = 10) -> spotipy.Spotify:
    """Create a Spotipy client using a raw access token."""
    return spotipy.Spotify(
        auth=access_token,
        requests_session=_http_session,
        requests_timeout=requests_timeout,
    )


class SpotifySession:
    def __init__(self, token: "Token", client: Optional[spotipy.Spotify] = None, requests_timeout: int = 10):
        self.token = token
        self.client = client or build_spotify_client(token.access_token, requests_timeout)
        self._user_id: Optional[str] = None

    def saved_tracks_page(self, limit: int, offset: int) -> dict:
        return self.client.current_user_saved_tracks(limit=limit, offset=offset)

    def search_tracks(self, title: str, artist: str, limit: int = 1) -> List[dict]:
        result = self.client.search(q=f"track:{title} artist:{artist}", type="track", limit=limit)
        return ((result or {}).get("tracks") or {}).get("items") or []

    def search_artists(self, name: str, limit: int = 1) -> List[dict]:
        result = self.client.search(q=name, type="artist", limit=limit)
        return ((result or {}).get("artists") or {}).get("items") or []

    def artist_top_tracks(self, artist_id: str, market: str = "US") -> List[dict]:
        result = self.client.artist_top_tracks(artist_id, country=market)
        return (result or {}).get("tracks") or []

    def current_user_id(self) -> str:
        if self._user_id is None:
            self._user_id = self.client.me()["id"]
        return self._user_id

    def create_playlist(self, name: str, description: str, public: bool = False) -> dict:
        return self.client.user_playlist_create(
            self.current_user_id(),
            name,
            public=public,
            description=description,
        )

    def add_tracks(self, playlist_id: str, uris: Sequence[str]) -> dict:
        return self.client.playlist_add_items(playlist_id, list(uris))


__all__ = ["SpotifySession", "build_spotify_client"]
