"""Shared test stubs for the Spotify session, OAuth, throttle and Anthropic client."""

import threading
from types import SimpleNamespace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOauthError

from mixmaker.core import RequestThrottle
from mixmaker.errors import AuthenticationRequired


def saved_item(title: str, artist: str, track_id: str) -> dict:
    """Shape of one entry of GET /me/tracks."""
    return {
        "added_at": "2024-01-01T00:00:00Z",
        "track": {"id": track_id, "name": title, "artists": [{"name": artist}, {"name": "Feat"}]},
    }


def rate_limited(retry_after: Optional[int] = None) -> SpotifyException:
    headers = {"Retry-After": str(retry_after)} if retry_after is not None else {}
    return SpotifyException(429, -1, "API rate limit exceeded", headers=headers)


class FakeSpotifySession:
    """In-memory stand-in for ``SpotifySession`` recording every call."""

    def __init__(
        self,
        saved: Optional[Sequence[dict]] = None,
        catalog: Optional[Dict[Tuple[str, str], str]] = None,
        artists: Optional[Dict[str, str]] = None,
        top_tracks: Optional[Dict[str, List[str]]] = None,
        failing_titles: Iterable[str] = (),
        fail_create_for: Iterable[str] = (),
    ):
        self.saved = list(saved or [])
        self.catalog = dict(catalog or {})
        self.artists = dict(artists or {})
        self.top_tracks = dict(top_tracks or {})
        self.failing_titles = set(failing_titles)
        self.fail_create_for = set(fail_create_for)
        self.calls: List[Tuple[str, tuple]] = []
        self.playlists: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def _record(self, name: str, *args):
        with self._lock:
            self.calls.append((name, args))

    def calls_to(self, name: str) -> List[tuple]:
        return [args for call, args in self.calls if call == name]

    def saved_tracks_page(self, limit: int, offset: int) -> dict:
        self._record("saved_tracks_page", limit, offset)
        return {"items": self.saved[offset:offset + limit], "total": len(self.saved), "limit": limit, "offset": offset}

    def search_tracks(self, title: str, artist: str, limit: int = 1) -> List[dict]:
        self._record("search_tracks", title, artist)
        if title in self.failing_titles:
            raise SpotifyException(400, -1, "Bad search query")
        uri = self.catalog.get((title, artist))
        return [{"uri": uri}] if uri else []

    def search_artists(self, name: str, limit: int = 1) -> List[dict]:
        self._record("search_artists", name)
        artist_id = self.artists.get(name)
        return [{"id": artist_id, "name": name}] if artist_id else []

    def artist_top_tracks(self, artist_id: str, market: str = "US") -> List[dict]:
        self._record("artist_top_tracks", artist_id, market)
        return [{"uri": uri} for uri in self.top_tracks.get(artist_id, [])]

    def create_playlist(self, name: str, description: str, public: bool = False) -> dict:
        self._record("create_playlist", name, description, public)
        if name in self.fail_create_for:
            raise SpotifyException(403, -1, "Insufficient client scope")
        playlist_id = f"pl{len(self.playlists) + 1}"
        self.playlists[playlist_id] = []
        return {"id": playlist_id, "name": name}

    def add_tracks(self, playlist_id: str, uris: Sequence[str]) -> dict:
        self._record("add_tracks", playlist_id, tuple(uris))
        self.playlists[playlist_id].extend(uris)
        return {"snapshot_id": f"snap-{playlist_id}"}


class RecordingThrottle(RequestThrottle):
    """Real throttle without the pause, remembering what was queued."""

    def __init__(self, **kwargs):
        kwargs.setdefault("delay_seconds", 0)
        kwargs.setdefault("idle_timeout", 0.05)
        super().__init__(**kwargs)
        self.submitted: List[Tuple[str, tuple]] = []

    def submit(self, fn, *args, **kwargs):
        self.submitted.append((getattr(fn, "__name__", repr(fn)), args))
        return super().submit(fn, *args, **kwargs)


class FakeAnthropicClient:
    """Mimics ``anthropic.Anthropic().messages.create`` with canned replies."""

    def __init__(self, *replies: str):
        self.replies = list(replies)
        self.requests: List[dict] = []
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.requests.append(kwargs)
        text = self.replies.pop(0)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class FakeSpotifyOAuth:
    """Stand-in for ``spotipy.SpotifyOAuth`` used by the token manager."""

    def __init__(self, expires_in: int = 3600, fail_refresh: bool = False):
        self.expires_in = expires_in
        self.fail_refresh = fail_refresh
        self.exchanged: List[str] = []
        self.refreshed: List[str] = []

    def get_authorize_url(self, state=None):
        return f"https://accounts.spotify.com/authorize?client_id=test&state={state}"

    def get_access_token(self, code, check_cache=False):
        self.exchanged.append(code)
        return {"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": self.expires_in}

    def refresh_access_token(self, refresh_token):
        self.refreshed.append(refresh_token)
        if self.fail_refresh:
            raise SpotifyOauthError("error: invalid_grant, error_description: Refresh token revoked")
        # Spotify usually omits refresh_token on refresh
        return {"access_token": f"access-{len(self.refreshed) + 1}", "expires_in": self.expires_in}


class StubTokenManager:
    """Token manager returning a fixed session; None means logged out."""

    def __init__(self, session=None):
        self.session = session
        self.exchanged: List[str] = []
        self.store = SimpleNamespace(exists=lambda: self.session is not None)

    def authorize_url(self, state: str) -> str:
        return f"https://accounts.spotify.com/authorize?client_id=test&state={state}"

    def exchange_code(self, code: str):
        self.exchanged.append(code)
        return code

    def ensure_session(self):
        if self.session is None:
            raise AuthenticationRequired("Authentication required. Please log in again.")
        return self.session


def playlist_payload(name: str, songs: Sequence[Tuple[str, str]], description: str = "A test playlist") -> dict:
    """One playlist as the language model is asked to return it."""
    return {
        "name": name,
        "description": description,
        "songs": [{"title": title, "artist": artist, "country": "UK"} for title, artist in songs],
    }
