#!/usr/bin/env python
"""
Spotify token lifecycle: persistence, refresh and session creation.

The token record lives in a small JSON file so a login survives process
restarts. A refresh never mutates an existing ``Token``; it returns a new one
that keeps the original refresh token.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth

from mixmaker.errors import AuthenticationRequired
from mixmaker.infrastructure.spotify import SpotifySession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Token:
    access_token: str
    refresh_token: str
    expires_at: float  # UNIX seconds

    def expires_within(self, margin_seconds: float, now: float) -> bool:
        return now >= self.expires_at - margin_seconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "Token":
        if not isinstance(data, dict):
            raise ValueError("token record must be an object")
        access_token = data.get("access_token")
        refresh_token = data.get("refresh_token")
        expires_at = data.get("expires_at")
        if not access_token or not refresh_token:
            raise ValueError("token record is missing access_token or refresh_token")
        try:
            expires_at = float(expires_at)
        except (TypeError, ValueError):
            raise ValueError("token record has no valid expires_at") from None
        return cls(access_token=str(access_token), refresh_token=str(refresh_token), expires_at=expires_at)


class TokenStore:
    """Reads and writes the token record on local disk."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Optional[Token]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as handle:
            return Token.from_dict(json.load(handle))

    def save(self, token: Token) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with self._lock:
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(token.to_dict(), handle)
            os.replace(tmp_path, self.path)


def create_oauth(client_id: Optional[str], client_secret: Optional[str], redirect_uri: str, scopes) -> SpotifyOAuth:
    """Create a SpotifyOAuth instance that keeps nothing in spotipy's own cache."""
    return SpotifyOAuth(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
        scope=" ".join(scopes),
        cache_handler=MemoryCacheHandler(),
        open_browser=False,
    )


class TokenManager:
    def __init__(
        self,
        store: TokenStore,
        oauth_factory: Callable[[], SpotifyOAuth],
        refresh_margin_seconds: float = 300,
        clock: Callable[[], float] = time.time,
        requests_timeout: int = 10,
    ):
        self.store = store
        self.refresh_margin_seconds = refresh_margin_seconds
        self._oauth_factory = oauth_factory
        self._oauth: Optional[SpotifyOAuth] = None
        self._clock = clock
        self._requests_timeout = requests_timeout

    @property
    def oauth(self) -> SpotifyOAuth:
        if self._oauth is None:
            self._oauth = self._oauth_factory()
        return self._oauth

    def authorize_url(self, state: str) -> str:
        return self.oauth.get_authorize_url(state=state)

    def exchange_code(self, code: str) -> Token:
        """Trade an authorization code for a token pair and persist it."""
        info = self.oauth.get_access_token(code, check_cache=False)
        now = self._clock()
        token = Token(
            access_token=info["access_token"],
            refresh_token=info["refresh_token"],
            expires_at=now + int(info["expires_in"]),
        )
        self.store.save(token)
        logger.info("Login successful, tokens saved")
        return token

    def refresh(self, token: Token) -> Token:
        info = self.oauth.refresh_access_token(token.refresh_token)
        return Token(
            access_token=info["access_token"],
            refresh_token=token.refresh_token,
            expires_at=self._clock() + int(info["expires_in"]),
        )

    def ensure_token(self) -> Token:
        """Return a usable token, refreshing and persisting it when close to expiry."""
        try:
            token = self.store.load()
        except (OSError, ValueError) as exc:
            logger.warning("Stored token is unreadable: %s", exc)
            raise AuthenticationRequired("Authentication required. Please log in again.") from exc
        if token is None:
            raise AuthenticationRequired("Authentication required. Please log in again.")

        if not token.expires_within(self.refresh_margin_seconds, self._clock()):
            logger.debug("Access token still valid")
            return token

        logger.info("Access token expired or expiring soon, refreshing")
        try:
            refreshed = self.refresh(token)
            self.store.save(refreshed)
        except Exception as exc:
            logger.warning("Failed to refresh token: %s", exc)
            raise AuthenticationRequired("Failed to refresh token. Please log in again.") from exc
        logger.info("Access token refreshed and saved")
        return refreshed

    def ensure_session(self) -> SpotifySession:
        return SpotifySession(self.ensure_token(), requests_timeout=self._requests_timeout)


__all__ = ["Token", "TokenStore", "TokenManager", "create_oauth"]
