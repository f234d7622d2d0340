#!/usr/bin/env python
"""
Centralized configuration schema.

Merges defaults from config.Config with runtime overrides and clamps the
batch sizes to what the Spotify Web API accepts.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config

# Hard limits of the Spotify Web API endpoints we call
MAX_SAVED_TRACKS_PAGE = 50
MAX_SEARCH_BATCH = 20
MAX_ADD_TRACKS_BATCH = 100


def _parse_scopes(value: Optional[object]) -> List[str]:
    """Normalize OAuth scopes into a unique ordered list."""
    if value is None:
        tokens: List[str] = []
    elif isinstance(value, str):
        tokens = [token.strip() for token in value.replace(" ", ",").split(",")]
    elif isinstance(value, (list, tuple, set)):
        tokens = [str(token).strip() for token in value]
    else:
        tokens = [str(value).strip()]

    normalized: List[str] = []
    for token in tokens:
        if token and token not in normalized:
            normalized.append(token)
    if not normalized:
        return ["user-library-read", "playlist-modify-private"]
    return normalized


def _clamp(value: object, low: int, high: int, default: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return max(low, min(number, high))


class AppSettings(BaseModel):
    """Application-wide settings."""

    model_config = ConfigDict(extra="ignore")

    app_env: str = "development"
    secret_key: str = "change-me-in-production"

    # Spotify
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    spotify_redirect_uri: str = "http://localhost:3000/callback"
    spotify_scopes: List[str] = Field(default_factory=lambda: ["user-library-read", "playlist-modify-private"])
    spotify_request_timeout: int = 10

    # Anthropic
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-3-5-sonnet-latest"
    anthropic_max_tokens: int = 4000

    # Local files
    token_path: str
    snapshot_path: str

    # Throttle and retry policy
    throttle_delay_ms: int = 50
    rate_limit_max_retries: int = 5
    rate_limit_initial_delay_ms: int = 1000
    token_refresh_margin_seconds: int = 300

    # Batching
    saved_tracks_page_size: int = MAX_SAVED_TRACKS_PAGE
    search_batch_size: int = MAX_SEARCH_BATCH
    add_tracks_batch_size: int = MAX_ADD_TRACKS_BATCH

    # Artist fallback
    top_tracks_market: str = "US"
    top_tracks_pick: int = 5

    cors_allowed_origins: List[str] = Field(default_factory=list)

    @property
    def is_development(self) -> bool:
        return self.app_env != "production"

    @field_validator("app_env", mode="before")
    @classmethod
    def _normalize_env(cls, value: object) -> str:
        return str(value or "development").strip().lower()

    @field_validator("spotify_scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: Optional[object]) -> List[str]:
        return _parse_scopes(value)

    @field_validator("saved_tracks_page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, value: object) -> int:
        return _clamp(value, 1, MAX_SAVED_TRACKS_PAGE, MAX_SAVED_TRACKS_PAGE)

    @field_validator("search_batch_size", mode="before")
    @classmethod
    def _clamp_search_batch(cls, value: object) -> int:
        return _clamp(value, 1, MAX_SEARCH_BATCH, MAX_SEARCH_BATCH)

    @field_validator("add_tracks_batch_size", mode="before")
    @classmethod
    def _clamp_add_batch(cls, value: object) -> int:
        return _clamp(value, 1, MAX_ADD_TRACKS_BATCH, MAX_ADD_TRACKS_BATCH)

    @field_validator("throttle_delay_ms", "rate_limit_max_retries", "rate_limit_initial_delay_ms",
                     "token_refresh_margin_seconds", mode="before")
    @classmethod
    def _non_negative(cls, value: object) -> int:
        return _clamp(value, 0, 10**9, 0)

    @field_validator("top_tracks_pick", mode="before")
    @classmethod
    def _clamp_pick(cls, value: object) -> int:
        return _clamp(value, 1, 10, 5)

    @field_validator("top_tracks_market", mode="before")
    @classmethod
    def _upper_market(cls, value: object) -> str:
        market = str(value or "US").strip().upper()
        return market or "US"


def load_app_settings(overrides: Optional[Dict[str, Any]] = None) -> AppSettings:
    """Load settings merging config defaults with optional runtime overrides."""
    data: Dict[str, Any] = {
        "app_env": Config.APP_ENV,
        "secret_key": Config.SECRET_KEY,
        "spotify_client_id": Config.SPOTIPY_CLIENT_ID,
        "spotify_client_secret": Config.SPOTIPY_CLIENT_SECRET,
        "spotify_redirect_uri": Config.SPOTIPY_REDIRECT_URI,
        "spotify_scopes": Config.SPOTIFY_SCOPES,
        "spotify_request_timeout": Config.SPOTIFY_REQUEST_TIMEOUT,
        "anthropic_api_key": Config.ANTHROPIC_API_KEY,
        "anthropic_model": Config.ANTHROPIC_MODEL,
        "anthropic_max_tokens": Config.ANTHROPIC_MAX_TOKENS,
        "token_path": Config.TOKEN_PATH,
        "snapshot_path": Config.SNAPSHOT_PATH,
        "throttle_delay_ms": Config.THROTTLE_DELAY_MS,
        "rate_limit_max_retries": Config.RATE_LIMIT_MAX_RETRIES,
        "rate_limit_initial_delay_ms": Config.RATE_LIMIT_INITIAL_DELAY_MS,
        "token_refresh_margin_seconds": Config.TOKEN_REFRESH_MARGIN_SECONDS,
        "saved_tracks_page_size": Config.SAVED_TRACKS_PAGE_SIZE,
        "search_batch_size": Config.SEARCH_BATCH_SIZE,
        "add_tracks_batch_size": Config.ADD_TRACKS_BATCH_SIZE,
        "top_tracks_market": Config.TOP_TRACKS_MARKET,
        "top_tracks_pick": Config.TOP_TRACKS_PICK,
        "cors_allowed_origins": Config.CORS_ALLOWED_ORIGINS,
    }
    if overrides:
        data.update(overrides)
    return AppSettings.model_validate(data)


__all__ = [
    "AppSettings",
    "load_app_settings",
]
