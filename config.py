#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-in-production'

    # Environment: anything other than "production" enables development behaviour
    # (snapshot file reuse, verbose logs)
    APP_ENV = os.getenv('APP_ENV', 'development').strip().lower()

    # Spotify API
    SPOTIPY_CLIENT_ID = os.environ.get('SPOTIPY_CLIENT_ID')
    SPOTIPY_CLIENT_SECRET = os.environ.get('SPOTIPY_CLIENT_SECRET')
    SPOTIPY_REDIRECT_URI = os.environ.get('SPOTIPY_REDIRECT_URI', 'http://localhost:3000/callback')
    SPOTIFY_SCOPES = _get_csv_list('SPOTIFY_SCOPES', 'user-library-read,playlist-modify-private')
    SPOTIFY_REQUEST_TIMEOUT = _get_int('SPOTIFY_REQUEST_TIMEOUT', 10)

    # Anthropic API
    ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY')
    ANTHROPIC_MODEL = os.getenv('ANTHROPIC_MODEL', 'claude-3-5-sonnet-latest')
    ANTHROPIC_MAX_TOKENS = _get_int('ANTHROPIC_MAX_TOKENS', 4000)

    # Local state files
    TOKEN_PATH = os.getenv('TOKEN_PATH', os.path.join(basedir, 'token.json'))
    SNAPSHOT_PATH = os.getenv('SNAPSHOT_PATH', os.path.join(basedir, 'saved_playlists.json'))

    # Outbound request throttle
    THROTTLE_DELAY_MS = _get_int('THROTTLE_DELAY_MS', 50)
    RATE_LIMIT_MAX_RETRIES = _get_int('RATE_LIMIT_MAX_RETRIES', 5)
    RATE_LIMIT_INITIAL_DELAY_MS = _get_int('RATE_LIMIT_INITIAL_DELAY_MS', 1000)

    # Refresh the access token when it expires within this many seconds
    TOKEN_REFRESH_MARGIN_SECONDS = _get_int('TOKEN_REFRESH_MARGIN_SECONDS', 300)

    # Spotify API batch limits
    SAVED_TRACKS_PAGE_SIZE = _get_int('SAVED_TRACKS_PAGE_SIZE', 50)
    SEARCH_BATCH_SIZE = _get_int('SEARCH_BATCH_SIZE', 20)
    ADD_TRACKS_BATCH_SIZE = _get_int('ADD_TRACKS_BATCH_SIZE', 100)

    # Artist fallback when an exact track match is missing
    TOP_TRACKS_MARKET = os.getenv('TOP_TRACKS_MARKET', 'US')
    TOP_TRACKS_PICK = _get_int('TOP_TRACKS_PICK', 5)

    # CORS for the JSON endpoints; empty disables cross-origin access
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', '')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    PORT = _get_int('PORT', 3000)
