"""Exception types raised across the service and user-facing error formatting."""

from __future__ import annotations

from typing import Any, Optional

from anthropic import APIStatusError
from spotipy.exceptions import SpotifyException


class MixmakerError(Exception):
    """Base class for errors the HTTP layer maps to a status code."""

    status_code = 500


class AuthenticationRequired(MixmakerError):
    """No usable token: the user has to go through /login again."""

    status_code = 401


class EmptyPrompt(MixmakerError):
    status_code = 400


class NoTracksResolved(MixmakerError):
    status_code = 404


class NoPlaylistsCreated(MixmakerError):
    status_code = 500


class MalformedSuggestion(MixmakerError):
    """The language model reply did not parse into the expected playlist shape."""

    status_code = 500


def _spotify_reason(exc: SpotifyException) -> str:
    reason = getattr(exc, "reason", None)
    if reason:
        return str(reason)
    return "Unknown"


def format_error(exc: BaseException) -> str:
    """Render an exception as a readable message without a traceback."""
    if isinstance(exc, SpotifyException):
        return (
            "Spotify API Error:\n"
            f"  Status: {exc.http_status}\n"
            f"  Message: {exc.msg}\n"
            f"  Reason: {_spotify_reason(exc)}"
        )
    if isinstance(exc, APIStatusError):
        return (
            "Language model API Error:\n"
            f"  Status: {exc.status_code}\n"
            f"  Message: {exc.message}"
        )
    message = str(exc).strip()
    return message or exc.__class__.__name__


def status_for(exc: BaseException, default: int = 500) -> int:
    status: Optional[Any] = getattr(exc, "status_code", None)
    if isinstance(exc, MixmakerError) and isinstance(status, int):
        return status
    return default


__all__ = [
    "MixmakerError",
    "AuthenticationRequired",
    "EmptyPrompt",
    "NoTracksResolved",
    "NoPlaylistsCreated",
    "MalformedSuggestion",
    "format_error",
    "status_for",
]
