"""Adapters for external services."""

from .spotify import SpotifySession, build_spotify_client

__all__ = ["SpotifySession", "build_spotify_client"]
