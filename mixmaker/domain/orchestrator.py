#!/usr/bin/env python
"""
End-to-end playlist flows.

Bulk flow: liked songs -> suggestions (snapshot or language model) -> for
each suggestion resolve, create and populate a Spotify playlist. A failing
playlist is logged and skipped.

Custom flow: a single suggestion from a free-text prompt, run through the
same per-playlist steps; any failure aborts the request.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from mixmaker.core.throttle import RequestThrottle
from mixmaker.errors import EmptyPrompt, NoPlaylistsCreated, NoTracksResolved, format_error
from mixmaker.infrastructure.spotify import SpotifySession
from mixmaker.observability.metrics import record_playlist_outcome
from .library import fetch_liked_songs
from .models import CreatedPlaylist, LikedSong, PlaylistState, PlaylistSuggestion
from .resolver import TrackResolver, chunked
from .snapshot import SnapshotStore
from .suggestions import PlaylistSuggester

logger = logging.getLogger(__name__)


class PlaylistOrchestrator:
    def __init__(
        self,
        throttle: RequestThrottle,
        resolver: TrackResolver,
        suggester: PlaylistSuggester,
        snapshots: SnapshotStore,
        page_size: int = 50,
        add_batch_size: int = 100,
        development: bool = True,
    ):
        self.throttle = throttle
        self.resolver = resolver
        self.suggester = suggester
        self.snapshots = snapshots
        self.page_size = page_size
        self.add_batch_size = add_batch_size
        self.development = development

    def fetch_liked_songs(self, session: SpotifySession) -> List[LikedSong]:
        return fetch_liked_songs(session, page_size=self.page_size, throttle=self.throttle)

    def generate_or_load(self, session: SpotifySession) -> List[PlaylistSuggestion]:
        """Suggestions from the development snapshot when present, else from the language model."""
        if self.development:
            saved = self.snapshots.load()
            if saved is not None:
                logger.info("Using %d saved playlists from %s", len(saved), self.snapshots.path)
                return saved
            logger.info("No saved playlists found, generating new ones")
        liked_songs = self.fetch_liked_songs(session)
        return self.suggester.suggest_from_library(liked_songs)

    def generate_playlists(self, session: SpotifySession) -> List[PlaylistSuggestion]:
        playlists = self.generate_or_load(session)
        if self.development:
            self.snapshots.save(playlists)
            logger.info("Saved %d playlists to %s", len(playlists), self.snapshots.path)
        return playlists

    def create_playlists(self, session: SpotifySession) -> List[CreatedPlaylist]:
        suggestions = self.generate_playlists(session)
        created: List[CreatedPlaylist] = []
        for suggestion in suggestions:
            try:
                playlist = self._build_playlist(session, suggestion)
            except Exception as exc:
                logger.error('Error processing playlist "%s":\n%s', suggestion.name, format_error(exc))
                continue
            if playlist is not None:
                created.append(playlist)

        if not created:
            raise NoPlaylistsCreated("No valid playlists could be created")
        logger.info("Created %d of %d suggested playlists", len(created), len(suggestions))
        return created

    def create_custom_playlist(self, session: SpotifySession, prompt: Optional[str]) -> CreatedPlaylist:
        if not prompt or not prompt.strip():
            raise EmptyPrompt("Prompt is required")
        logger.info("Received custom playlist prompt: %s", prompt)
        suggestion = self.suggester.suggest_from_prompt(prompt)
        playlist = self._build_playlist(session, suggestion)
        if playlist is None:
            raise NoTracksResolved("No valid tracks found for the custom playlist")
        return playlist

    def _transition(self, suggestion: PlaylistSuggestion, state: PlaylistState) -> PlaylistState:
        logger.debug('Playlist "%s" -> %s', suggestion.name, state.value)
        return state

    def _build_playlist(self, session: SpotifySession, suggestion: PlaylistSuggestion) -> Optional[CreatedPlaylist]:
        """Resolve, create and populate one playlist; None when no track resolved."""
        state = self._transition(suggestion, PlaylistState.SUGGESTED)
        try:
            state = self._transition(suggestion, PlaylistState.RESOLVING)
            uris = self.resolver.resolve(session, suggestion.songs)
            valid_uris = [uri for uri in uris if uri]
            logger.info('Found %d valid track URIs for "%s"', len(valid_uris), suggestion.name)
            if not valid_uris:
                self._transition(suggestion, PlaylistState.RESOLVED_EMPTY)
                state = self._transition(suggestion, PlaylistState.SKIPPED)
                record_playlist_outcome(state.value)
                logger.info('Playlist "%s" %s: no tracks resolved', suggestion.name, state.value)
                return None
            state = self._transition(suggestion, PlaylistState.RESOLVED_NONEMPTY)

            clean = suggestion.sanitized()
            logger.info('Attempting to create playlist "%s" with %d tracks', clean.name, len(valid_uris))
            response = self.throttle.call(session.create_playlist, clean.name, clean.description, public=False)
            playlist_id = response["id"]
            state = self._transition(suggestion, PlaylistState.CREATED)

            for batch in chunked(valid_uris, self.add_batch_size):
                self.throttle.call(session.add_tracks, playlist_id, batch)
            state = self._transition(suggestion, PlaylistState.POPULATED)
        except Exception:
            logger.warning('Playlist "%s" %s after reaching %s', suggestion.name, PlaylistState.FAILED.value, state.value)
            self._transition(suggestion, PlaylistState.FAILED)
            record_playlist_outcome(PlaylistState.FAILED.value)
            raise

        record_playlist_outcome(state.value)
        logger.info("Successfully created playlist: %s", playlist_id)
        return CreatedPlaylist(
            id=playlist_id,
            name=clean.name,
            description=clean.description,
            track_count=len(valid_uris),
            state=state,
        )


__all__ = ["PlaylistOrchestrator"]
