#!/usr/bin/env python
"""
Resolve suggested (title, artist) pairs to Spotify track URIs.

Songs are split into batches bounded by the search API limit. All batches are
queued on the request throttle at once and run one after another on its
worker; inside a batch every Spotify call is retried on 429 on its own.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, List, Optional, Sequence

from mixmaker.core.backoff import BackoffPolicy, retry_with_backoff
from mixmaker.core.throttle import RequestThrottle
from mixmaker.errors import format_error
from mixmaker.infrastructure.spotify import SpotifySession
from .models import Song

logger = logging.getLogger(__name__)


def chunked(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class TrackResolver:
    def __init__(
        self,
        throttle: RequestThrottle,
        batch_size: int = 20,
        market: str = "US",
        top_tracks_pick: int = 5,
        policy: Optional[BackoffPolicy] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.throttle = throttle
        self.batch_size = batch_size
        self.market = market
        self.top_tracks_pick = top_tracks_pick
        self.policy = policy or throttle.policy
        self._rng = rng or random.Random()
        self._sleep = sleep

    def resolve(self, session: SpotifySession, songs: Sequence[Song]) -> List[Optional[str]]:
        """Return one URI (or None) per input song, in input order."""
        futures = [
            self.throttle.submit(self._resolve_batch, session, batch)
            for batch in chunked(list(songs), self.batch_size)
        ]
        uris: List[Optional[str]] = []
        for future in futures:
            uris.extend(future.result())
        return uris

    def _resolve_batch(self, session: SpotifySession, batch: Sequence[Song]) -> List[Optional[str]]:
        return [self._resolve_song(session, song) for song in batch]

    def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        return retry_with_backoff(fn, *args, policy=self.policy, sleep=self._sleep)

    def _resolve_song(self, session: SpotifySession, song: Song) -> Optional[str]:
        try:
            tracks = self._call(session.search_tracks, song.title, song.artist)
            if len(tracks) > 0:
                logger.debug("Found exact track: %s by %s", song.title, song.artist)
                return tracks[0].get("uri")

            logger.info("Could not find exact track: %s by %s. Searching for artist: %s",
                        song.title, song.artist, song.artist)
            artists = self._call(session.search_artists, song.artist)
            if len(artists) > 0:
                top_tracks = self._call(session.artist_top_tracks, artists[0]["id"], self.market)
                if top_tracks:
                    index = self._rng.randrange(min(self.top_tracks_pick, len(top_tracks)))
                    logger.debug("Found track for artist: %s", song.artist)
                    return top_tracks[index].get("uri")

            logger.info("No tracks found for artist: %s", song.artist)
            return None
        except Exception as exc:
            logger.warning('Error searching for track "%s" by %s: %s', song.title, song.artist, format_error(exc))
            return None


__all__ = ["TrackResolver", "chunked"]
