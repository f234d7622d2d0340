"""Paging through the user's saved tracks."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from mixmaker.core.throttle import RequestThrottle
from mixmaker.infrastructure.spotify import SpotifySession
from .models import LikedSong

logger = logging.getLogger(__name__)


def iter_saved_track_pages(
    session: SpotifySession,
    page_size: int = 50,
    throttle: Optional[RequestThrottle] = None,
) -> Iterator[List[LikedSong]]:
    """Yield pages of liked songs until the reported total is reached.

    Each call returns a fresh generator, so iteration can be restarted from the
    first page. The total is re-read from every response.
    """
    offset = 0
    while True:
        logger.debug("Fetching liked songs: offset %s", offset)
        if throttle is not None:
            page = throttle.call(session.saved_tracks_page, limit=page_size, offset=offset)
        else:
            page = session.saved_tracks_page(limit=page_size, offset=offset)
        total = int(page.get("total") or 0)
        items = page.get("items") or []
        yield [LikedSong.from_saved_item(item) for item in items if item.get("track")]
        offset += page_size
        if offset >= total:
            return


def fetch_liked_songs(
    session: SpotifySession,
    page_size: int = 50,
    throttle: Optional[RequestThrottle] = None,
) -> List[LikedSong]:
    songs: List[LikedSong] = []
    for page in iter_saved_track_pages(session, page_size=page_size, throttle=throttle):
        songs.extend(page)
    logger.info("Fetched %d liked songs", len(songs))
    return songs


__all__ = ["iter_saved_track_pages", "fetch_liked_songs"]
