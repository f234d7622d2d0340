#!/usr/bin/env python
"""Playlist suggestions from the Anthropic Messages API."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, List, Optional, Sequence

import anthropic
from pydantic import TypeAdapter, ValidationError

from mixmaker.errors import MalformedSuggestion
from mixmaker.observability.metrics import record_llm_request
from .models import LikedSong, PlaylistSuggestion
from .prompts import build_custom_prompt, build_library_prompt

logger = logging.getLogger(__name__)

_PLAYLISTS = TypeAdapter(List[PlaylistSuggestion])


def _reply_text(response: Any) -> str:
    for block in getattr(response, "content", None) or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            return text
    raise MalformedSuggestion("Language model reply contained no text block")


def parse_playlists(text: str) -> List[PlaylistSuggestion]:
    """Parse a reply holding a JSON array of playlists (a lone object is accepted too)."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedSuggestion(f"Language model reply is not valid JSON: {exc}") from exc
    if isinstance(data, dict):
        data = [data]
    try:
        return _PLAYLISTS.validate_python(data)
    except ValidationError as exc:
        raise MalformedSuggestion(f"Language model reply has an unexpected shape: {exc}") from exc


def parse_playlist(text: str) -> PlaylistSuggestion:
    """Parse a reply holding a single JSON playlist object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedSuggestion(f"Language model reply is not valid JSON: {exc}") from exc
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    try:
        return PlaylistSuggestion.model_validate(data)
    except ValidationError as exc:
        raise MalformedSuggestion(f"Language model reply has an unexpected shape: {exc}") from exc


class PlaylistSuggester:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-3-5-sonnet-latest",
        max_tokens: int = 4000,
        client: Optional[Any] = None,
        client_factory: Optional[Callable[[], Any]] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self._api_key = api_key
        self._client = client
        self._client_factory = client_factory

    @property
    def client(self) -> Any:
        # Built on first use so the app starts without an API key configured
        if self._client is None:
            if self._client_factory is not None:
                self._client = self._client_factory()
            else:
                self._client = anthropic.Anthropic(api_key=self._api_key)
        return self._client

    def _complete(self, prompt: str, kind: str) -> str:
        logger.info("Sending %s request to the language model", kind)
        started = time.monotonic()
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        record_llm_request(kind, time.monotonic() - started)
        logger.info("Received %s response from the language model", kind)
        return _reply_text(response)

    def suggest_from_library(self, liked_songs: Sequence[LikedSong]) -> List[PlaylistSuggestion]:
        text = self._complete(build_library_prompt(liked_songs), "library")
        playlists = parse_playlists(text)
        logger.info("Language model suggested %d playlists", len(playlists))
        return playlists

    def suggest_from_prompt(self, user_prompt: str) -> PlaylistSuggestion:
        return parse_playlist(self._complete(build_custom_prompt(user_prompt), "custom"))


__all__ = ["PlaylistSuggester", "parse_playlists", "parse_playlist"]
