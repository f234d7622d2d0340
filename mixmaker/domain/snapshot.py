"""One-time snapshot of generated playlist suggestions (development only)."""

from __future__ import annotations

import json
import logging
import os
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from .models import PlaylistSuggestion

logger = logging.getLogger(__name__)

_PLAYLISTS = TypeAdapter(List[PlaylistSuggestion])


class SnapshotStore:
    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Optional[List[PlaylistSuggestion]]:
        """Return the saved suggestions, or None when there is no usable snapshot."""
        if not self.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                return _PLAYLISTS.validate_python(json.load(handle))
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Ignoring unreadable playlist snapshot %s: %s", self.path, exc)
            return None

    def save(self, playlists: List[PlaylistSuggestion]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump([p.model_dump() for p in playlists], handle, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)


__all__ = ["SnapshotStore"]
