#!/usr/bin/env python
"""Retry-with-backoff for calls that may be rate limited (HTTP 429)."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, TypeVar

from mixmaker.observability.metrics import record_rate_limit_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOO_MANY_REQUESTS = 429


def _status_of(exc: BaseException) -> Optional[int]:
    # spotipy exposes http_status, anthropic/requests style errors status_code
    for attr in ("http_status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def is_rate_limited(exc: BaseException) -> bool:
    return _status_of(exc) == TOO_MANY_REQUESTS


def retry_after_seconds(exc: BaseException) -> Optional[float]:
    """Return the server supplied Retry-After hint in seconds, if any."""
    headers: Optional[Mapping[str, Any]] = getattr(exc, "headers", None)
    if not headers:
        response = getattr(exc, "response", None)
        headers = getattr(response, "headers", None)
    if not headers:
        return None
    raw = None
    for key, value in headers.items():
        if str(key).lower() == "retry-after":
            raw = value
            break
    if raw is None:
        return None
    try:
        seconds = float(raw)
    except (TypeError, ValueError):
        return None
    return max(0.0, seconds)


@dataclass(frozen=True)
class BackoffPolicy:
    max_retries: int = 5
    initial_delay: float = 1.0

    def delay_for(self, exc: BaseException, attempt: int) -> float:
        hinted = retry_after_seconds(exc)
        if hinted is not None:
            return hinted
        return self.initial_delay * (2 ** attempt)


def retry_with_backoff(
    fn: Callable[..., T],
    *args: Any,
    policy: Optional[BackoffPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """Call ``fn`` and retry it while it fails with a rate-limit status.

    Any other failure propagates on the first occurrence. Once
    ``policy.max_retries`` retries are spent the last failure is re-raised
    unchanged.
    """
    policy = policy or BackoffPolicy()
    retries = 0
    while True:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            if not is_rate_limited(exc) or retries >= policy.max_retries:
                raise
            delay = policy.delay_for(exc, retries)
            logger.warning("Rate limited. Retrying after %.0fms (retry %d/%d)",
                           delay * 1000, retries + 1, policy.max_retries)
            record_rate_limit_retry()
            sleep(delay)
            retries += 1


__all__ = [
    "BackoffPolicy",
    "is_rate_limited",
    "retry_after_seconds",
    "retry_with_backoff",
]
