"""Core primitives shared across backend layers."""

from .backoff import BackoffPolicy, is_rate_limited, retry_after_seconds, retry_with_backoff
from .throttle import QueuedTask, RequestThrottle

__all__ = [
    "BackoffPolicy",
    "QueuedTask",
    "RequestThrottle",
    "is_rate_limited",
    "retry_after_seconds",
    "retry_with_backoff",
]
