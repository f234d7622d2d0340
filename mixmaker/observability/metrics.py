from __future__ import annotations

from typing import Optional

from flask import Blueprint, Response
from prometheus_client import Counter, Gauge, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

THROTTLED_CALLS = Counter(
    "mixmaker_throttled_calls_total",
    "Units of work executed by the outbound request throttle.",
    ["outcome"],
)
RATE_LIMIT_RETRIES = Counter(
    "mixmaker_rate_limit_retries_total",
    "Retries scheduled after a 429 response from the Spotify API.",
)
PLAYLIST_OUTCOMES = Counter(
    "mixmaker_playlists_total",
    "Suggested playlists by final state.",
    ["state"],
)
LLM_REQUESTS = Counter(
    "mixmaker_llm_requests_total",
    "Requests sent to the language model.",
    ["kind"],
)
LLM_LATENCY = Histogram(
    "mixmaker_llm_request_seconds",
    "Latency of language model completions.",
    buckets=(1, 2, 5, 10, 20, 40, 60, 120, float("inf")),
)
THROTTLE_QUEUE_DEPTH = Gauge(
    "mixmaker_throttle_queue_depth",
    "Units of work waiting in the outbound request throttle.",
)
THROTTLE_QUEUE_WAIT = Histogram(
    "mixmaker_throttle_queue_wait_seconds",
    "Time a unit of work spends queued before the throttle worker runs it.",
    buckets=(0.1, 0.5, 1, 2, 5, 10, 30, 60, float("inf")),
)


def record_throttled_call(success: bool) -> None:
    THROTTLED_CALLS.labels(outcome="success" if success else "failure").inc()


def record_rate_limit_retry() -> None:
    RATE_LIMIT_RETRIES.inc()


def record_playlist_outcome(state: str) -> None:
    PLAYLIST_OUTCOMES.labels(state=state).inc()


def record_llm_request(kind: str, duration_seconds: Optional[float] = None) -> None:
    LLM_REQUESTS.labels(kind=kind).inc()
    if duration_seconds is not None:
        LLM_LATENCY.observe(duration_seconds)


def update_queue_gauge(depth: int) -> None:
    THROTTLE_QUEUE_DEPTH.set(max(0, depth))


def observe_queue_wait_time(wait_seconds: float) -> None:
    THROTTLE_QUEUE_WAIT.observe(max(0.0, wait_seconds))


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
