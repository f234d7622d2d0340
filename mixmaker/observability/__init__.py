# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    observe_queue_wait_time,
    record_llm_request,
    record_playlist_outcome,
    record_rate_limit_retry,
    record_throttled_call,
    update_queue_gauge,
)
