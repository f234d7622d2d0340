"""Plain-text error responses shared by the route blueprints."""

from __future__ import annotations

import logging

from mixmaker.errors import format_error, status_for

logger = logging.getLogger(__name__)


def error_response(exc: BaseException, action: str, default_status: int = 500):
    """Log ``exc`` and build an ``Error: ...`` response with a matching status."""
    status = status_for(exc, default_status)
    message = format_error(exc)
    if status >= 500:
        logger.error("Error %s:\n%s", action, message, exc_info=exc)
    else:
        logger.info("Rejected %s: %s", action, message)
    return f"Error: {message}", status, {"Content-Type": "text/plain; charset=utf-8"}
