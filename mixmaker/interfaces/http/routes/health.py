from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from mixmaker.observability.metrics import update_queue_gauge

health_bp = Blueprint("health_bp", __name__)


def _throttle_queue_depth() -> int:
    throttle = current_app.extensions.get("request_throttle")
    if throttle is None:
        return 0
    return throttle.qsize()


@health_bp.route("/healthz")
def healthz():
    checks = {}

    token_manager = current_app.extensions.get("token_manager")
    logged_in = bool(token_manager and token_manager.store.exists())
    checks["spotify_token"] = "present" if logged_in else "missing"

    depth = _throttle_queue_depth()
    update_queue_gauge(depth)
    checks["throttle_queue_depth"] = depth

    return jsonify({"status": "ok", "checks": checks}), 200
