#!/usr/bin/env python
"""Spotify authentication: token persistence and the request token guard."""

from __future__ import annotations

from flask import current_app, g, request

from mixmaker.errors import AuthenticationRequired
from .tokens import Token, TokenManager, TokenStore, create_oauth

# Endpoints reachable without a stored token
PUBLIC_ENDPOINTS = frozenset({
    "auth_bp.login",
    "auth_bp.callback",
    "health_bp.healthz",
    "metrics_bp.metrics_endpoint",
    "static",
})


def init_auth(app):
    """Require a valid Spotify session before every non-public request."""

    @app.before_request
    def _require_spotify_session():
        # CORS preflight carries no credentials
        if request.method == "OPTIONS":
            return None
        if request.endpoint in PUBLIC_ENDPOINTS or request.endpoint is None:
            return None
        manager: TokenManager = current_app.extensions["token_manager"]
        try:
            g.spotify_session = manager.ensure_session()
        except AuthenticationRequired as exc:
            current_app.logger.info("Token check failed for %s: %s", request.path, exc)
            return "Authentication required. Please log in again.", 401
        return None


__all__ = ["Token", "TokenManager", "TokenStore", "create_oauth", "init_auth", "PUBLIC_ENDPOINTS"]
