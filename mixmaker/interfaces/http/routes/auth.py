#!/usr/bin/env python
"""Spotify OAuth authorization-code flow."""

from __future__ import annotations

import logging
import secrets

from flask import Blueprint, current_app, redirect, request, session

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth_bp", __name__)

_STATE_KEY = "spotify_oauth_state"


def _token_manager():
    return current_app.extensions["token_manager"]


@auth_bp.route("/login", methods=["GET"])
def login():
    logger.info("Initiating Spotify login")
    state = secrets.token_urlsafe(16)
    session[_STATE_KEY] = state
    return redirect(_token_manager().authorize_url(state))


@auth_bp.route("/callback", methods=["GET"])
def callback():
    logger.info("Received callback from Spotify")
    error = request.args.get("error")
    if error:
        return f"Error: {error}", 400

    expected_state = session.pop(_STATE_KEY, None)
    if not expected_state or request.args.get("state") != expected_state:
        return "Error: OAuth state mismatch", 400

    code = request.args.get("code")
    if not code:
        return "Error: Missing authorization code", 400

    try:
        _token_manager().exchange_code(code)
    except Exception as exc:  # spotipy raises SpotifyOauthError or requests errors here
        logger.warning("Login error: %s", exc)
        return f"Error: {exc}", 400

    return "Login successful! You can now use the other endpoints."


__all__ = ["auth_bp"]
