"""Playlist generation routes: suggestions, bulk preview and custom prompt."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, g, jsonify, render_template, request

from mixmaker.interfaces.http.responses import error_response

logger = logging.getLogger(__name__)

playlist_bp = Blueprint("playlist_bp", __name__)


def _orchestrator():
    return current_app.extensions["playlist_orchestrator"]


@playlist_bp.route("/generate-playlists", methods=["GET"])
def generate_playlists():
    try:
        playlists = _orchestrator().generate_playlists(g.spotify_session)
    except Exception as exc:
        return error_response(exc, "generating playlists")
    return jsonify([playlist.model_dump() for playlist in playlists])


@playlist_bp.route("/preview-playlists", methods=["GET"])
def preview_playlists():
    try:
        created = _orchestrator().create_playlists(g.spotify_session)
    except Exception as exc:
        return error_response(exc, "creating preview playlists")
    logger.info("Sending HTML response with %d embedded players", len(created))
    return render_template("preview.html", playlists=created)


@playlist_bp.route("/create-custom-playlist", methods=["POST"])
def create_custom_playlist():
    payload = request.get_json(silent=True) or {}
    prompt = payload.get("prompt") if isinstance(payload, dict) else None
    if not isinstance(prompt, str):
        prompt = None
    try:
        playlist = _orchestrator().create_custom_playlist(g.spotify_session, prompt)
    except Exception as exc:
        return error_response(exc, "creating custom playlist")
    return render_template("custom_playlist.html", playlist=playlist)


__all__ = ["playlist_bp"]
