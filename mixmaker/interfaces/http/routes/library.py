import logging

from flask import Blueprint, current_app, g, jsonify

from mixmaker.interfaces.http.responses import error_response

logger = logging.getLogger(__name__)

library_bp = Blueprint("library_bp", __name__)


@library_bp.route("/liked-songs", methods=["GET"])
def liked_songs():
    orchestrator = current_app.extensions["playlist_orchestrator"]
    try:
        songs = orchestrator.fetch_liked_songs(g.spotify_session)
    except Exception as exc:
        return error_response(exc, "fetching liked songs")
    return jsonify([song.model_dump() for song in songs])


__all__ = ["library_bp"]
