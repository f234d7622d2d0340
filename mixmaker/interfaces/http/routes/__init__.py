"""Route blueprints exposed via Flask."""

from .home import home_bp
from .auth import auth_bp
from .library import library_bp
from .playlists import playlist_bp
from .health import health_bp

__all__ = [
    "home_bp",
    "auth_bp",
    "library_bp",
    "playlist_bp",
    "health_bp",
]
