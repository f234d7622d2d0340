import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from flask import Flask, request, g
from flask_cors import CORS

from config import Config
from mixmaker.settings import load_app_settings
from mixmaker.auth import TokenManager, TokenStore, create_oauth, init_auth
from mixmaker.core import BackoffPolicy, RequestThrottle
from mixmaker.domain import (
    PlaylistOrchestrator,
    PlaylistSuggester,
    SnapshotStore,
    TrackResolver,
)
from mixmaker.interfaces.http.routes import (
    home_bp,
    auth_bp,
    library_bp,
    playlist_bp,
    health_bp,
)
from mixmaker.observability import configure_structured_logging, metrics_blueprint


logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'mixmaker', 'templates')


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask loggers routed to root

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Keep the structured stdout handler; drop stale file handlers
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def create_app(overrides=None):
    settings = load_app_settings(overrides)

    app = Flask(__name__, template_folder=TEMPLATE_DIR)
    app.config.update(
        {
            'SECRET_KEY': settings.secret_key,
            'APP_ENV': settings.app_env,
            'IS_DEVELOPMENT': settings.is_development,
        }
    )
    app.extensions['settings'] = settings
    configure_structured_logging(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in settings.cors_allowed_origins
        if origin and origin.strip() and origin.strip() != "*"
    })
    if allowed_origins:
        CORS(
            app,
            resources={
                r"/liked-songs": {"origins": allowed_origins},
                r"/generate-playlists": {"origins": allowed_origins},
            },
        )

    # One throttle per process serializes every outbound Spotify call
    throttle = RequestThrottle(
        delay_seconds=settings.throttle_delay_ms / 1000.0,
        policy=BackoffPolicy(
            max_retries=settings.rate_limit_max_retries,
            initial_delay=settings.rate_limit_initial_delay_ms / 1000.0,
        ),
    )
    app.extensions['request_throttle'] = throttle

    app.extensions['token_manager'] = TokenManager(
        TokenStore(settings.token_path),
        oauth_factory=lambda: create_oauth(
            settings.spotify_client_id,
            settings.spotify_client_secret,
            settings.spotify_redirect_uri,
            settings.spotify_scopes,
        ),
        refresh_margin_seconds=settings.token_refresh_margin_seconds,
        requests_timeout=settings.spotify_request_timeout,
    )

    suggester = PlaylistSuggester(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        max_tokens=settings.anthropic_max_tokens,
    )
    snapshots = SnapshotStore(settings.snapshot_path)
    resolver = TrackResolver(
        throttle,
        batch_size=settings.search_batch_size,
        market=settings.top_tracks_market,
        top_tracks_pick=settings.top_tracks_pick,
    )
    app.extensions['playlist_suggester'] = suggester
    app.extensions['snapshot_store'] = snapshots
    app.extensions['track_resolver'] = resolver
    app.extensions['playlist_orchestrator'] = PlaylistOrchestrator(
        throttle,
        resolver,
        suggester,
        snapshots,
        page_size=settings.saved_tracks_page_size,
        add_batch_size=settings.add_tracks_batch_size,
        development=settings.is_development,
    )
    app.logger.info(
        "Playlist services ready: env=%s, throttle_delay_ms=%s, model=%s",
        settings.app_env, settings.throttle_delay_ms, settings.anthropic_model,
    )

    init_auth(app)

    # --- Register Blueprints ---
    app.register_blueprint(home_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(library_bp)
    app.register_blueprint(playlist_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    # With the reloader only the child process writes a log file
    debug_mode = bool(Config.DEBUG)
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'log')
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    if not Config.SPOTIPY_CLIENT_ID or not Config.SPOTIPY_CLIENT_SECRET:
        logger.warning("Spotify API client ID or client secret not found in environment variables.")
        logger.warning("Please set SPOTIPY_CLIENT_ID and SPOTIPY_CLIENT_SECRET to log in.")
    if not Config.ANTHROPIC_API_KEY:
        logger.warning("ANTHROPIC_API_KEY is not set; playlist suggestions will fail.")

    app = create_app()
    logger.info("Server running at http://localhost:%s", Config.PORT)
    app.run(host='0.0.0.0', port=Config.PORT, debug=debug_mode, threaded=True)
