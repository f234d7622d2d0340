import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'mixmaker' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import stubs as test_stubs


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Ensure a clean env for tests: fake credentials, no real keys."""
    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIPY_CLIENT_SECRET", "test-client-secret")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    yield


@pytest.fixture
def app(tmp_path):
    import app as app_module

    application = app_module.create_app(
        {
            "app_env": "development",
            "secret_key": "test-secret",
            "spotify_client_id": "test-client-id",
            "spotify_client_secret": "test-client-secret",
            "token_path": str(tmp_path / "token.json"),
            "snapshot_path": str(tmp_path / "saved_playlists.json"),
            "throttle_delay_ms": 0,
        }
    )
    application.config["TESTING"] = True
    yield application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def spotify_session():
    return test_stubs.FakeSpotifySession(
        saved=[test_stubs.saved_item(f"Liked {i}", f"Artist {i}", f"id{i}") for i in range(3)],
        catalog={
            ("Song A", "Band"): "spotify:track:a",
            ("Song B", "Band"): "spotify:track:b",
        },
    )


@pytest.fixture
def anthropic_client():
    return test_stubs.FakeAnthropicClient()


@pytest.fixture
def logged_in(app, spotify_session, anthropic_client):
    """Replace the token manager and language model client with stubs."""
    from mixmaker.domain.suggestions import PlaylistSuggester

    app.extensions["token_manager"] = test_stubs.StubTokenManager(spotify_session)
    orchestrator = app.extensions["playlist_orchestrator"]
    orchestrator.suggester = PlaylistSuggester(client=anthropic_client)
    return spotify_session

