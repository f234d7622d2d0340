import json

import pytest

from tests.support.stubs import (
    FakeAnthropicClient,
    FakeSpotifySession,
    RecordingThrottle,
    playlist_payload,
    saved_item,
)


def _orchestrator(tmp_path, *replies, development=True, add_batch_size=100):
    from mixmaker.domain import PlaylistOrchestrator, PlaylistSuggester, SnapshotStore, TrackResolver

    throttle = RecordingThrottle()
    client = FakeAnthropicClient(*replies)
    orchestrator = PlaylistOrchestrator(
        throttle,
        TrackResolver(throttle),
        PlaylistSuggester(client=client),
        SnapshotStore(str(tmp_path / "saved_playlists.json")),
        add_batch_size=add_batch_size,
        development=development,
    )
    return orchestrator, client


def _session(**kwargs):
    kwargs.setdefault("saved", [saved_item("Liked", "Someone", "id1")])
    kwargs.setdefault("catalog", {(f"Song {i}", "Band"): f"spotify:track:{i}" for i in range(300)})
    return FakeSpotifySession(**kwargs)


@pytest.mark.unit
def test_playlist_without_resolvable_tracks_is_skipped(tmp_path):
    suggestions = [playlist_payload(f"Mix {i}", [(f"Song {i}", "Band")]) for i in range(5)]
    suggestions.insert(2, playlist_payload("Ghosts", [("Nothing", "Nobody")]))
    orchestrator, _ = _orchestrator(tmp_path, json.dumps(suggestions))
    session = _session()

    created = orchestrator.create_playlists(session)

    assert [p.name for p in created] == [f"Mix {i}" for i in range(5)]
    assert [args[0] for args in session.calls_to("create_playlist")] == [f"Mix {i}" for i in range(5)]
    assert all(args[2] is False for args in session.calls_to("create_playlist"))


@pytest.mark.unit
def test_failure_on_one_playlist_does_not_stop_the_others(tmp_path):
    suggestions = [playlist_payload(name, [("Song 1", "Band")]) for name in ("First", "Broken", "Last")]
    orchestrator, _ = _orchestrator(tmp_path, json.dumps(suggestions))
    session = _session(fail_create_for={"Broken"})

    created = orchestrator.create_playlists(session)

    assert [p.name for p in created] == ["First", "Last"]
    assert [p.id for p in created] == ["pl1", "pl2"]


@pytest.mark.unit
def test_no_created_playlist_is_an_error(tmp_path):
    from mixmaker.errors import NoPlaylistsCreated

    orchestrator, _ = _orchestrator(tmp_path, json.dumps([playlist_payload("Ghosts", [("Nothing", "Nobody")])]))
    with pytest.raises(NoPlaylistsCreated):
        orchestrator.create_playlists(_session())


@pytest.mark.unit
def test_tracks_are_added_in_batches_of_one_hundred(tmp_path):
    songs = [(f"Song {i}", "Band") for i in range(250)]
    orchestrator, _ = _orchestrator(tmp_path, json.dumps(playlist_payload("Big", songs)))
    session = _session()

    playlist = orchestrator.create_custom_playlist(session, "a very long playlist")

    adds = session.calls_to("add_tracks")
    assert [len(uris) for _, uris in adds] == [100, 100, 50]
    assert session.playlists[playlist.id] == [f"spotify:track:{i}" for i in range(250)]
    assert playlist.track_count == 250


@pytest.mark.unit
def test_name_and_description_are_sanitized_before_creation(tmp_path):
    payload = playlist_payload("x" * 120, [("Song 1", "Band")], description=" " + "y" * 320)
    orchestrator, _ = _orchestrator(tmp_path, json.dumps(payload))
    session = _session()

    playlist = orchestrator.create_custom_playlist(session, "long names")

    name, description, public = session.calls_to("create_playlist")[0]
    assert name == "x" * 100
    assert description == "y" * 300
    assert public is False
    assert playlist.name == name


@pytest.mark.unit
@pytest.mark.parametrize("prompt", [None, "", "   "])
def test_empty_prompt_makes_no_external_calls(tmp_path, prompt):
    from mixmaker.errors import EmptyPrompt

    orchestrator, client = _orchestrator(tmp_path)
    session = _session()

    with pytest.raises(EmptyPrompt):
        orchestrator.create_custom_playlist(session, prompt)
    assert client.requests == []
    assert session.calls == []


@pytest.mark.unit
def test_custom_playlist_without_tracks_is_not_created(tmp_path):
    from mixmaker.errors import NoTracksResolved

    orchestrator, _ = _orchestrator(tmp_path, json.dumps(playlist_payload("Ghosts", [("Nothing", "Nobody")])))
    session = _session()

    with pytest.raises(NoTracksResolved):
        orchestrator.create_custom_playlist(session, "ghost songs")
    assert session.calls_to("create_playlist") == []


@pytest.mark.unit
def test_custom_playlist_creation_failure_propagates(tmp_path):
    from spotipy.exceptions import SpotifyException

    orchestrator, _ = _orchestrator(tmp_path, json.dumps(playlist_payload("Broken", [("Song 1", "Band")])))
    with pytest.raises(SpotifyException):
        orchestrator.create_custom_playlist(_session(fail_create_for={"Broken"}), "anything")


@pytest.mark.unit
def test_snapshot_is_reused_in_development(tmp_path):
    reply = json.dumps([playlist_payload("Saved", [("Song 1", "Band")])])
    orchestrator, client = _orchestrator(tmp_path, reply)
    session = _session()

    first = orchestrator.generate_playlists(session)
    second = orchestrator.generate_playlists(session)

    assert first == second
    assert len(client.requests) == 1
    assert len(session.calls_to("saved_tracks_page")) == 1


@pytest.mark.unit
def test_snapshot_is_ignored_in_production(tmp_path):
    reply = json.dumps([playlist_payload("Fresh", [("Song 1", "Band")])])
    orchestrator, client = _orchestrator(tmp_path, reply, reply, development=False)
    session = _session()

    orchestrator.generate_playlists(session)
    orchestrator.generate_playlists(session)

    assert len(client.requests) == 2
    assert not (tmp_path / "saved_playlists.json").exists()


@pytest.mark.unit
def test_all_spotify_calls_go_through_the_throttle(tmp_path):
    orchestrator, _ = _orchestrator(tmp_path, json.dumps(playlist_payload("Mix", [("Song 1", "Band")])))
    orchestrator.create_custom_playlist(_session(), "anything")

    assert [name for name, _ in orchestrator.throttle.submitted] == [
        "_resolve_batch",
        "create_playlist",
        "add_tracks",
    ]


@pytest.mark.unit
def test_bulk_creation_saves_and_reuses_the_snapshot_in_development(tmp_path):
    reply = json.dumps([playlist_payload("Mix", [("Song 1", "Band")])])
    orchestrator, client = _orchestrator(tmp_path, reply)
    session = _session()

    orchestrator.create_playlists(session)
    assert (tmp_path / "saved_playlists.json").exists()
    orchestrator.create_playlists(session)

    assert len(client.requests) == 1
    assert len(session.calls_to("create_playlist")) == 2


@pytest.mark.unit
def test_created_playlist_reports_its_final_state(tmp_path):
    from mixmaker.domain import PlaylistState

    orchestrator, _ = _orchestrator(tmp_path, json.dumps([playlist_payload("Mix", [("Song 1", "Band")])]))

    (playlist,) = orchestrator.create_playlists(_session())

    assert playlist.state is PlaylistState.POPULATED
    assert playlist.track_count == 1


@pytest.mark.unit
def test_skipped_and_failed_playlists_log_their_final_state(tmp_path, caplog):
    suggestions = [
        playlist_payload("Ghosts", [("Nothing", "Nobody")]),
        playlist_payload("Broken", [("Song 1", "Band")]),
        playlist_payload("Fine", [("Song 2", "Band")]),
    ]
    orchestrator, _ = _orchestrator(tmp_path, json.dumps(suggestions))

    with caplog.at_level("INFO", logger="mixmaker.domain.orchestrator"):
        orchestrator.create_playlists(_session(fail_create_for={"Broken"}))

    messages = [record.getMessage() for record in caplog.records]
    assert 'Playlist "Ghosts" skipped: no tracks resolved' in messages
    assert 'Playlist "Broken" failed after reaching resolved_nonempty' in messages
