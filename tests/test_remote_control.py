from unittest.mock import MagicMock

import pytest

from station.models import PlaybackState, Track
from player.remote_control import RemoteControl


@pytest.fixture
def engine():
    e = MagicMock()
    e.get_progress.return_value = (10.0, 120.0)
    return e


def test_registers_engine_callbacks(engine):
    remote = RemoteControl(engine)
    engine.set_state_change_callback.assert_called_once_with(remote.on_playback_state)
    engine.add_error_callback.assert_called_once_with(remote.on_playback_error)
    engine.set_track_change_callback.assert_called_once_with(remote.on_track_changed)


def test_transport(engine):
    remote = RemoteControl(engine)
    remote.remote_play()
    remote.remote_pause()
    remote.remote_stop()
    remote.remote_seek(33)
    engine.play.assert_called_once()
    engine.pause.assert_called_once()
    engine.stop.assert_called_once()
    engine.seek_to.assert_called_once_with(33)


def test_jumps(engine):
    remote = RemoteControl(engine)
    remote.remote_jump_forward()
    engine.seek_to.assert_called_with(25.0)
    remote.remote_jump_backward(30)
    engine.seek_to.assert_called_with(0.0)


def test_next_previous_do_nothing(engine):
    remote = RemoteControl(engine)
    remote.remote_next()
    remote.remote_previous()
    engine.seek_to.assert_not_called()
    engine.play.assert_not_called()


def test_events_are_logged(engine, caplog):
    remote = RemoteControl(engine)
    with caplog.at_level("INFO"):
        remote.on_playback_state(PlaybackState.PLAYING)
        remote.on_track_changed(Track(id="ep1", url="u", title="Pilot", artist="Night Owls"))
        remote.on_playback_error("decoder died")
    assert "Playback state: playing" in caplog.text
    assert "Track changed: Pilot (ep1)" in caplog.text
    assert "Playback error: decoder died" in caplog.text
