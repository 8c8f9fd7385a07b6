from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from station.models import Programme, PodcastEpisode
from player import cli as cli_module
from player.client import ApiError


@pytest.fixture
def client(monkeypatch):
    mock_client = MagicMock()
    mock_client.last_error = None
    monkeypatch.setattr(cli_module, "IndigoClient", lambda base_url=None: mock_client)
    return mock_client


def run(*args):
    return CliRunner().invoke(cli_module.cli, list(args))


def test_schedule_for_day(client):
    client.get_programmes.return_value = [
        Programme(id=2, name="Drive", day="monday", start_time="16:00", end_time="18:00"),
        Programme(id=1, name="Breakfast", day="monday", start_time="06:00", end_time="09:00", host="Ann"),
    ]
    result = run("schedule", "--day", "monday")
    assert result.exit_code == 0
    assert result.output.index("Breakfast") < result.output.index("Drive")


def test_schedule_api_error(client):
    client.get_programmes.side_effect = ApiError("Failed to load radio programs")
    result = run("schedule", "--day", "monday")
    assert result.exit_code == 1
    assert "Failed to load radio programs" in result.output


def test_now_shows_up_next(client, monkeypatch):
    drive = Programme(id=2, name="Drive", day="monday", start_time="16:00", end_time="18:00")
    client.get_programmes.return_value = [drive]
    monkeypatch.setattr(cli_module.ProgrammeSchedule, "current", lambda self, now=None: None)
    monkeypatch.setattr(cli_module.ProgrammeSchedule, "next", lambda self, now=None: drive)
    result = run("now")
    assert result.exit_code == 0
    assert "No scheduled programme right now" in result.output
    assert "Up next: Drive (Monday 16:00)" in result.output


def test_episodes_filtered(client):
    client.get_podcast_episodes.return_value = [
        PodcastEpisode(id="1", url="u", title="Pilot", show="Night Owls"),
        PodcastEpisode(id="2", url="u", title="Sunrise", show="Morning Glory"),
    ]
    result = run("episodes", "--show", "night owls")
    assert result.exit_code == 0
    assert "Pilot" in result.output
    assert "Sunrise" not in result.output


def test_radio_address_reports_fallback(client):
    client.get_radio_address.return_value = "https://internetradio.indigofm.au:8174/stream"
    client.last_error = "Failed to load radio address, using default"
    result = run("radio-address")
    assert result.exit_code == 0
    assert "8174" in result.output
    assert "using default" in result.output


def test_play_unknown_episode(client):
    client.get_podcast_episodes.return_value = []
    result = run("play", "missing")
    assert result.exit_code == 1
    assert "Episode missing not found." in result.output
