import datetime

import pytest

from station.models import (
    normalize_time, normalize_day, Programme, PodcastEpisode, ShowDefinition,
    PlayerContent, ContentType, AudioState,
)


@pytest.mark.parametrize("raw,expected", [
    ("6:00", "06:00"),
    ("06:05", "06:05"),
    ("23:59:59", "23:59"),
    (datetime.time(7, 15), "07:15"),
])
def test_normalize_time(raw, expected):
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["24:00", "7", "ab:cd", "12:60", None])
def test_normalize_time_rejects(raw):
    with pytest.raises(ValueError):
        normalize_time(raw)


def test_normalize_day():
    assert normalize_day(" Sunday ") == "sunday"
    with pytest.raises(ValueError):
        normalize_day("someday")


def test_programme_from_camel_case():
    p = Programme.from_dict({"id": 3, "name": "Drive", "day": "Friday",
                             "startTime": "16:00", "endTime": "18:00"})
    assert p.day == "friday"
    assert p.start_time == "16:00"
    assert p.to_dict() == {"id": 3, "name": "Drive", "day": "friday",
                           "startTime": "16:00", "endTime": "18:00"}


def test_programme_on_air_across_midnight():
    late = Programme(id=1, name="Night Owls", day="saturday", start_time="22:00", end_time="02:00")
    assert late.spans_midnight
    assert late.is_on_air("23:30")
    assert late.is_on_air("01:00")
    assert not late.is_on_air("12:00")

    day = Programme(id=2, name="Lunch", day="saturday", start_time="12:00", end_time="13:00")
    assert day.is_on_air("12:00")
    assert day.is_on_air("13:00")
    assert not day.is_on_air("13:01")


def test_episode_to_dict_omits_missing_timestamp():
    ep = PodcastEpisode.from_dict({"id": 12, "url": "u", "title": "t", "show": "s"})
    assert ep.id == "12"
    assert ep.to_dict() == {"id": "12", "url": "u", "title": "t", "show": "s", "description": ""}


def test_show_definition_from_dict():
    show = ShowDefinition.from_dict({
        "showId": "night-owls", "name": "Night Owls", "hosts": None,
        "segments": [{"name": "Deep Cuts", "descr": "Rarities"}], "unknown": 1,
    })
    assert show.show_id == "night-owls"
    assert show.hosts == []
    assert show.segments[0].description == "Rarities"


def test_player_content_ids():
    ep = PodcastEpisode(id="ep9", url="u", title="t", show="s")
    assert PlayerContent.podcast(ep).content_id == "podcast-ep9"
    live = PlayerContent.live()
    assert live.is_live
    assert live.type == ContentType.LIVE
    assert live.content_id == "live-radio"


def test_audio_state_from_browser_payload():
    state = AudioState.from_dict({"device_id": "x", "position": "12.5", "duration": 60,
                                  "isPlaying": True, "isLoading": False})
    assert state.position == 12.5
    assert state.is_playing is True
    assert state.is_loading is False
