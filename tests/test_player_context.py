from unittest.mock import MagicMock

from station.models import PodcastEpisode, PlayerContent, Programme
from player.player_context import PlayerContext, is_content_same

EP1 = PodcastEpisode(id="1", url="u1", title="One", show="Night Owls")
EP2 = PodcastEpisode(id="2", url="u2", title="Two", show="Night Owls")


def test_is_content_same():
    assert is_content_same(None, None)
    assert not is_content_same(None, PlayerContent.live())
    assert not is_content_same(PlayerContent.live(), PlayerContent.podcast(EP1))
    assert is_content_same(PlayerContent.podcast(EP1), PlayerContent.podcast(EP1))
    assert not is_content_same(PlayerContent.podcast(EP1), PlayerContent.podcast(EP2))


def test_two_live_contents_are_same():
    a = PlayerContent.live(Programme(id=1, name="A", day="monday", start_time="06:00", end_time="09:00"))
    b = PlayerContent.live(Programme(id=2, name="B", day="monday", start_time="09:00", end_time="12:00"))
    assert is_content_same(a, b)


def test_set_current_content_notifies_on_change_only():
    ctx = PlayerContext()
    listener = MagicMock()
    ctx.subscribe(listener)

    assert ctx.set_current_content(PlayerContent.podcast(EP1)) is True
    assert ctx.set_current_content(PlayerContent.podcast(EP1)) is False
    assert ctx.set_current_content(PlayerContent.podcast(EP2)) is True
    assert listener.call_count == 2
    assert ctx.current_content.episode.id == "2"


def test_visibility_and_clear():
    ctx = PlayerContext()
    listener = MagicMock()
    ctx.subscribe(listener)

    ctx.set_player_visible(True)
    ctx.set_player_visible(True)
    assert ctx.is_player_visible
    assert listener.call_count == 1

    ctx.set_current_content(PlayerContent.live())
    ctx.clear_player()
    assert ctx.current_content is None
    assert not ctx.is_player_visible
    assert listener.call_count == 3


def test_failing_listener_does_not_block_others():
    ctx = PlayerContext()
    good = MagicMock()
    ctx.subscribe(MagicMock(side_effect=RuntimeError("boom")))
    ctx.subscribe(good)
    ctx.set_current_content(PlayerContent.live())
    good.assert_called_once()

    ctx.unsubscribe(good)
    ctx.clear_player()
    good.assert_called_once()
