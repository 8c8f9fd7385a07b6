"""
Universal Player controller.

One player for both the live stream and podcast episodes. It follows the
shared PlayerContext, loads whatever is selected into the active audio
backend, and keeps the error/retry state the player UI renders.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from station.config import build_stream_url
from station.constants import (
    DEFAULT_STREAM_URL, LIVE_CONTENT_ID, STATION_NAME, SKIP_INTERVAL_SEC,
    MAX_STREAM_RETRIES, RETRY_DELAY_SEC, AUTO_PLAY_DELAY_SEC,
)
from station.models import AudioState, ContentType, PlaybackState, ShowDefinition, Track
from player.audio_service import AudioService
from player.catalog import ShowDirectory
from player.player_context import PlayerContext

logger = logging.getLogger(__name__)

LIVE_TITLE = f"{STATION_NAME} Live"
PODCAST_ICON = "♪"
LIVE_ICON = "📻"

MSG_MAX_RETRIES = "Maximum retry attempts reached. Please try again later."
MSG_RETRY_FAILED = "Retry failed. Please check your connection and try again."
MSG_LIVE_TOGGLE_FAILED = "Unable to connect to the radio stream. Please try again."
MSG_PODCAST_TOGGLE_FAILED = "Playback failed. Please try again."
MSG_STREAM_UNREACHABLE = "Unable to connect to the radio stream. Please check your internet connection and try again."
MSG_PODCAST_BLOCKED = (
    "This podcast episode cannot be played in the web browser due to security "
    "restrictions. Please use the mobile app to listen to podcasts."
)
MSG_LIVE_BLOCKED = "Audio playback failed due to browser security restrictions."

_NETWORK_MARKERS = ("NETWORK_ERR", "failed to load", "404")
_SECURITY_MARKERS = ("CORS", "not supported")


@dataclass
class ContentData:
    title: str = ""
    subtitle: str = ""
    artwork: Optional[str] = None
    audio_url: str = ""
    icon: str = ""


def format_time(seconds: float) -> str:
    """Render seconds as M:SS."""
    total = max(0, int(seconds or 0))
    return f"{total // 60}:{total % 60:02d}"


class UniversalPlayer:
    def __init__(self, context: PlayerContext, audio: AudioService,
                 shows: Optional[ShowDirectory] = None,
                 stream_url: str = DEFAULT_STREAM_URL,
                 on_go_to_show: Optional[Callable[[str], None]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.context = context
        self.audio = audio
        self.shows = shows or ShowDirectory()
        self.stream_url = stream_url
        self.on_go_to_show = on_go_to_show
        self._sleep = sleep

        self.is_collapsed = True
        self.current_audio_url = ""
        self.web_error: Optional[str] = None
        self.stream_error: Optional[str] = None
        self.should_auto_play = False
        self.is_retrying = False
        self.retry_count = 0
        self.selected_show: Optional[ShowDefinition] = None
        self._last_content_id = ""
        self._web_player = None
        self._engine_wired = False

        self.context.subscribe(self._on_context_change)

    # Wiring
    def attach_web_player(self, web_player) -> None:
        """Hook a browser audio bridge up as the web backend's element."""
        self._web_player = web_player
        self.audio.set_web_audio_player_ref(web_player)
        web_player.set_state_callback(self._on_web_state)
        web_player.set_error_callback(self.handle_web_audio_error)
        if self.current_audio_url:
            web_player.load(self.current_audio_url)

    def _on_web_state(self, state: AudioState):
        self.audio.update_web_audio_state(state)
        # The element has reported on the new source, so the switch is over.
        self.audio.set_transitioning(False)

    def _wire_engine(self):
        if self._engine_wired or self.audio.is_web:
            return
        self.audio.engine.add_error_callback(lambda message: self.handle_stream_error(MSG_STREAM_UNREACHABLE))
        self._engine_wired = True

    def close(self):
        self.context.unsubscribe(self._on_context_change)
        if self._web_player is not None:
            self._web_player.close()
            self._web_player = None

    # Derived state
    @property
    def is_visible(self) -> bool:
        return self.context.is_player_visible and self.context.current_content is not None

    def toggle_collapsed(self) -> None:
        self.is_collapsed = not self.is_collapsed

    def content_id(self) -> str:
        content = self.context.current_content
        return content.content_id if content else ""

    def content_data(self) -> ContentData:
        content = self.context.current_content
        if content is None:
            return ContentData()

        if content.type == ContentType.PODCAST:
            episode = content.episode
            show = self.shows.find_by_name(episode.show)
            return ContentData(
                title=episode.title,
                subtitle=episode.show,
                artwork=show.artwork if show else None,
                audio_url=episode.url,
                icon=PODCAST_ICON,
            )

        programme = content.programme
        show = self.shows.find_by_name(programme.name) if programme and programme.name else None
        return ContentData(
            title=programme.name if programme and programme.name else LIVE_TITLE,
            subtitle=f"Hosted by {programme.host}" if programme and programme.host else "Live Radio",
            artwork=show.artwork if show else None,
            audio_url=self.stream_url,
            icon=LIVE_ICON,
        )

    def progress(self) -> Tuple[float, float]:
        if self.audio.is_web:
            return self.audio.get_progress()
        return self.audio.engine.get_progress()

    @property
    def is_playing(self) -> bool:
        if self.audio.is_web:
            return self.audio.get_playback_state() == PlaybackState.PLAYING
        return self.audio.engine.get_state() == PlaybackState.PLAYING

    @property
    def is_loading(self) -> bool:
        if self.audio.is_web:
            state: Optional[AudioState] = self.audio.web_audio_state
            return bool(state and state.is_loading)
        return self.audio.engine.get_state() in (PlaybackState.LOADING, PlaybackState.BUFFERING)

    # Content tracking
    def _on_context_change(self):
        self.on_content_changed()
        self.auto_play()

    def _set_audio_url(self, url: str):
        self.current_audio_url = url
        if self.audio.is_web and self._web_player and url:
            self._web_player.load(url)

    def _setup_track(self, data: ContentData) -> bool:
        content = self.context.current_content
        if content is None or not data.audio_url:
            return False
        track = self._track_for(data)
        try:
            self._wire_engine()
            self.audio.reset()
            self.audio.add(track)
            logger.info(f"Loaded track {track.id} ({track.url})")
            return True
        except Exception as e:
            logger.error(f"Failed to set up track {track.id}: {e}")
            return False

    def on_content_changed(self) -> None:
        content = self.context.current_content
        if content is None:
            self.current_audio_url = ""
            self.web_error = None
            self.stream_error = None
            self.retry_count = 0
            self.should_auto_play = False
            self._last_content_id = ""
            return

        data = self.content_data()
        content_id = content.content_id

        if content_id != self._last_content_id:
            self.web_error = None
            self.stream_error = None
            self.retry_count = 0
            if self.audio.is_web:
                self.audio.set_transitioning(True)
            self.should_auto_play = True
            self._set_audio_url(data.audio_url)
            self._last_content_id = content_id
            if not self.audio.is_web:
                self._setup_track(data)
        elif data.audio_url != self.current_audio_url:
            self._set_audio_url(data.audio_url)

    def auto_play(self) -> bool:
        """Start playback once after a content change. Returns True if play was issued."""
        if not (self.should_auto_play and self.current_audio_url and not self.web_error):
            return False
        self._sleep(AUTO_PLAY_DELAY_SEC)
        try:
            self.audio.play()
            return True
        except Exception as e:
            logger.error(f"Auto-play failed: {e}")
            return False
        finally:
            self.should_auto_play = False

    # Transport
    def toggle_play_pause(self) -> None:
        playing = self.is_playing
        if not playing:
            self.stream_error = None
            self.retry_count = 0
        try:
            if playing:
                self.audio.pause()
            else:
                self.audio.play()
        except Exception as e:
            logger.error(f"Toggle playback failed: {e}")
            content = self.context.current_content
            if content is not None and content.is_live:
                self.handle_stream_error(MSG_LIVE_TOGGLE_FAILED)
            else:
                self.web_error = MSG_PODCAST_TOGGLE_FAILED

    def seek(self, position: float) -> None:
        self.audio.seek_to(position)

    def skip_backward(self) -> None:
        position, _ = self.progress()
        self.seek(max(0.0, position - SKIP_INTERVAL_SEC))

    def skip_forward(self) -> None:
        position, duration = self.progress()
        self.seek(min(duration, position + SKIP_INTERVAL_SEC))

    # Errors and recovery
    def handle_stream_error(self, message: str) -> None:
        logger.error(f"Stream error: {message}")
        self.stream_error = f"{message} (URL: {self.stream_url})"
        self.is_retrying = False

    def handle_web_audio_error(self, error: str) -> None:
        """Classify an error string reported by the browser element."""
        self.audio.set_transitioning(False)
        content = self.context.current_content
        if any(marker in error for marker in _NETWORK_MARKERS):
            self.handle_stream_error(MSG_STREAM_UNREACHABLE)
        elif any(marker in error for marker in _SECURITY_MARKERS):
            if content is not None and content.type == ContentType.PODCAST:
                self.web_error = MSG_PODCAST_BLOCKED
            else:
                self.web_error = MSG_LIVE_BLOCKED
        else:
            self.web_error = error

    def retry_stream(self) -> bool:
        """Reload and restart the current content. Returns True if playback resumed."""
        if self.retry_count >= MAX_STREAM_RETRIES:
            self.stream_error = MSG_MAX_RETRIES
            return False

        self.is_retrying = True
        self.stream_error = None
        self.web_error = None
        self.retry_count += 1
        logger.info(f"Retrying stream (attempt {self.retry_count}/{MAX_STREAM_RETRIES})")

        try:
            if not self.audio.is_web:
                self._wire_engine()
                self.audio.reset()
                data = self.content_data()
                self.audio.add(self._track_for(data))
            self._sleep(RETRY_DELAY_SEC)
            self.audio.play()
        except Exception as e:
            logger.error(f"Retry failed: {e}")
            self.handle_stream_error(MSG_RETRY_FAILED)
            return False

        self.is_retrying = False
        self.retry_count = 0
        return True

    def _track_for(self, data: ContentData) -> Track:
        content = self.context.current_content
        live = content is None or content.is_live
        return Track(
            id=content.episode.id if not live else LIVE_CONTENT_ID,
            url=data.audio_url,
            title=data.title,
            artist=data.subtitle,
            artwork=data.artwork,
            album=STATION_NAME if live else data.subtitle,
            genre="Radio" if live else "Podcast",
            is_live_stream=live,
        )

    # Stream address
    def set_stream_url(self, url: str) -> None:
        """Point the live stream at a new address, reloading it if live is selected."""
        if url == self.stream_url:
            return
        self.stream_url = url
        self.stream_error = None
        content = self.context.current_content
        if content is None or not content.is_live:
            return
        data = self.content_data()
        self._set_audio_url(data.audio_url)
        if not self.audio.is_web:
            self._setup_track(data)

    def update_radio_address(self, port) -> str:
        """Rebuild the stream URL for a new port. Raises ValueError for a bad port."""
        url = build_stream_url(port)
        logger.info(f"Radio address updated to {url}")
        self.set_stream_url(url)
        return url

    # Show details
    def show_name(self) -> str:
        content = self.context.current_content
        if content is None:
            return ""
        if content.type == ContentType.PODCAST:
            return content.episode.show
        return content.programme.name if content.programme else ""

    def can_show_details(self) -> bool:
        name = self.show_name()
        return bool(name) and self.shows.find_by_name(name) is not None

    def show_details(self) -> Optional[ShowDefinition]:
        self.selected_show = self.shows.find_by_name(self.show_name())
        return self.selected_show

    def close_show_details(self) -> None:
        self.selected_show = None

    def go_to_show(self) -> None:
        name = self.show_name()
        if name and self.on_go_to_show:
            self.on_go_to_show(name)
