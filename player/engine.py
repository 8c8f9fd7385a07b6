"""
Native playback engine using python-mpv.
Handles the low-level details of audio playback, events, and state for
both the live stream and podcast episodes.
"""

import logging
from typing import Optional, Callable, List, Tuple

import mpv

from station.errors import PlaybackError
from station.models import Track, PlaybackState

logger = logging.getLogger(__name__)


class NativeEngine:
    """Wrapper around MPV for stream and episode playback."""

    def __init__(self):
        # vo='null' because we are audio-only
        self.player = mpv.MPV(
            vo='null',
            ytdl=False,
            cache=True,
        )

        self._track_end_callbacks: List[Callable[[], None]] = []
        self._on_state_change: Optional[Callable[[PlaybackState], None]] = None
        self._error_callbacks: List[Callable[[str], None]] = []
        self._on_track_change: Optional[Callable[[Optional[Track]], None]] = None

        self.current_track: Optional[Track] = None
        self.state = PlaybackState.NONE

        self.player.observe_property('eof-reached', self._handle_eof)
        self.player.observe_property('paused-for-cache', self._handle_buffering)

        @self.player.event_callback('end-file')
        def _on_end_file(event):
            data = getattr(event, 'data', None)
            if data is not None and getattr(data, 'reason', None) == mpv.MpvEventEndFile.ERROR:
                self._handle_error(f"Stream failed to load: {getattr(data, 'error', 'unknown')}")

        self.player.volume = 100

    def _set_state(self, state: PlaybackState):
        self.state = state
        if self._on_state_change:
            self._on_state_change(state)

    def reset(self):
        """Drop the loaded track and return to an idle state."""
        self.player.stop()
        self.current_track = None
        self._set_state(PlaybackState.NONE)
        if self._on_track_change:
            self._on_track_change(None)

    def add(self, track: Track):
        """Load a track paused, ready for play()."""
        self.current_track = track
        self.player.pause = True
        try:
            self.player.play(track.url)
        except SystemError as e:
            self.current_track = None
            raise PlaybackError(f"Could not load {track.url}") from e
        self._set_state(PlaybackState.LOADING)
        if self._on_track_change:
            self._on_track_change(track)

    def play(self):
        if not self.current_track:
            return
        self.player.pause = False
        self._set_state(PlaybackState.PLAYING)

    def pause(self):
        self.player.pause = True
        self._set_state(PlaybackState.PAUSED)

    def stop(self):
        self.player.stop()
        self._set_state(PlaybackState.STOPPED)

    def seek_to(self, position: float):
        """Seek to absolute position in seconds (ignored for the live stream)."""
        if not self.current_track or self.current_track.is_live_stream:
            return
        try:
            self.player.seek(max(0.0, position), reference='absolute')
        except SystemError as e:
            logger.warning(f"Error seeking: {e}")

    def set_volume(self, level: int):
        """Set volume (0-100)."""
        self.player.volume = max(0, min(100, level))

    def get_progress(self) -> Tuple[float, float]:
        return (self.player.time_pos or 0.0, self.player.duration or 0.0)

    def get_state(self) -> PlaybackState:
        return self.state

    # Event handlers
    def _handle_eof(self, name, value):
        if value:
            self._set_state(PlaybackState.STOPPED)
            for callback in self._track_end_callbacks:
                try:
                    callback()
                except Exception as e:
                    logger.error(f"track_end callback {callback} failed: {e}")

    def _handle_buffering(self, name, value):
        if value is None or self.state not in (PlaybackState.PLAYING, PlaybackState.BUFFERING):
            return
        self._set_state(PlaybackState.BUFFERING if value else PlaybackState.PLAYING)

    def _handle_error(self, message: str):
        logger.error(f"Playback error: {message}")
        self._set_state(PlaybackState.STOPPED)
        for callback in list(self._error_callbacks):
            callback(message)

    # Callback setters
    def add_track_end_callback(self, callback: Callable[[], None]):
        if callback not in self._track_end_callbacks:
            self._track_end_callbacks.append(callback)

    def set_state_change_callback(self, callback: Callable[[PlaybackState], None]):
        self._on_state_change = callback

    def add_error_callback(self, callback: Callable[[str], None]):
        if callback not in self._error_callbacks:
            self._error_callbacks.append(callback)

    def set_track_change_callback(self, callback: Callable[[Optional[Track]], None]):
        self._on_track_change = callback

    def terminate(self):
        self.player.terminate()
