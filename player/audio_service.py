"""
Audio service facade.
Routes playback calls to the native mpv engine or to the browser <audio>
element, depending on the platform the player runs on.
"""

import logging
from typing import Callable, Optional, Tuple

from station.models import AudioState, PlaybackState, Track

logger = logging.getLogger(__name__)

PLATFORM_NATIVE = "native"
PLATFORM_WEB = "web"


class AudioService:
    """
    Thin switch between two playback backends.

    On the web the element is fed by its `src`, so `add()` is a no-op there and
    progress/state come from the last snapshot the browser reported. On
    native, progress and state are read from the engine directly by callers.
    """

    def __init__(self, platform: str = PLATFORM_NATIVE, engine=None):
        if platform not in (PLATFORM_NATIVE, PLATFORM_WEB):
            raise ValueError(f"Unknown platform: {platform}")
        self.platform = platform
        self._engine = engine
        self._web_player = None
        self._web_audio_state: Optional[AudioState] = None
        self._web_state_callback: Optional[Callable[[AudioState], None]] = None
        self._transitioning = False

    @property
    def is_web(self) -> bool:
        return self.platform == PLATFORM_WEB

    @property
    def engine(self):
        """Native engine, created on first use (needs libmpv)."""
        if self._engine is None:
            from player.engine import NativeEngine
            logger.info("Initializing native playback engine...")
            self._engine = NativeEngine()
        return self._engine

    # Web wiring
    def set_web_audio_player_ref(self, ref) -> None:
        self._web_player = ref

    def set_web_audio_state_listener(self, callback: Callable[[AudioState], None]) -> None:
        self._web_state_callback = callback

    def update_web_audio_state(self, state: AudioState) -> None:
        self._web_audio_state = state
        if self._web_state_callback:
            self._web_state_callback(state)

    @property
    def web_audio_state(self) -> Optional[AudioState]:
        return self._web_audio_state

    def set_transitioning(self, value: bool) -> None:
        self._transitioning = value

    @property
    def is_transitioning(self) -> bool:
        return self._transitioning

    # Playback
    def reset(self):
        if self.is_web:
            if self._web_player:
                self._web_player.pause()
            return
        self.engine.reset()

    def add(self, track: Track):
        if self.is_web:
            return
        self.engine.add(track)

    def play(self):
        if self.is_web:
            if self._web_player:
                self._web_player.play()
            return
        self.engine.play()

    def pause(self):
        if self.is_web:
            if self._web_player:
                self._web_player.pause()
            return
        self.engine.pause()

    def seek_to(self, position: float):
        if self.is_web:
            if self._web_player:
                self._web_player.seek_to(position)
            return
        self.engine.seek_to(position)

    def get_progress(self) -> Tuple[float, float]:
        """(position, duration) from the last web snapshot; (0, 0) otherwise."""
        if self.is_web and self._web_audio_state:
            return (self._web_audio_state.position, self._web_audio_state.duration)
        return (0.0, 0.0)

    def get_playback_state(self) -> PlaybackState:
        if self.is_web and self._web_audio_state:
            return PlaybackState.PLAYING if self._web_audio_state.is_playing else PlaybackState.PAUSED
        return PlaybackState.NONE
