"""
Bridge to a browser <audio> element.

The browser registers over Socket.IO (see station.api) and receives
`audio_command` events; it reports its element state back as `audio_state`.
"""

import logging
import threading
from typing import Callable, Dict, Optional

from station.models import AudioState

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_bridges: Dict[str, 'WebAudioBridge'] = {}  # device_id -> bridge


def room_for(device_id: str) -> str:
    return f"audio:{device_id}"


def dispatch_state(device_id: str, payload: dict) -> bool:
    """Route a reported state to the bridge for this device. Returns False if none."""
    with _lock:
        bridge = _bridges.get(device_id)
    if not bridge:
        logger.debug(f"Dropping audio state for unknown device {device_id}")
        return False
    bridge.handle_state(AudioState.from_dict(payload))
    return True


def dispatch_error(device_id: str, error: str) -> bool:
    with _lock:
        bridge = _bridges.get(device_id)
    if not bridge:
        return False
    bridge.handle_error(error)
    return True


class WebAudioBridge:
    """
    Player ref for the web platform: play/pause/seek/volume commands go to the
    browser, state snapshots come back through handle_state().
    """

    def __init__(self, socketio, device_id: str):
        self.socketio = socketio
        self.device_id = device_id
        self.src: Optional[str] = None
        self.volume = 1.0
        self._on_state: Optional[Callable[[AudioState], None]] = None
        self._on_error: Optional[Callable[[str], None]] = None
        with _lock:
            _bridges[device_id] = self

    def close(self):
        with _lock:
            if _bridges.get(self.device_id) is self:
                _bridges.pop(self.device_id, None)

    def _send(self, action: str, **params):
        payload = {"action": action, **params}
        logger.debug(f"audio_command -> {self.device_id}: {payload}")
        self.socketio.emit('audio_command', payload, room=room_for(self.device_id))

    def load(self, src: str):
        self.src = src
        self._send("load", src=src)

    def play(self):
        self._send("play")

    def pause(self):
        self._send("pause")

    def seek_to(self, position: float):
        self._send("seek", position=max(0.0, float(position)))

    def set_volume(self, volume: float):
        self.volume = max(0.0, min(1.0, float(volume)))
        self._send("volume", volume=self.volume)

    def set_state_callback(self, callback: Callable[[AudioState], None]):
        self._on_state = callback

    def set_error_callback(self, callback: Callable[[str], None]):
        self._on_error = callback

    def handle_state(self, state: AudioState):
        if self._on_state:
            self._on_state(state)

    def handle_error(self, error: str):
        logger.warning(f"Browser audio error on {self.device_id}: {error}")
        if self._on_error:
            self._on_error(error)
