import logging

from station.constants import SKIP_INTERVAL_SEC
from station.models import PlaybackState, Track

logger = logging.getLogger(__name__)


class RemoteControl:
    """
    Media-key / lock-screen handler for the native engine.
    Relays transport commands to the engine and logs the engine's events.
    """
    def __init__(self, engine):
        self.engine = engine

        # Connect to engine signals
        self.engine.set_state_change_callback(self.on_playback_state)
        self.engine.add_error_callback(self.on_playback_error)
        self.engine.set_track_change_callback(self.on_track_changed)

    # --- Actions triggered by the system ---
    def remote_play(self):
        logger.info("Remote play")
        self.engine.play()

    def remote_pause(self):
        logger.info("Remote pause")
        self.engine.pause()

    def remote_stop(self):
        logger.info("Remote stop")
        self.engine.stop()

    def remote_seek(self, position: float):
        logger.info(f"Remote seek to {position}")
        self.engine.seek_to(position)

    def remote_jump_forward(self, interval: float = SKIP_INTERVAL_SEC):
        position, _ = self.engine.get_progress()
        self.engine.seek_to(position + interval)

    def remote_jump_backward(self, interval: float = SKIP_INTERVAL_SEC):
        position, _ = self.engine.get_progress()
        self.engine.seek_to(max(0.0, position - interval))

    def remote_next(self):
        # Single stream or episode, nothing to skip to
        logger.info("Remote next (no queue)")

    def remote_previous(self):
        logger.info("Remote previous (no queue)")

    # --- Engine events ---
    def on_playback_state(self, state: PlaybackState):
        logger.info(f"Playback state: {state.value}")

    def on_playback_error(self, message: str):
        logger.error(f"Playback error: {message}")

    def on_track_changed(self, track: Track = None):
        if track is None:
            logger.info("Track cleared")
        else:
            logger.info(f"Track changed: {track.title} ({track.id})")
