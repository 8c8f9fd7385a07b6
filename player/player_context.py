"""
Now-playing context shared by every screen.
Holds the single logical "what is playing" pointer and player visibility.
"""

import logging
import threading
from typing import Callable, List, Optional

from station.models import ContentType, PlayerContent

logger = logging.getLogger(__name__)


def is_content_same(a: Optional[PlayerContent], b: Optional[PlayerContent]) -> bool:
    """
    Two contents are the same when both are empty, when both are live (the
    stream URL never changes with the programme), or when both are the same
    podcast episode.
    """
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if a.type != b.type:
        return False
    if a.type == ContentType.PODCAST:
        return a.episode.id == b.episode.id
    return True


class PlayerContext:
    def __init__(self):
        self._current_content: Optional[PlayerContent] = None
        self._is_player_visible = False
        self._lock = threading.Lock()
        self._on_change_callbacks: List[Callable[[], None]] = []

    @property
    def current_content(self) -> Optional[PlayerContent]:
        return self._current_content

    @property
    def is_player_visible(self) -> bool:
        return self._is_player_visible

    def set_current_content(self, content: Optional[PlayerContent]) -> bool:
        """Replace the content unless it is the same. Returns True if it changed."""
        with self._lock:
            if is_content_same(self._current_content, content):
                return False
            self._current_content = content
        logger.debug(f"Now playing -> {content.content_id if content else 'nothing'}")
        self._notify_change()
        return True

    def set_player_visible(self, visible: bool) -> None:
        with self._lock:
            if self._is_player_visible == visible:
                return
            self._is_player_visible = visible
        self._notify_change()

    def clear_player(self) -> None:
        with self._lock:
            self._current_content = None
            self._is_player_visible = False
        self._notify_change()

    def subscribe(self, callback: Callable[[], None]) -> None:
        if callback not in self._on_change_callbacks:
            self._on_change_callbacks.append(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        if callback in self._on_change_callbacks:
            self._on_change_callbacks.remove(callback)

    def _notify_change(self) -> None:
        for callback in list(self._on_change_callbacks):
            try:
                callback()
            except Exception as e:
                logger.error(f"Player context listener {callback} failed: {e}")
