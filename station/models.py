"""
Data models for shows, podcast episodes, the programme schedule and playback.

This module defines the core data structures shared by the station API,
the database layer and the player client.
"""

import dataclasses
import re
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import List, Dict, Optional, Any

from station.constants import WEEKDAYS, LIVE_CONTENT_ID

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

# Client payloads use camelCase; the database speaks snake_case.
_KEY_ALIASES = {
    "startTime": "start_time",
    "endTime": "end_time",
    "showId": "show_id",
    "featuredArtists": "featured_artists",
    "createdAt": "created_at",
    "isPlaying": "is_playing",
    "isLoading": "is_loading",
    "isLiveStream": "is_live_stream",
}


def _filter_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    field_names = {f.name for f in dataclasses.fields(cls)}
    out = {}
    for key, value in data.items():
        key = _KEY_ALIASES.get(key, key)
        if key in field_names:
            out[key] = value
    return out


def normalize_time(value: Any) -> str:
    """
    Normalize "H:MM", "HH:MM" or "HH:MM:SS" (or a datetime.time) to "HH:MM".
    Raises ValueError for anything else.
    """
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M")
    match = _TIME_RE.match(str(value or "").strip())
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


def normalize_day(value: Any) -> str:
    """Lower-case weekday name; raises ValueError if it is not one."""
    day = str(value or "").strip().lower()
    if day not in WEEKDAYS:
        raise ValueError(f"Invalid day: {value!r}")
    return day


@dataclass
class Show:
    """A row in the dashboard's `shows` table."""
    id: int
    name: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Show':
        return cls(**_filter_fields(cls, data))


@dataclass
class Segment:
    name: str
    description: str = ""


@dataclass
class ShowDefinition:
    """
    Rich show directory entry, as aggregated by the directory query.

    Attributes:
        show_id: Slug-like identifier (e.g. "morning-glory")
        name: Display name
        hosts, genres, themes, features, featured_artists: Aggregated tags
        segments: Named recurring segments
        artwork: Optional artwork URL
    """
    show_id: str
    name: str
    frequency: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None
    scope: Optional[str] = None
    tagline: Optional[str] = None
    type: Optional[str] = None
    focus: Optional[str] = None
    approach: Optional[str] = None
    mix: Optional[str] = None
    schedule: Optional[str] = None
    demographic: Optional[str] = None
    established: Optional[str] = None
    style: Optional[str] = None
    perspective: Optional[str] = None
    artwork: Optional[str] = None
    hosts: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)
    features: List[str] = field(default_factory=list)
    featured_artists: List[str] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShowDefinition':
        filtered = _filter_fields(cls, data)
        filtered["show_id"] = str(filtered.get("show_id") or "")
        filtered["name"] = filtered.get("name") or ""
        for key in ("hosts", "genres", "themes", "features", "featured_artists"):
            filtered[key] = list(filtered.get(key) or [])
        segments = []
        for seg in filtered.get("segments") or []:
            if isinstance(seg, Segment):
                segments.append(seg)
            elif isinstance(seg, dict):
                segments.append(Segment(
                    name=seg.get("name") or "",
                    description=seg.get("description") or seg.get("descr") or ""
                ))
        filtered["segments"] = segments
        return cls(**filtered)


@dataclass
class PodcastEpisode:
    """An on-demand audio file with metadata, stored in `podcast_episodes`."""
    id: str
    url: str
    title: str
    show: str
    description: str = ""
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "show": self.show,
            "description": self.description,
        }
        if self.created_at:
            data["created_at"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PodcastEpisode':
        filtered = _filter_fields(cls, data)
        filtered["id"] = str(filtered.get("id", ""))
        for key in ("url", "title", "show", "description"):
            filtered[key] = filtered.get(key) or ""
        created = filtered.get("created_at")
        if created is not None and hasattr(created, "isoformat"):
            filtered["created_at"] = created.isoformat()
        return cls(**filtered)


@dataclass
class Programme:
    """
    A scheduled recurring time slot for a named show.

    Times are kept as "HH:MM" strings so they compare lexically.
    """
    id: int
    name: str
    day: str
    start_time: str
    end_time: str
    host: Optional[str] = None

    @property
    def spans_midnight(self) -> bool:
        return self.end_time < self.start_time

    def is_on_air(self, hhmm: str) -> bool:
        """Whether the slot covers the given "HH:MM" (inclusive at both ends)."""
        if self.spans_midnight:
            return hhmm >= self.start_time or hhmm <= self.end_time
        return self.start_time <= hhmm <= self.end_time

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }
        if self.host:
            data["host"] = self.host
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Programme':
        filtered = _filter_fields(cls, data)
        filtered["start_time"] = normalize_time(filtered.get("start_time") or "00:00")
        filtered["end_time"] = normalize_time(filtered.get("end_time") or "00:00")
        filtered["day"] = str(filtered.get("day") or "").lower()
        filtered["name"] = filtered.get("name") or ""
        return cls(**filtered)


class ContentType(Enum):
    PODCAST = "podcast"
    LIVE = "live"


@dataclass
class PlayerContent:
    """
    What the Universal Player is pointed at: a podcast episode or the live
    stream (optionally annotated with the programme currently on air).
    """
    type: ContentType
    episode: Optional[PodcastEpisode] = None
    programme: Optional[Programme] = None

    @classmethod
    def podcast(cls, episode: PodcastEpisode) -> 'PlayerContent':
        return cls(type=ContentType.PODCAST, episode=episode)

    @classmethod
    def live(cls, programme: Optional[Programme] = None) -> 'PlayerContent':
        return cls(type=ContentType.LIVE, programme=programme)

    @property
    def is_live(self) -> bool:
        return self.type == ContentType.LIVE

    @property
    def content_id(self) -> str:
        if self.type == ContentType.PODCAST:
            return f"podcast-{self.episode.id}"
        return LIVE_CONTENT_ID


class PlaybackState(Enum):
    NONE = "none"
    LOADING = "loading"
    BUFFERING = "buffering"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class AudioState:
    """Snapshot reported by the browser audio element."""
    position: float = 0.0
    duration: float = 0.0
    is_playing: bool = False
    is_loading: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AudioState':
        filtered = _filter_fields(cls, data)
        return cls(
            position=float(filtered.get("position") or 0),
            duration=float(filtered.get("duration") or 0),
            is_playing=bool(filtered.get("is_playing", False)),
            is_loading=bool(filtered.get("is_loading", False)),
        )


@dataclass
class Track:
    """What gets loaded into a playback engine."""
    id: str
    url: str
    title: str
    artist: str
    artwork: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    is_live_stream: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
