"""
In-memory lookups over the show directory and the podcast catalogue.
"""

import re
from typing import List, Optional

from station.models import ShowDefinition, PodcastEpisode

_WHITESPACE = re.compile(r"\s+")


class ShowDirectory:
    def __init__(self, definitions: Optional[List[ShowDefinition]] = None):
        self.definitions: List[ShowDefinition] = list(definitions or [])

    @property
    def has_data(self) -> bool:
        return bool(self.definitions)

    def find_by_name(self, name: str) -> Optional[ShowDefinition]:
        """
        Loose match: either name contains the other (case-insensitive), or the
        show_id contains the query slugified with dashes.
        """
        if not self.definitions or not name:
            return None
        query = name.lower()
        slug = _WHITESPACE.sub("-", query)
        for show in self.definitions:
            show_name = show.name.lower()
            if query in show_name or show_name in query or slug in show.show_id.lower():
                return show
        return None

    def find_by_id(self, show_id: str) -> Optional[ShowDefinition]:
        for show in self.definitions:
            if show.show_id == show_id:
                return show
        return None


class EpisodeCatalog:
    def __init__(self, episodes: Optional[List[PodcastEpisode]] = None):
        self.episodes: List[PodcastEpisode] = list(episodes or [])

    @property
    def has_data(self) -> bool:
        return bool(self.episodes)

    def for_show(self, show_name: str) -> List[PodcastEpisode]:
        wanted = show_name.lower()
        return [e for e in self.episodes if e.show.lower() == wanted]

    def unique_shows(self) -> List[str]:
        """Show names in first-seen order."""
        return list(dict.fromkeys(e.show for e in self.episodes))

    def find_by_id(self, episode_id: str) -> Optional[PodcastEpisode]:
        for episode in self.episodes:
            if episode.id == episode_id:
                return episode
        return None

    def search(self, query: str) -> List[PodcastEpisode]:
        """Case-insensitive substring search over title, description and show."""
        term = query.lower()
        return [
            e for e in self.episodes
            if term in e.title.lower()
            or term in (e.description or "").lower()
            or term in e.show.lower()
        ]
