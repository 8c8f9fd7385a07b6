"""HTTP client for the station API, used by the listener app."""

import logging
from typing import List, Optional

import requests

from station.config import StationConfig
from station.constants import DEFAULT_STREAM_URL
from station.errors import IndigoError
from station.models import Programme, ShowDefinition, PodcastEpisode

logger = logging.getLogger(__name__)


class ApiError(IndigoError):
    """The station API could not be reached or answered with an error."""


class IndigoClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 fallback_stream_url: str = DEFAULT_STREAM_URL):
        if base_url is None or timeout is None:
            config = StationConfig.from_env()
            base_url = base_url or config.api_url
            timeout = timeout or config.http_timeout
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.fallback_stream_url = fallback_stream_url
        self.last_error: Optional[str] = None

    def _get_json(self, path: str, params: Optional[dict] = None):
        r = self.session.get(
            f"{self.base_url}{path}",
            params=params,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json()

    def get_radio_address(self) -> str:
        """Live stream URL from the station, or the fallback if that fails."""
        try:
            data = self._get_json("/api/shows/radioaddress")
            address = (data or {}).get("radioAddress")
            if not address:
                raise ValueError("Invalid response: missing radioAddress")
            self.last_error = None
            return address
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Failed to fetch radio address, using fallback: {e}")
            self.last_error = "Failed to load radio address, using default"
            return self.fallback_stream_url

    def is_using_fallback(self, address: str) -> bool:
        return address == self.fallback_stream_url

    def get_programmes(self) -> List[Programme]:
        try:
            data = self._get_json("/api/shows/programme")
            return [Programme.from_dict(p) for p in data]
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Programme fetch failed: {e}")
            raise ApiError("Failed to load radio programs") from e

    def get_show_definitions(self, search: Optional[str] = None, genre: Optional[str] = None) -> List[ShowDefinition]:
        params = {k: v for k, v in (("search", search), ("genre", genre)) if v}
        try:
            data = self._get_json("/api/shows", params=params or None)
            return [ShowDefinition.from_dict(s) for s in data]
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Show directory fetch failed: {e}")
            raise ApiError("Failed to load show details") from e

    def get_podcast_episodes(self) -> List[PodcastEpisode]:
        try:
            data = self._get_json("/api/shows/podcasts")
            return [PodcastEpisode.from_dict(e) for e in data]
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Podcast fetch failed: {e}")
            raise ApiError("Failed to load podcast episodes") from e
