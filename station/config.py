import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from station.constants import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_API_URL,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_STREAM_URL,
    STREAM_HOST,
    STREAM_URL_TEMPLATE,
)

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class StationConfig:
    """Runtime settings for the API server and the player client."""
    database_url: Optional[str] = None
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT
    api_url: str = DEFAULT_API_URL
    stream_url: str = DEFAULT_STREAM_URL
    http_timeout: float = DEFAULT_NETWORK_TIMEOUT
    debug: bool = False

    @classmethod
    def from_env(cls) -> 'StationConfig':
        """Build config from the process environment (.env already loaded)."""
        return cls(
            database_url=os.getenv("NEON_DATABASE_URL") or os.getenv("DATABASE_URL"),
            api_host=os.getenv("INDIGO_API_HOST", DEFAULT_API_HOST),
            api_port=int(os.getenv("INDIGO_API_PORT", str(DEFAULT_API_PORT))),
            api_url=os.getenv("INDIGO_API_URL", DEFAULT_API_URL).rstrip("/"),
            stream_url=os.getenv("INDIGO_STREAM_URL", DEFAULT_STREAM_URL),
            http_timeout=float(os.getenv("INDIGO_HTTP_TIMEOUT", str(DEFAULT_NETWORK_TIMEOUT))),
            debug=_env_bool("INDIGO_DEBUG"),
        )


def build_stream_url(port) -> str:
    """
    Build the live stream address for a given port on the station host.
    The "update radio address" flow only ever changes the port.
    """
    try:
        port_num = int(str(port).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid stream port: {port!r}")
    if not 1 <= port_num <= 65535:
        raise ValueError(f"Stream port out of range: {port_num}")
    return STREAM_URL_TEMPLATE.format(host=STREAM_HOST, port=port_num)
