"""
Shared constants used across the station backend and the player.
"""

# Live stream
STREAM_HOST = "internetradio.indigofm.au"
DEFAULT_STREAM_PORT = 8174
STREAM_URL_TEMPLATE = "https://{host}:{port}/stream"
DEFAULT_STREAM_URL = STREAM_URL_TEMPLATE.format(host=STREAM_HOST, port=DEFAULT_STREAM_PORT)
LIVE_CONTENT_ID = "live-radio"
STATION_NAME = "Indigo FM"

# Schedule
WEEKDAYS = [
    "monday", "tuesday", "wednesday", "thursday",
    "friday", "saturday", "sunday"
]

# Show directory paging
DEFAULT_DIRECTORY_LIMIT = 50
MAX_DIRECTORY_LIMIT = 200

# Settings keys (station_settings table)
RADIO_ADDRESS_KEY = "radio_address"

# Server
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 5005
DEFAULT_API_URL = f"http://localhost:{DEFAULT_API_PORT}"

# Network Settings
DEFAULT_NETWORK_TIMEOUT = 10  # seconds

# Player
SKIP_INTERVAL_SEC = 15
MAX_STREAM_RETRIES = 3
RETRY_DELAY_SEC = 1.0
AUTO_PLAY_DELAY_SEC = 0.2

# CORS
CORS_ALLOWED_HEADERS = ["Content-Type", "x-vercel-protection-bypass"]
