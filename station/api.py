"""
REST API Server for Indigo FM.
Fronts the station database for the dashboard and the listener app, and
relays browser audio state over Socket.IO.
"""

import logging
import re
from urllib.parse import urlparse

import psycopg
from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO, join_room

from station.config import StationConfig
from station.constants import (
    CORS_ALLOWED_HEADERS,
    DEFAULT_DIRECTORY_LIMIT,
    MAX_DIRECTORY_LIMIT,
    RADIO_ADDRESS_KEY,
)
from station.database import DatabaseManager
from station.errors import IndigoError, ValidationError, NotFoundError, DatabaseUnavailable
from station.log import setup_logging
from station.models import normalize_day, normalize_time
from player import web_audio

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app, allow_headers=CORS_ALLOWED_HEADERS)
socketio = SocketIO(app, cors_allowed_origins="*")

_ID_RE = re.compile(r"\+?(\d+)")


def get_config() -> StationConfig:
    config = app.config.get("STATION_CONFIG")
    if config is None:
        config = StationConfig.from_env()
        app.config["STATION_CONFIG"] = config
    return config


def get_db() -> DatabaseManager:
    db = app.config.get("DB")
    if db is None:
        logger.info("Initializing Database Manager...")
        db = DatabaseManager(get_config().database_url)
        app.config["DB"] = db
    return db


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _text(value) -> str:
    return "" if value is None else str(value).strip()


def _parse_positive_id(raw, label: str) -> int:
    """Leading-digit parse of a path id; rejects anything that is not a positive int."""
    if raw is None or not str(raw).strip():
        raise ValidationError(f"{label} ID is required")
    match = _ID_RE.match(str(raw).strip())
    if not match or int(match.group(1)) <= 0:
        raise ValidationError("Valid numeric ID is required")
    return int(match.group(1))


def _parse_paging(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def _optional_day(value):
    if not _text(value):
        return None
    try:
        return normalize_day(value)
    except ValueError as e:
        raise ValidationError(str(e))


def _optional_time(value):
    if not _text(value):
        return None
    try:
        return normalize_time(value)
    except ValueError as e:
        raise ValidationError(str(e))


def _notify(kind: str):
    socketio.emit('catalog_updated', {'kind': kind})


@app.errorhandler(IndigoError)
def handle_indigo_error(e):
    if e.status >= 500:
        logger.error(f"API error: {e.message}")
    return jsonify({"error": e.message}), e.status


@app.errorhandler(psycopg.Error)
def handle_database_error(e):
    logger.exception(f"Database error: {e}")
    return jsonify({
        "error": str(e),
        "details": "Check server logs for more information"
    }), 500


@app.route('/api/health')
def health_check():
    return jsonify({"status": "healthy"})


@app.route('/')
def home():
    return jsonify({
        "status": "online",
        "service": "Indigo FM Station API",
        "version": "1.0.0"
    })


# --- Show Directory ---

@app.route('/api/shows', methods=['GET'])
def get_show_directory():
    """Show directory for the listener app. Filters: frequency (exact), genre, search."""
    offset = max(_parse_paging('offset', 0), 0)
    limit = min(max(_parse_paging('limit', DEFAULT_DIRECTORY_LIMIT), 1), MAX_DIRECTORY_LIMIT)
    shows = get_db().search_show_directory(
        frequency=request.args.get('frequency') or None,
        genre=request.args.get('genre') or None,
        search=request.args.get('search') or None,
        offset=offset,
        limit=limit,
    )
    return jsonify([s.to_dict() for s in shows])


# --- Shows (dashboard) ---

@app.route('/api/shows/shows', methods=['GET'])
def list_shows():
    return jsonify([s.to_dict() for s in get_db().list_shows()])


@app.route('/api/shows/shows', methods=['POST'])
def create_show():
    data = _json_body()
    name = _text(data.get('name'))
    if not name:
        raise ValidationError("Show name is required")
    show = get_db().create_show(name, _text(data.get('description')))
    _notify('shows')
    return jsonify({"message": "Show created successfully", "show": show.to_dict()})


@app.route('/api/shows/shows/<show_id>', methods=['PUT'])
def update_show(show_id):
    sid = _parse_positive_id(show_id, "Show")
    data = _json_body()
    show = get_db().update_show(sid, data.get('name'), data.get('description'))
    if not show:
        raise NotFoundError("Show not found")
    _notify('shows')
    return jsonify({"message": "Show updated successfully", "show": show.to_dict()})


@app.route('/api/shows/shows/<show_id>', methods=['DELETE'])
def delete_show(show_id):
    sid = _parse_positive_id(show_id, "Show")
    if not get_db().delete_show(sid):
        raise NotFoundError("Show not found")
    _notify('shows')
    return jsonify({"message": "Show deleted successfully"})


# --- Podcast Episodes ---

@app.route('/api/shows/podcasts', methods=['GET'])
def list_episodes():
    return jsonify([e.to_dict() for e in get_db().list_episodes()])


@app.route('/api/shows/podcasts', methods=['POST'])
def create_episode():
    data = _json_body()
    required = [data.get(k) for k in ('id', 'url', 'title', 'show')]
    if not all(required):
        raise ValidationError("ID, URL, title, and show are required")
    episode_id = _text(data.get('id'))
    if not episode_id:
        raise ValidationError("Valid ID is required")
    episode = get_db().create_episode(
        episode_id,
        _text(data.get('url')),
        _text(data.get('title')),
        _text(data.get('show')),
        _text(data.get('description')),
    )
    _notify('podcasts')
    return jsonify({"message": "Episode created successfully", "episode": episode.to_dict()})


@app.route('/api/shows/podcasts/<episode_id>', methods=['PUT'])
def update_episode(episode_id):
    if not episode_id.strip():
        raise ValidationError("Episode ID is required")
    data = _json_body()
    logger.debug(f"Updating episode {episode_id!r} with {data}")
    episode = get_db().update_episode(
        episode_id, data.get('url'), data.get('title'), data.get('show'), data.get('description')
    )
    if not episode:
        raise NotFoundError("Podcast episode not found")
    _notify('podcasts')
    return jsonify({"message": "Episode updated successfully", "episode": episode.to_dict()})


@app.route('/api/shows/podcasts/<episode_id>', methods=['DELETE'])
def delete_episode(episode_id):
    if not episode_id.strip():
        raise ValidationError("Episode ID is required")
    if not get_db().delete_episode(episode_id):
        raise NotFoundError("Podcast episode not found")
    _notify('podcasts')
    return jsonify({"message": "Episode deleted successfully"})


# --- Programme ---

@app.route('/api/shows/programme', methods=['GET'])
def list_programme():
    return jsonify([p.to_dict() for p in get_db().list_programme()])


@app.route('/api/shows/programme', methods=['POST'])
def create_programme():
    data = _json_body()
    name = _text(data.get('name'))
    day = _optional_day(data.get('day'))
    start = _optional_time(data.get('startTime'))
    end = _optional_time(data.get('endTime'))
    if not (name and day and start and end):
        raise ValidationError("Name, day, start time and end time are required")
    programme = get_db().create_programme(name, day, start, end)
    _notify('programme')
    return jsonify({"message": "Programme created successfully", "programme": programme.to_dict()})


@app.route('/api/shows/programme/<programme_id>', methods=['PUT'])
def update_programme(programme_id):
    pid = _parse_positive_id(programme_id, "Programme")
    data = _json_body()
    programme = get_db().update_programme(
        pid,
        data.get('name'),
        _optional_day(data.get('day')),
        _optional_time(data.get('startTime')),
        _optional_time(data.get('endTime')),
    )
    if not programme:
        raise NotFoundError("Programme entry not found")
    _notify('programme')
    return jsonify({"message": "Programme updated successfully", "programme": programme.to_dict()})


@app.route('/api/shows/programme/<programme_id>', methods=['DELETE'])
def delete_programme(programme_id):
    pid = _parse_positive_id(programme_id, "Programme")
    if not get_db().delete_programme(pid):
        raise NotFoundError("Programme entry not found")
    _notify('programme')
    return jsonify({"message": "Programme deleted successfully"})


# --- Radio Address ---

@app.route('/api/shows/radioaddress', methods=['GET'])
def get_radio_address():
    address = None
    try:
        address = get_db().get_setting(RADIO_ADDRESS_KEY)
    except DatabaseUnavailable:
        logger.debug("No database configured, serving default radio address")
    return jsonify({"radioAddress": address or get_config().stream_url})


@app.route('/api/shows/radioaddress', methods=['PUT'])
def update_radio_address():
    data = _json_body()
    address = _text(data.get('address'))
    if not address:
        raise ValidationError("Radio address is required")
    parsed = urlparse(address)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Radio address must be an http(s) URL")
    get_db().set_setting(RADIO_ADDRESS_KEY, address)
    socketio.emit('radio_address_updated', {'radioAddress': address})
    return jsonify({"message": "Radio address updated successfully", "radioAddress": address})


# --- Browser audio relay ---

@socketio.on('audio_register')
def on_audio_register(data):
    """Register a browser audio element. Joins room audio:{device_id}."""
    device_id = (data or {}).get('device_id')
    if not device_id:
        return
    join_room(web_audio.room_for(device_id), sid=request.sid)
    logger.info(f"Browser audio registered: {device_id}")


@socketio.on('audio_state')
def on_audio_state(data):
    """Browser reports its <audio> element state; hand it to the bridge."""
    data = data or {}
    device_id = data.get('device_id')
    if device_id:
        web_audio.dispatch_state(device_id, data)


@socketio.on('audio_error')
def on_audio_error(data):
    data = data or {}
    device_id = data.get('device_id')
    if device_id:
        web_audio.dispatch_error(device_id, data.get('error') or "Unknown audio error")


# --- Server Management ---

def start_api(port=None, debug=False):
    config = get_config()
    setup_logging(debug or config.debug)
    port = port or config.api_port
    print(f"--- Indigo FM API Boot Sequence ---")
    print(f"Target Port: {port}")

    try:
        get_db().init_schema()
        print("API: Database schema verified.")
    except DatabaseUnavailable as e:
        print(f"WARNING: {e.message}. Only /api/shows/radioaddress will answer.")
    except psycopg.Error as e:
        print(f"FATAL: Database initialization failed: {e}")
        logger.exception("Database initialization failed")

    print("\n" + "=" * 40)
    print("       INDIGO FM ONLINE")
    print("=" * 40)
    print(f"Local:  http://localhost:{port}/api/health")
    print("=" * 40 + "\n")

    socketio.run(app, host=config.api_host, port=port, debug=debug, allow_unsafe_werkzeug=True)


if __name__ == '__main__':
    start_api()
