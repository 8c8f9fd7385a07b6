"""
Postgres Database Manager for the Indigo FM station.
Handles shows, podcast episodes, the programme schedule and station settings.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import psycopg
from psycopg.rows import dict_row

from station.constants import WEEKDAYS, DEFAULT_DIRECTORY_LIMIT
from station.errors import DatabaseUnavailable
from station.models import Show, ShowDefinition, PodcastEpisode, Programme

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS shows (
        id SERIAL PRIMARY KEY,
        show_id TEXT UNIQUE,
        name TEXT NOT NULL,
        frequency TEXT,
        duration TEXT,
        description TEXT DEFAULT '',
        scope TEXT,
        tagline TEXT,
        type TEXT,
        focus TEXT,
        approach TEXT,
        mix TEXT,
        schedule TEXT,
        demographic TEXT,
        established TEXT,
        style TEXT,
        perspective TEXT,
        artwork TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS podcast_episodes (
        id TEXT PRIMARY KEY,
        url TEXT NOT NULL,
        title TEXT NOT NULL,
        "show" TEXT NOT NULL,
        description TEXT DEFAULT '',
        created_at TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS programme (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        day TEXT NOT NULL,
        start_time TIME NOT NULL,
        end_time TIME NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS station_settings (
        key TEXT PRIMARY KEY,
        value TEXT
    )
    """,
]

# Directory side tables: (table, value column)
DIRECTORY_TAG_TABLES = [
    ("show_hosts", "host"),
    ("show_genres", "genre"),
    ("show_themes", "theme"),
    ("show_features", "feature"),
    ("show_featured_artists", "artist"),
]

for _table, _column in DIRECTORY_TAG_TABLES:
    SCHEMA_STATEMENTS.append(f"""
    CREATE TABLE IF NOT EXISTS {_table} (
        show_id TEXT NOT NULL,
        {_column} TEXT NOT NULL
    )
    """)
SCHEMA_STATEMENTS.append("""
    CREATE TABLE IF NOT EXISTS show_segments (
        show_id TEXT NOT NULL,
        name TEXT NOT NULL,
        descr TEXT
    )
""")

SHOW_DIRECTORY_QUERY = """
    SELECT
        s.show_id,
        s.name,
        s.frequency,
        s.duration,
        s.description,
        s.scope,
        s.tagline,
        s.type,
        s.focus,
        s.approach,
        s.mix,
        s.schedule,
        s.demographic,
        s.established,
        s.style,
        s.perspective,
        s.artwork,
        COALESCE(h.hosts, '{}')      AS hosts,
        COALESCE(g.genres, '{}')     AS genres,
        COALESCE(t.themes, '{}')     AS themes,
        COALESCE(f.features, '{}')   AS features,
        COALESCE(a.artists, '{}')    AS featured_artists,
        COALESCE(seg.segments, '[]') AS segments
    FROM shows s
    LEFT JOIN (
        SELECT show_id, ARRAY_AGG(host ORDER BY host) AS hosts
        FROM show_hosts GROUP BY show_id
    ) h ON h.show_id = s.show_id
    LEFT JOIN (
        SELECT show_id, ARRAY_AGG(genre ORDER BY genre) AS genres
        FROM show_genres GROUP BY show_id
    ) g ON g.show_id = s.show_id
    LEFT JOIN (
        SELECT show_id, ARRAY_AGG(theme ORDER BY theme) AS themes
        FROM show_themes GROUP BY show_id
    ) t ON t.show_id = s.show_id
    LEFT JOIN (
        SELECT show_id, ARRAY_AGG(feature ORDER BY feature) AS features
        FROM show_features GROUP BY show_id
    ) f ON f.show_id = s.show_id
    LEFT JOIN (
        SELECT show_id, ARRAY_AGG(artist ORDER BY artist) AS artists
        FROM show_featured_artists GROUP BY show_id
    ) a ON a.show_id = s.show_id
    LEFT JOIN (
        SELECT show_id,
               JSON_AGG(JSON_BUILD_OBJECT('name', name, 'description', descr) ORDER BY name) AS segments
        FROM show_segments GROUP BY show_id
    ) seg ON seg.show_id = s.show_id
    WHERE
        (%(frequency)s::text IS NULL OR s.frequency = %(frequency)s)
        AND (%(genre)s::text IS NULL OR EXISTS (
              SELECT 1 FROM show_genres gg
              WHERE gg.show_id = s.show_id AND gg.genre ILIKE %(genre)s
            ))
        AND (%(search)s::text IS NULL OR s.name ILIKE %(search)s OR s.description ILIKE %(search)s)
    ORDER BY s.name
    OFFSET %(offset)s
    LIMIT %(limit)s
"""

PROGRAMME_COLUMNS = """
    id,
    name,
    day,
    to_char(start_time, 'HH24:MI') AS start_time,
    to_char(end_time, 'HH24:MI') AS end_time
"""


def _like(value: Optional[str]) -> Optional[str]:
    """Build an ILIKE pattern, or None when there is nothing to match."""
    return f"%{value}%" if value else None


def episode_key(raw_id: Any) -> str:
    """
    Canonical text form of an episode id for `id::text = %s` lookups.
    Numeric ids lose leading zeros and surrounding whitespace; anything
    else is matched as trimmed text.
    """
    text = str(raw_id).strip()
    if text.isdigit():
        return str(int(text))
    return text


def _episode_match(raw_id: Any) -> Tuple[str, str]:
    """Ids as stored (trimmed) and in canonical form; either one may match."""
    return str(raw_id).strip(), episode_key(raw_id)


class DatabaseManager:
    def __init__(self, dsn: Optional[str] = None, connect: Optional[Callable[..., Any]] = None):
        self.dsn = dsn
        self._connect = connect or psycopg.connect

    def _get_connection(self):
        if not self.dsn and self._connect is psycopg.connect:
            raise DatabaseUnavailable("Database URL is not configured")
        return self._connect(self.dsn, row_factory=dict_row)

    def _fetch_all(self, query: str, params: Any = None) -> List[Dict[str, Any]]:
        with self._get_connection() as conn:
            return list(conn.execute(query, params).fetchall())

    def _fetch_one(self, query: str, params: Any = None) -> Optional[Dict[str, Any]]:
        with self._get_connection() as conn:
            return conn.execute(query, params).fetchone()

    def init_schema(self):
        """Create the station tables if they do not exist yet."""
        with self._get_connection() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(statement)
        logger.info("Database schema ready")

    # --- Shows ---

    def list_shows(self) -> List[Show]:
        rows = self._fetch_all("""
            SELECT id, name, description
            FROM shows
            ORDER BY name ASC
        """)
        return [Show.from_dict(r) for r in rows]

    def create_show(self, name: str, description: Optional[str] = None) -> Show:
        row = self._fetch_one("""
            INSERT INTO shows (name, description)
            VALUES (%s, %s)
            RETURNING id, name, description
        """, (name.strip(), (description or "").strip()))
        return Show.from_dict(row)

    def update_show(self, show_id: int, name: Optional[str], description: Optional[str]) -> Optional[Show]:
        row = self._fetch_one("""
            UPDATE shows
            SET
                name = %s,
                description = %s
            WHERE id = %s
            RETURNING id, name, description
        """, (name or "", description or "", show_id))
        return Show.from_dict(row) if row else None

    def delete_show(self, show_id: int) -> bool:
        row = self._fetch_one("DELETE FROM shows WHERE id = %s RETURNING id", (show_id,))
        return row is not None

    def search_show_directory(self, frequency: Optional[str] = None, genre: Optional[str] = None,
                              search: Optional[str] = None, offset: int = 0,
                              limit: int = DEFAULT_DIRECTORY_LIMIT) -> List[ShowDefinition]:
        """Filtered, paged show directory with aggregated tags and segments."""
        rows = self._fetch_all(SHOW_DIRECTORY_QUERY, {
            "frequency": frequency or None,
            "genre": _like(genre),
            "search": _like(search),
            "offset": offset,
            "limit": limit,
        })
        return [ShowDefinition.from_dict(r) for r in rows]

    # --- Podcast episodes ---

    def list_episodes(self) -> List[PodcastEpisode]:
        rows = self._fetch_all("""
            SELECT id, url, title, "show", description
            FROM podcast_episodes
            ORDER BY created_at DESC, id ASC
        """)
        return [PodcastEpisode.from_dict(r) for r in rows]

    def create_episode(self, episode_id: str, url: str, title: str, show: str,
                       description: Optional[str] = None) -> PodcastEpisode:
        row = self._fetch_one("""
            INSERT INTO podcast_episodes (id, url, title, "show", description, created_at)
            VALUES (%s, %s, %s, %s, %s, NOW())
            RETURNING id, url, title, "show", description
        """, (episode_id, url.strip(), title.strip(), show.strip(), (description or "").strip()))
        return PodcastEpisode.from_dict(row)

    def update_episode(self, episode_id: Any, url: Optional[str], title: Optional[str],
                       show: Optional[str], description: Optional[str]) -> Optional[PodcastEpisode]:
        row = self._fetch_one("""
            UPDATE podcast_episodes
            SET
                url = %s,
                title = %s,
                "show" = %s,
                description = %s
            WHERE id::text = %s OR id::text = %s
            RETURNING id, url, title, "show", description
        """, (url or "", title or "", show or "", description or "", *_episode_match(episode_id)))
        return PodcastEpisode.from_dict(row) if row else None

    def delete_episode(self, episode_id: Any) -> bool:
        row = self._fetch_one(
            "DELETE FROM podcast_episodes WHERE id::text = %s OR id::text = %s RETURNING id",
            _episode_match(episode_id)
        )
        return row is not None

    # --- Programme ---

    def list_programme(self) -> List[Programme]:
        rows = self._fetch_all(f"""
            SELECT {PROGRAMME_COLUMNS}
            FROM programme
            ORDER BY array_position(%s::text[], day), start_time
        """, (WEEKDAYS,))
        return [Programme.from_dict(r) for r in rows]

    def create_programme(self, name: str, day: str, start_time: str, end_time: str) -> Programme:
        row = self._fetch_one(f"""
            INSERT INTO programme (name, day, start_time, end_time)
            VALUES (%s, %s, %s, %s)
            RETURNING {PROGRAMME_COLUMNS}
        """, (name.strip(), day, start_time, end_time))
        return Programme.from_dict(row)

    def update_programme(self, programme_id: int, name: Optional[str], day: Optional[str],
                         start_time: Optional[str], end_time: Optional[str]) -> Optional[Programme]:
        row = self._fetch_one(f"""
            UPDATE programme
            SET
                name = %s,
                day = %s,
                start_time = %s,
                end_time = %s
            WHERE id = %s
            RETURNING {PROGRAMME_COLUMNS}
        """, (name or "", day or "", start_time or "00:00", end_time or "00:00", programme_id))
        return Programme.from_dict(row) if row else None

    def delete_programme(self, programme_id: int) -> bool:
        row = self._fetch_one("DELETE FROM programme WHERE id = %s RETURNING id", (programme_id,))
        return row is not None

    # --- Settings ---

    def get_setting(self, key: str) -> Optional[str]:
        row = self._fetch_one("SELECT value FROM station_settings WHERE key = %s", (key,))
        return row["value"] if row else None

    def set_setting(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO station_settings (key, value) VALUES (%s, %s)
                ON CONFLICT (key) DO UPDATE SET value = excluded.value
            """, (key, value))
