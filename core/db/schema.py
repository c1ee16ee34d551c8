"""
Schema and migration helpers for Postgres.
"""
from __future__ import annotations

import os

from core.db.base import get_conn

# Cities with a listings source. Ingestion resolves INGEST_CITY against this table.
DEFAULT_CITIES = [
    "New York City",
]


def init_db() -> None:
    """Create the users, sessions, profile, artist, and concert tables if they don't exist."""
    conn = get_conn()
    cur = conn.cursor()

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS users(
            id SERIAL PRIMARY KEY,
            spotify_user_id TEXT NOT NULL UNIQUE,
            email TEXT,
            display_name TEXT,
            access_token TEXT,
            refresh_token TEXT,
            token_expires_at TEXT,
            created_at TEXT
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS sessions(
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            created_at TEXT NOT NULL,
            last_seen_at TEXT NOT NULL,
            expires_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS cities(
            id SERIAL PRIMARY KEY,
            name TEXT NOT NULL UNIQUE
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS profiles(
            user_id INTEGER PRIMARY KEY,
            city_id INTEGER,
            digest_preference TEXT NOT NULL DEFAULT 'weekly',
            updated_at TEXT,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE,
            FOREIGN KEY(city_id) REFERENCES cities(id)
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS artists(
            id SERIAL PRIMARY KEY,
            name TEXT NOT NULL UNIQUE
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS user_artists(
            user_id INTEGER NOT NULL,
            artist_id INTEGER NOT NULL,
            created_at TEXT,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE,
            FOREIGN KEY(artist_id) REFERENCES artists(id),
            UNIQUE(user_id, artist_id)
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS concerts(
            id SERIAL PRIMARY KEY,
            artist_name TEXT NOT NULL,
            venue TEXT NOT NULL,
            date TEXT NOT NULL,
            time TEXT,
            ticket_url TEXT,
            source_id TEXT NOT NULL UNIQUE,
            city_id INTEGER NOT NULL,
            bill TEXT[],
            show_id TEXT,
            FOREIGN KEY(city_id) REFERENCES cities(id)
        )
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS concerts_city_date_idx ON concerts (city_id, date)")
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS user_concert_matches(
            user_id INTEGER NOT NULL,
            concert_id INTEGER NOT NULL,
            created_at TEXT,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE,
            FOREIGN KEY(concert_id) REFERENCES concerts(id),
            UNIQUE(user_id, concert_id)
        )
        """
    )

    conn.commit()
    conn.close()

    seed_default_cities()


def seed_default_cities() -> None:
    """Insert DEFAULT_CITIES (plus INGEST_CITY when set) into the cities table (idempotent)."""
    names = list(DEFAULT_CITIES)
    ingest_city = (os.getenv("INGEST_CITY") or "").strip()
    if ingest_city and ingest_city not in names:
        names.append(ingest_city)

    conn = get_conn()
    cur = conn.cursor()
    for name in names:
        cur.execute(
            "INSERT INTO cities (name) VALUES (?) ON CONFLICT (name) DO NOTHING",
            (name,),
        )
    conn.commit()
    conn.close()


__all__ = [
    "DEFAULT_CITIES",
    "init_db",
    "seed_default_cities",
]
