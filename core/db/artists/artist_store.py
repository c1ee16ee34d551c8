"""
Artist library storage helpers.

Artists are stored globally by exact name. The `user_artists` table links them to the users
whose Spotify library contains them. Both tables only grow: a re-sync adds, it never removes.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Set

from core.db.base import PAGE_SIZE, get_conn, paginate


def upsert_artists(names: Iterable[str]) -> List[int]:
    """
    Insert artists by exact name (existing rows are kept). Returns the ids of every given name.
    """
    unique_names = list(dict.fromkeys(n for n in names if n))
    if not unique_names:
        return []

    conn = get_conn()
    cur = conn.cursor()
    artist_ids: List[int] = []
    for name in unique_names:
        # DO UPDATE (a no-op write) so RETURNING also yields ids for existing rows.
        cur.execute(
            """
            INSERT INTO artists (name) VALUES (?)
            ON CONFLICT (name) DO UPDATE SET name = EXCLUDED.name
            RETURNING id
            """,
            (name,),
        )
        row = cur.fetchone()
        if row:
            artist_ids.append(int(row["id"]))

    conn.commit()
    conn.close()
    return artist_ids


def link_user_artists(user_id: int, artist_ids: Iterable[int]) -> int:
    """Insert (user, artist) edges, ignoring ones that already exist. Returns the number inserted."""
    ids = [int(a) for a in artist_ids if a is not None]
    if not ids:
        return 0

    now = datetime.utcnow().isoformat(timespec="seconds")
    inserted = 0
    conn = get_conn()
    cur = conn.cursor()
    for artist_id in ids:
        cur.execute(
            """
            INSERT INTO user_artists (user_id, artist_id, created_at)
            VALUES (?, ?, ?)
            ON CONFLICT (user_id, artist_id) DO NOTHING
            """,
            (user_id, artist_id, now),
        )
        inserted += cur.rowcount or 0

    conn.commit()
    conn.close()
    return inserted


def _fetch_user_artist_page(user_id: int, offset: int, limit: int) -> List[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT a.name
        FROM user_artists ua
        JOIN artists a ON a.id = ua.artist_id
        WHERE ua.user_id = ?
        ORDER BY ua.artist_id
        LIMIT ? OFFSET ?
        """,
        (user_id, limit, offset),
    )
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_user_artist_names(user_id: int, page_size: int = PAGE_SIZE) -> Set[str]:
    """Return the set of artist names in a user's library, read page by page."""
    return {
        row["name"]
        for row in paginate(
            lambda offset, limit: _fetch_user_artist_page(user_id, offset, limit),
            page_size,
        )
        if row.get("name")
    }


def count_user_artists(user_id: int) -> int:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT COUNT(*) AS count FROM user_artists WHERE user_id = ?", (user_id,))
    row = cur.fetchone()
    conn.close()
    return int(row["count"]) if row else 0


__all__ = [
    "upsert_artists",
    "link_user_artists",
    "get_user_artist_names",
    "count_user_artists",
]
