"""
User/concert match storage.

Concerts are stored globally in the `concerts` table. The `user_concert_matches` table links them
to the users whose library contains the concert's artist. Matches are never revoked.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from core.db.base import get_conn


def upsert_matches(*, user_id: int, concert_ids: Iterable[int]) -> int:
    """
    Insert (user, concert) match rows, ignoring ones that already exist.
    Returns the number of concert ids submitted.
    """
    ids = [int(c) for c in concert_ids if c is not None]
    if not ids:
        return 0

    now = datetime.utcnow().isoformat(timespec="seconds")
    conn = get_conn()
    cur = conn.cursor()
    for concert_id in ids:
        cur.execute(
            """
            INSERT INTO user_concert_matches (user_id, concert_id, created_at)
            VALUES (?, ?, ?)
            ON CONFLICT (user_id, concert_id) DO NOTHING
            """,
            (user_id, concert_id, now),
        )

    conn.commit()
    conn.close()
    return len(ids)


def get_matched_concerts(
    *,
    user_id: int,
    start_date: str,
    end_date: Optional[str] = None,
) -> List[Dict]:
    """
    Return the concert rows matched to a user, dated start_date..end_date (inclusive), by date.
    """
    sql = """
        SELECT c.id, c.artist_name, c.venue, c.date, c.time, c.ticket_url, c.bill, c.show_id
        FROM concerts c
        JOIN user_concert_matches m ON m.concert_id = c.id
        WHERE m.user_id = ? AND c.date >= ?
    """
    params: list = [user_id, start_date]
    if end_date is not None:
        sql += " AND c.date <= ?"
        params.append(end_date)
    sql += " ORDER BY c.date ASC, c.id ASC"

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(sql, params)
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


__all__ = [
    "upsert_matches",
    "get_matched_concerts",
]
