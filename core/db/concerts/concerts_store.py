"""
Concert storage helpers.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from core.db.base import get_conn

# Rows per commit when upserting scraped concerts.
UPSERT_BATCH_SIZE = 500

_CONCERT_COLUMNS = "id, artist_name, venue, date, time, ticket_url, source_id, city_id, bill, show_id"


def upsert_concerts(rows: List[Dict], batch_size: int = UPSERT_BATCH_SIZE) -> int:
    """
    Insert concert rows keyed on source_id, overwriting the stored copy on conflict.
    Each batch is committed on its own, so a failure leaves earlier batches in place.
    Returns the number of rows written.
    """
    if not rows:
        return 0

    written = 0
    conn = get_conn()
    cur = conn.cursor()
    try:
        for start in range(0, len(rows), batch_size):
            batch = rows[start:start + batch_size]
            for row in batch:
                cur.execute(
                    """
                    INSERT INTO concerts
                      (artist_name, venue, date, time, ticket_url, source_id, city_id, bill, show_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT (source_id) DO UPDATE SET
                      artist_name = EXCLUDED.artist_name,
                      venue = EXCLUDED.venue,
                      date = EXCLUDED.date,
                      time = EXCLUDED.time,
                      ticket_url = EXCLUDED.ticket_url,
                      city_id = EXCLUDED.city_id,
                      bill = EXCLUDED.bill,
                      show_id = EXCLUDED.show_id
                    """,
                    (
                        row["artist_name"],
                        row["venue"],
                        row["date"],
                        row.get("time"),
                        row.get("ticket_url"),
                        row["source_id"],
                        row["city_id"],
                        list(row.get("bill") or []),
                        row.get("show_id"),
                    ),
                )
            conn.commit()
            written += len(batch)
    finally:
        conn.close()

    print(f"[db] upsert_concerts: rows={len(rows)}, written={written}, batch_size={batch_size}")
    return written


def get_upcoming_concerts(city_id: int, start_date: str, end_date: Optional[str] = None) -> List[Dict]:
    """
    Return a city's concerts dated on/after start_date (and before end_date when given),
    ordered by date.
    """
    sql = f"SELECT {_CONCERT_COLUMNS} FROM concerts WHERE city_id = ? AND date >= ?"
    params: list = [city_id, start_date]
    if end_date is not None:
        sql += " AND date < ?"
        params.append(end_date)
    sql += " ORDER BY date ASC, id ASC"

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(sql, params)
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_concerts_by_source_id(source_id: str) -> List[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(f"SELECT {_CONCERT_COLUMNS} FROM concerts WHERE source_id = ?", (source_id,))
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


__all__ = [
    "UPSERT_BATCH_SIZE",
    "upsert_concerts",
    "get_upcoming_concerts",
    "get_concerts_by_source_id",
]
