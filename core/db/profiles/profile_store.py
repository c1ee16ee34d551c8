"""
Profile (city + digest preference) and city storage helpers.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from core.db.base import get_conn

DIGEST_PREFERENCES = ("daily", "weekly", "none")
DEFAULT_DIGEST_PREFERENCE = "weekly"


def get_cities() -> List[Dict]:
    """Return all cities ordered by name."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT id, name FROM cities ORDER BY name")
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_city_by_name(name: str) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT id, name FROM cities WHERE name = ?", (name,))
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def ensure_profile(user_id: int, city_id: int | None) -> None:
    """Create the user's profile with defaults if it does not exist yet."""
    now = datetime.utcnow().isoformat(timespec="seconds")
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO profiles (user_id, city_id, digest_preference, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT (user_id) DO NOTHING
        """,
        (user_id, city_id, DEFAULT_DIGEST_PREFERENCE, now),
    )
    conn.commit()
    conn.close()


def get_profile(user_id: int) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT p.user_id, p.city_id, p.digest_preference, c.name AS city_name
        FROM profiles p
        LEFT JOIN cities c ON c.id = p.city_id
        WHERE p.user_id = ?
        """,
        (user_id,),
    )
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def get_profiles(city_id: int | None = None, user_id: int | None = None) -> List[Dict]:
    """
    Return profiles that have a city set, optionally restricted to one city or one user.
    """
    sql = "SELECT user_id, city_id, digest_preference FROM profiles WHERE city_id IS NOT NULL"
    params: list = []
    if city_id is not None:
        sql += " AND city_id = ?"
        params.append(city_id)
    if user_id is not None:
        sql += " AND user_id = ?"
        params.append(user_id)
    sql += " ORDER BY user_id"

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(sql, params)
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_digest_subscribers(mode: str) -> List[Dict]:
    """Return profiles (joined with the user's email) opted into the given digest frequency."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT p.user_id, p.city_id, p.digest_preference, u.email
        FROM profiles p
        JOIN users u ON u.id = p.user_id
        WHERE p.digest_preference = ?
        ORDER BY p.user_id
        """,
        (mode,),
    )
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def update_profile(user_id: int, city_id: int | None, digest_preference: str) -> bool:
    """Update city and digest preference. Returns True if a row was updated."""
    if digest_preference not in DIGEST_PREFERENCES:
        raise ValueError(f"unknown digest preference: {digest_preference}")

    now = datetime.utcnow().isoformat(timespec="seconds")
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        UPDATE profiles
        SET city_id = ?, digest_preference = ?, updated_at = ?
        WHERE user_id = ?
        """,
        (city_id, digest_preference, now, user_id),
    )
    updated = cur.rowcount
    conn.commit()
    conn.close()
    return updated > 0


def update_digest_preference(user_id: int, digest_preference: str) -> bool:
    """Change only the digest preference (unsubscribe flow)."""
    if digest_preference not in DIGEST_PREFERENCES:
        raise ValueError(f"unknown digest preference: {digest_preference}")

    now = datetime.utcnow().isoformat(timespec="seconds")
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE profiles SET digest_preference = ?, updated_at = ? WHERE user_id = ?",
        (digest_preference, now, user_id),
    )
    updated = cur.rowcount
    conn.commit()
    conn.close()
    return updated > 0


__all__ = [
    "DIGEST_PREFERENCES",
    "DEFAULT_DIGEST_PREFERENCE",
    "get_cities",
    "get_city_by_name",
    "ensure_profile",
    "get_profile",
    "get_profiles",
    "get_digest_subscribers",
    "update_profile",
    "update_digest_preference",
]
