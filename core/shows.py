"""
Group matched concert rows into shows and compute per-artist match highlighting.

Concert rows are stored one per (artist, show). The weekly page, the monthly calendar and
the email digest all need one record per physical show with the full bill, where each
bill entry is flagged when it is one of the user's matched artists.
"""
from __future__ import annotations

from typing import Dict, List

from core.normalize import normalize_artist_name


def group_into_shows(rows: List[Dict]) -> List[Dict]:
    """
    Collapse matched concert rows into show records, in first-seen order.

    Each record: {show_id, venue, date, time, ticket_url, matched_artists, bill}
    where bill is a list of {"name", "is_match"}. Rows without a show_id are their own show.
    """
    grouped: Dict[str, Dict] = {}

    for row in rows:
        key = row.get("show_id") or str(row.get("id"))
        existing = grouped.get(key)
        if existing:
            existing["matched_artists"].append(row["artist_name"])
            continue
        grouped[key] = {
            "show_id": key,
            "raw_bill": list(row.get("bill") or [row["artist_name"]]),
            "venue": row.get("venue") or "",
            "date": row.get("date") or "",
            "time": row.get("time") or None,
            "ticket_url": row.get("ticket_url") or None,
            "matched_artists": [row["artist_name"]],
        }

    shows: List[Dict] = []
    for show in grouped.values():
        matched = set(show["matched_artists"])
        raw_bill = show.pop("raw_bill")
        show["bill"] = [
            {"name": name, "is_match": normalize_artist_name(name) in matched}
            for name in raw_bill
        ]
        shows.append(show)
    return shows


def group_by_date(shows: List[Dict]) -> Dict[str, List[Dict]]:
    """Key shows by their date, keeping the incoming order within and across dates."""
    by_date: Dict[str, List[Dict]] = {}
    for show in shows:
        by_date.setdefault(show["date"], []).append(show)
    return by_date


__all__ = ["group_into_shows", "group_by_date"]
