"""
Run a query against the concert database (DATABASE_URL required).

Usage:
  DATABASE_URL=... python scripts/db_shell.py                                   # row count per table
  DATABASE_URL=... python scripts/db_shell.py "SELECT * FROM concerts LIMIT 5"  # run a custom query
"""
from __future__ import annotations

import os
import sys

import psycopg
from psycopg.rows import dict_row

TABLES = [
    "users",
    "sessions",
    "cities",
    "profiles",
    "artists",
    "user_artists",
    "concerts",
    "user_concert_matches",
]


def resolve_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise SystemExit("DATABASE_URL must be set")
    if not url.startswith(("postgres://", "postgresql://")):
        raise SystemExit("DATABASE_URL must start with postgres:// or postgresql://")
    return url


def main() -> None:
    query = " ".join(sys.argv[1:]).strip()
    if not query:
        query = " UNION ALL ".join(
            f"SELECT '{name}' AS table_name, COUNT(*) AS rows FROM {name}" for name in TABLES
        )

    try:
        with psycopg.connect(resolve_database_url(), row_factory=dict_row) as conn:
            cur = conn.cursor()
            cur.execute(query)
            if cur.description is not None:
                for row in cur.fetchall():
                    print(dict(row))
            else:
                conn.commit()
                print(f"OK ({cur.rowcount} row(s) affected)")
    except psycopg.Error as exc:
        raise SystemExit(f"Error running query: {exc}") from exc


if __name__ == "__main__":
    main()
