import os

import pytest


os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("SPOTIFY_CLIENT_ID", "test-client-id")
os.environ.setdefault("SPOTIFY_CLIENT_SECRET", "test-client-secret")


_TABLES = [
    "user_concert_matches",
    "user_artists",
    "concerts",
    "artists",
    "profiles",
    "sessions",
    "users",
    "cities",
]


def _truncate_all():
    from core.db.base import get_conn

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "TRUNCATE " + ", ".join(_TABLES) + " RESTART IDENTITY CASCADE"
    )
    conn.commit()
    conn.close()


@pytest.fixture
def clean_db():
    """Postgres-backed tests only: empty schema with the default cities seeded."""
    if not os.getenv("DATABASE_URL"):
        pytest.skip("DATABASE_URL must be set for Postgres-backed tests.")

    from core.db.schema import init_db, seed_default_cities

    init_db()
    _truncate_all()
    seed_default_cities()
    yield
    _truncate_all()
