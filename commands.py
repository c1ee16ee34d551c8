# Quick reference commands (run from repo root). These are comments only; copy/paste as needed.

# Install the app plus test tools, then the Chromium build Playwright drives
# python -m pip install -e ".[test]"
# python -m playwright install chromium

# Run the test suite (Postgres-backed tests skip unless DATABASE_URL is set)
# python -m pytest
# DATABASE_URL=postgresql://localhost/concerts_test python -m pytest tests/test_concerts_dedup.py

# Start the web app locally (.env is loaded on import)
# python -m uvicorn app.api:app --reload

# Run a pipeline stage once, without the HTTP scheduler
# python -m worker.main ingest
# python -m worker.main match
# python -m worker.main digest --mode daily

# Trigger a stage the way the scheduler does
# curl -X POST -H "Authorization: Bearer $CRON_SECRET" http://localhost:8000/api/ingest-concerts
# curl -X POST -H "Authorization: Bearer $CRON_SECRET" "http://localhost:8000/api/send-digest?mode=weekly"

# Inspect the database
# python scripts/db_shell.py
# python scripts/db_shell.py "SELECT date, artist_name, venue FROM concerts ORDER BY date LIMIT 20"
