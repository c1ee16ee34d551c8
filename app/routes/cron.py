"""
Scheduler-facing endpoints. Each stage is guarded by `Authorization: Bearer $CRON_SECRET`.
"""
import logging

import psycopg
from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from app.security import is_cron_authorized
from worker.digest import send_digests
from worker.ingest import CityNotFoundError, run_ingest
from worker.listings_engine import ScrapeError
from worker.matcher import match_all

router = APIRouter()
log = logging.getLogger("cron")


def _unauthorized() -> JSONResponse:
    return JSONResponse({"error": "unauthorized"}, status_code=401)


@router.api_route("/api/ingest-concerts", methods=["GET", "POST"])
async def ingest_concerts(authorization: str | None = Header(default=None)):
    if not is_cron_authorized(authorization):
        return _unauthorized()

    try:
        result = await run_ingest()
    except ScrapeError as e:
        log.error("Scrape failed", extra={"error": str(e)})
        return JSONResponse({"error": str(e)}, status_code=502)
    except (CityNotFoundError, psycopg.Error) as e:
        log.error("Ingest failed", extra={"error": str(e)})
        return JSONResponse({"error": str(e)}, status_code=500)

    return result


@router.api_route("/api/match-concerts", methods=["GET", "POST"])
def match_concerts_endpoint(authorization: str | None = Header(default=None)):
    if not is_cron_authorized(authorization):
        return _unauthorized()

    try:
        count = match_all()
    except psycopg.Error as e:
        log.error("Match failed", extra={"error": str(e)})
        return JSONResponse({"error": str(e)}, status_code=500)

    return {"count": count}


@router.api_route("/api/send-digest", methods=["GET", "POST"])
def send_digest_endpoint(mode: str = "weekly", authorization: str | None = Header(default=None)):
    if not is_cron_authorized(authorization):
        return _unauthorized()

    try:
        return send_digests(mode)
    except psycopg.Error as e:
        log.error("Digest failed", extra={"error": str(e)})
        return JSONResponse({"error": str(e)}, status_code=500)
