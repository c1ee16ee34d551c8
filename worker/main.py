"""
Command-line runner for the pipeline stages, for local runs and schedulers without HTTP access.

    python -m worker.main ingest
    python -m worker.main match
    python -m worker.main digest --mode daily
"""
import argparse
import asyncio
import logging
from typing import Dict, List, Optional

from dotenv import load_dotenv

from core.database import init_db
from worker.digest import send_digests
from worker.ingest import run_ingest
from worker.matcher import match_all

# Load `.env` for local/dev runs (override=True so updates take effect after restart).
load_dotenv(override=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("worker")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="worker", description="Run one concert pipeline stage.")
    sub = parser.add_subparsers(dest="stage", required=True)
    sub.add_parser("ingest", help="scrape listings, store concerts, then match")
    sub.add_parser("match", help="match every profile against upcoming concerts")
    digest = sub.add_parser("digest", help="email the concert digest")
    digest.add_argument("--mode", default="weekly", help="daily or weekly (default weekly)")
    parser.add_argument(
        "--every",
        type=int,
        default=0,
        metavar="SECONDS",
        help="repeat the stage forever with this pause (default: run once)",
    )
    return parser


async def run_stage(args: argparse.Namespace) -> Dict:
    if args.stage == "ingest":
        return await run_ingest()
    if args.stage == "match":
        return {"count": match_all()}
    return send_digests(args.mode)


async def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    init_db()

    while True:
        try:
            result = await run_stage(args)
            log.info("Stage finished", extra={"stage": args.stage, "result": result})
        except Exception as e:
            log.exception("Error during run", extra={"stage": args.stage, "error": str(e)})
            if not args.every:
                raise

        if not args.every:
            break

        log.info("Sleeping", extra={"seconds": args.every})
        await asyncio.sleep(args.every)


if __name__ == "__main__":
    asyncio.run(main())
