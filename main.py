"""
Entry point for the pipeline CLI: `python main.py ingest|match|digest [--mode daily]`.
"""
import asyncio

from worker.main import main as worker_main


if __name__ == "__main__":
    asyncio.run(worker_main())
