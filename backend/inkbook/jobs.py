"""Run the booking sweeps once, for cron-style schedulers.

Usage::

    python -m inkbook.jobs                 # complete past appointments, expire stale requests
    python -m inkbook.jobs --only expired  # a single job

Exits non-zero when any job failed.
"""

import argparse
import asyncio
import json
import logging
import sys

from inkbook.core.clock import system_clock
from inkbook.database import async_session_factory, engine
from inkbook.services.sweep_service import JOBS, process_bookings


async def _run(jobs: tuple[str, ...]) -> dict:
    try:
        return await process_bookings(async_session_factory, system_clock, jobs)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Advance time-based booking statuses.")
    parser.add_argument("--only", choices=sorted(JOBS), help="run a single sweep job")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    jobs = (args.only,) if args.only else tuple(JOBS)
    result = asyncio.run(_run(jobs))
    print(json.dumps(result, default=str))
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
