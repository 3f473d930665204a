"""
Fail import jobs left in processing by a crashed or killed worker.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import timedelta

from app.services.csv_import_service import get_csv_import_service
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Mark stale processing import jobs as failed.")
    parser.add_argument(
        "--older-than-minutes",
        dest="older_than_minutes",
        type=int,
        default=60,
        help="Fail jobs whose last progress update is older than this many minutes.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    service = get_csv_import_service()
    with SessionLocal() as db:
        failed = service.fail_stale_jobs(db, older_than=timedelta(minutes=max(1, args.older_than_minutes)))

    payload = [
        {
            "job_id": str(job.id),
            "record_type": job.record_type,
            "filename": job.filename,
            "processed_rows": job.processed_rows,
            "total_rows": job.total_rows,
        }
        for job in failed
    ]
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
