"""
Import one CSV file from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from app.services.csv_import_service import get_csv_import_service
from app.services.errors import ImportFileError
from db.models.import_job import RecordType
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Register and import a traffic or players CSV file.")
    parser.add_argument("path", type=Path, help="CSV file to import.")
    parser.add_argument(
        "--record-type",
        dest="record_type",
        choices=[record_type.value for record_type in RecordType],
        default=None,
        help="Record type of the file; detected from the headers when omitted.",
    )
    parser.add_argument(
        "--owner-id",
        dest="owner_id",
        default=None,
        help="Optional uploader reference stored on the job.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    try:
        content = args.path.read_bytes()
    except OSError as exc:
        print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
        return 2

    service = get_csv_import_service()
    record_type = RecordType(args.record_type) if args.record_type else None
    with SessionLocal() as db:
        try:
            registration = service.register_upload(
                db,
                filename=args.path.name,
                content=content,
                record_type=record_type,
                owner_id=args.owner_id,
            )
            result = service.process_stored_upload(db, registration.job_id)
        except ImportFileError as exc:
            print(exc.message, file=sys.stderr)
            return 1

    payload = {"job_id": str(registration.job_id), "record_type": registration.record_type, **result.to_dict()}
    print(json.dumps(payload, indent=2, default=str))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
