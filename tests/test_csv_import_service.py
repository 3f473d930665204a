from __future__ import annotations

import tempfile
import unittest
import uuid
from pathlib import Path

from sqlalchemy import select

from app.config import ImportPipelineSettings
from app.repositories.record_repository import RecordRepository
from app.services.csv_import_service import CSVImportService
from app.services.errors import (
    EmptyImportFileError,
    JobNotReadyError,
    MissingHeaderError,
    RecordTypeDetectionError,
    UploadTooLargeError,
)
from app.validators.record_validator import RecordValidator
from db.models.import_job import ImportJobStatus, RecordType
from db.models.traffic_report import TrafficReport
from db.repositories.errors import ImportJobNotFoundError
from db.repositories.storage import LocalFileStorage
from db.session import build_session_factory
from factories import PLAYER_HEADERS, TRAFFIC_HEADERS, build_csv, make_engine, player_row, traffic_row


class TestCSVImportService(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = build_session_factory(self.engine)()
        self.tmp = tempfile.TemporaryDirectory()
        self.settings = ImportPipelineSettings(
            chunk_size=2,
            display_error_limit=50,
            max_stored_findings=1000,
            log_validation_errors=False,
            upload_dir=self.tmp.name,
            max_upload_bytes=1024 * 1024,
        )
        self.storage = LocalFileStorage(self.tmp.name)
        self.service = CSVImportService(settings=self.settings, storage=self.storage)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()
        self.tmp.cleanup()

    def _upload(self, content: bytes, record_type: RecordType | None = RecordType.TRAFFIC_REPORT) -> uuid.UUID:
        registration = self.service.register_upload(
            self.db,
            filename="report.csv",
            content=content,
            record_type=record_type,
        )
        return registration.job_id

    def _import(self, content: bytes, record_type: RecordType = RecordType.TRAFFIC_REPORT):
        job_id = self._upload(content, record_type)
        return job_id, self.service.process_job(self.db, job_id, content)

    def test_three_row_traffic_file_is_idempotent(self) -> None:
        content = build_csv(
            TRAFFIC_HEADERS,
            [traffic_row(landing="1"), traffic_row(landing="2"), traffic_row(landing="3")],
        )

        _, first = self._import(content)
        _, second = self._import(content)

        self.assertTrue(first.success)
        self.assertEqual(first.status, ImportJobStatus.COMPLETED)
        self.assertEqual(first.successful_inserts, 3)
        self.assertEqual(first.processed_rows, 3)
        self.assertEqual(first.error_count, 0)

        self.assertTrue(second.success)
        self.assertEqual(second.successful_inserts, 0)
        self.assertEqual(second.processed_rows, 3)
        self.assertEqual(second.error_count, 0)
        self.assertEqual(RecordRepository(self.db).count(RecordType.TRAFFIC_REPORT), 3)

    def test_header_only_file_fails_the_job(self) -> None:
        valid = build_csv(TRAFFIC_HEADERS, [traffic_row()])
        job_id = self._upload(valid)

        with self.assertRaises(EmptyImportFileError):
            self.service.process_job(self.db, job_id, (",".join(TRAFFIC_HEADERS) + "\n").encode("utf-8"))

        job = self.service.get_job(self.db, job_id)
        self.assertEqual(job.status, ImportJobStatus.FAILED)
        self.assertEqual(job.error_count, 1)
        self.assertIn("headers and at least one data row", job.errors[0]["message"])

    def test_invalid_rows_are_isolated(self) -> None:
        rows = [
            traffic_row(landing="1"),
            traffic_row(landing="2", clicks="abc"),
            traffic_row(landing="3", date="someday"),
            traffic_row(landing="4", device="Console"),
            traffic_row(landing="5"),
        ]
        job_id, result = self._import(build_csv(TRAFFIC_HEADERS, rows))

        self.assertTrue(result.success)
        self.assertEqual(result.successful_inserts, 3)
        self.assertEqual(result.processed_rows, 5)
        self.assertEqual(result.error_count, 3)
        self.assertEqual([finding.row_number for finding in result.errors], [3, 4, 5])
        self.assertEqual(result.errors[2].severity, "warning")

        job = self.service.get_job(self.db, job_id)
        self.assertEqual(job.total_rows, 5)
        self.assertEqual(job.processed_rows, 5)

    def test_empty_required_cell_excludes_the_row(self) -> None:
        blank_country = traffic_row(landing="2")
        blank_country[TRAFFIC_HEADERS.index("Country")] = ""
        rows = [traffic_row(landing="1"), blank_country, traffic_row(landing="3", source="")]
        _, result = self._import(build_csv(TRAFFIC_HEADERS, rows))

        self.assertTrue(result.success)
        self.assertEqual(result.successful_inserts, 2)
        self.assertEqual(result.error_count, 1)
        self.assertEqual(result.errors[0].row_number, 3)
        self.assertEqual(result.errors[0].message, "Country is required")
        landings = self.db.scalars(select(TrafficReport.foreign_landing_id).order_by(TrafficReport.foreign_landing_id))
        self.assertEqual(list(landings), [1, 3])

    def test_failed_chunk_does_not_stop_later_chunks(self) -> None:
        permissive = CSVImportService(
            settings=self.settings,
            storage=self.storage,
            validator=RecordValidator(rules={RecordType.TRAFFIC_REPORT: {}, RecordType.PLAYERS_DATA: {}}),
        )
        rows = [
            traffic_row(landing="1"),
            traffic_row(landing="2"),
            traffic_row(landing="3", clicks="-5"),
            traffic_row(landing="4"),
            traffic_row(landing="5"),
        ]
        content = build_csv(TRAFFIC_HEADERS, rows)
        job_id = self._upload(content)

        result = permissive.process_job(self.db, job_id, content)

        self.assertEqual(result.status, ImportJobStatus.COMPLETED)
        self.assertEqual(result.successful_inserts, 3)
        self.assertEqual(result.processed_rows, 5)
        self.assertEqual(result.error_count, 1)
        self.assertEqual(result.errors[0].row_number, 4)
        self.assertEqual(result.errors[0].column, "database")
        landings = self.db.scalars(select(TrafficReport.foreign_landing_id).order_by(TrafficReport.foreign_landing_id))
        self.assertEqual(list(landings), [1, 2, 5])

    def test_all_rows_invalid_fails_the_job(self) -> None:
        rows = [traffic_row(brand="x"), traffic_row(brand="y")]
        _, result = self._import(build_csv(TRAFFIC_HEADERS, rows))

        self.assertFalse(result.success)
        self.assertEqual(result.status, ImportJobStatus.FAILED)
        self.assertEqual(result.successful_inserts, 0)
        self.assertEqual(result.error_count, 2)

    def test_header_tolerance(self) -> None:
        headers = [header.upper() + "!" if header == "Traffic Source" else header for header in TRAFFIC_HEADERS]
        _, result = self._import(build_csv(headers, [traffic_row(source="ppc")]))

        self.assertEqual(result.successful_inserts, 1)
        stored = self.db.scalars(select(TrafficReport)).one()
        self.assertEqual(stored.traffic_source, "ppc")

    def test_natural_key_distinguishes_traffic_source(self) -> None:
        rows = [traffic_row(source="seo"), traffic_row(source="ppc"), traffic_row(source="seo", clicks="99")]
        _, result = self._import(build_csv(TRAFFIC_HEADERS, rows))

        self.assertEqual(result.successful_inserts, 2)
        self.assertEqual(result.error_count, 0)

    def test_missing_key_headers_fail_before_loading(self) -> None:
        headers = [header for header in TRAFFIC_HEADERS if header != "Foreign Landing ID"]
        rows = [[cell for index, cell in enumerate(traffic_row()) if index != 4]]
        content = build_csv(headers, rows)
        job_id = self._upload(content)

        with self.assertRaises(MissingHeaderError) as ctx:
            self.service.process_job(self.db, job_id, content)

        self.assertEqual(ctx.exception.message, "CSV is missing required columns: foreignLandingId")
        self.assertEqual(self.service.get_job(self.db, job_id).status, ImportJobStatus.FAILED)
        self.assertEqual(RecordRepository(self.db).count(RecordType.TRAFFIC_REPORT), 0)

    def test_players_file_with_detected_type(self) -> None:
        content = build_csv(PLAYER_HEADERS, [player_row(player_id="1"), player_row(player_id="2")])
        registration = self.service.register_upload(self.db, filename="players.csv", content=content)

        self.assertEqual(registration.record_type, "players_data")
        self.assertEqual(registration.total_rows, 2)
        self.assertEqual(len(registration.preview), 2)

        result = self.service.process_stored_upload(self.db, registration.job_id)

        self.assertTrue(result.success)
        self.assertEqual(result.successful_inserts, 2)
        self.assertEqual(RecordRepository(self.db).count(RecordType.PLAYERS_DATA), 2)
        self.assertIsNone(self.service.get_job(self.db, registration.job_id).storage_path)
        self.assertEqual(list(Path(self.tmp.name).iterdir()), [])

    def test_processing_twice_is_rejected(self) -> None:
        job_id, _ = self._import(build_csv(TRAFFIC_HEADERS, [traffic_row()]))
        with self.assertRaises(JobNotReadyError):
            self.service.process_job(self.db, job_id, build_csv(TRAFFIC_HEADERS, [traffic_row()]))

    def test_unknown_job(self) -> None:
        with self.assertRaises(ImportJobNotFoundError):
            self.service.process_stored_upload(self.db, uuid.uuid4())

    def test_upload_guards(self) -> None:
        with self.assertRaises(UploadTooLargeError):
            self.service.register_upload(self.db, filename="big.csv", content=b"x" * (2 * 1024 * 1024))
        with self.assertRaises(EmptyImportFileError):
            self.service.register_upload(self.db, filename="empty.csv", content=b"  \n")
        with self.assertRaises(RecordTypeDetectionError):
            self.service.register_upload(self.db, filename="odd.csv", content=b"a,b\n1,2\n")
        self.assertEqual(self.service.list_jobs(self.db), [])

    def test_display_list_is_capped(self) -> None:
        capped = CSVImportService(
            settings=ImportPipelineSettings(
                chunk_size=500,
                display_error_limit=2,
                log_validation_errors=False,
                upload_dir=self.tmp.name,
            ),
            storage=self.storage,
        )
        rows = [traffic_row(landing=str(index), clicks="bad") for index in range(1, 6)] + [traffic_row(landing="9")]
        content = build_csv(TRAFFIC_HEADERS, rows)
        job_id = self._upload(content)

        result = capped.process_job(self.db, job_id, content)

        self.assertEqual(result.error_count, 5)
        self.assertEqual(len(result.errors), 2)
        self.assertEqual(len(self.service.get_job(self.db, job_id).errors), 5)


if __name__ == "__main__":
    unittest.main()
