from __future__ import annotations

import unittest

from app.services.record_type_detector import detect_record_type
from db.models.import_job import RecordType
from factories import PLAYER_HEADERS, TRAFFIC_HEADERS


class TestRecordTypeDetector(unittest.TestCase):
    def test_detects_traffic_report(self) -> None:
        result = detect_record_type(TRAFFIC_HEADERS)

        self.assertEqual(result.record_type, RecordType.TRAFFIC_REPORT)
        self.assertEqual(result.column_count, 19)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.notes, [])

    def test_detects_players_data(self) -> None:
        result = detect_record_type(PLAYER_HEADERS)
        self.assertEqual(result.record_type, RecordType.PLAYERS_DATA)
        self.assertEqual(result.column_count, 35)

    def test_snake_case_headers_and_odd_width_still_detect(self) -> None:
        headers = ["date", "foreign_brand_id", "foreign_partner_id", "foreign_campaign_id", "all_clicks", "unique_clicks"]
        result = detect_record_type(headers)

        self.assertEqual(result.record_type, RecordType.TRAFFIC_REPORT)
        self.assertEqual(len(result.notes), 1)
        self.assertIn("differs from the expected 19", result.notes[0])

    def test_unknown_headers_report_closest_match(self) -> None:
        result = detect_record_type(["date", "Foreign Brand ID", "Foreign Partner ID", "Other"])

        self.assertIsNone(result.record_type)
        self.assertTrue(any(error.startswith("Closest match: traffic_report") for error in result.errors))
        self.assertIn("Unexpected column count: 4. Expected 19 (traffic_report) or 35 (players_data)", result.errors)

    def test_matching_width_with_missing_columns_is_explained(self) -> None:
        headers = [f"column {index}" for index in range(19)]
        result = detect_record_type(headers)

        self.assertIsNone(result.record_type)
        self.assertTrue(any(error.startswith("Matches traffic_report column count (19)") for error in result.errors))


if __name__ == "__main__":
    unittest.main()
