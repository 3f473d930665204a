from __future__ import annotations

import unittest

from app.mappers.field_mapper import (
    FIELD_COLUMNS,
    FIELD_MAPPINGS,
    camel_case_header,
    column_for,
    known_fields,
    map_header,
    missing_required_fields,
)
from db.models.import_job import RecordType
from db.models.player_record import PlayerRecord
from db.models.traffic_report import TrafficReport
from factories import PLAYER_HEADERS, TRAFFIC_HEADERS


class TestFieldMapper(unittest.TestCase):
    def test_exact_display_header_maps_to_canonical_field(self) -> None:
        self.assertEqual(map_header("Foreign Brand ID", RecordType.TRAFFIC_REPORT), "foreignBrandId")
        self.assertEqual(map_header("Tag: webID", RecordType.PLAYERS_DATA), "tagWebId")
        self.assertEqual(map_header("Self-excluded", RecordType.PLAYERS_DATA), "selfExcluded")

    def test_snake_and_camel_spellings_map_to_same_field(self) -> None:
        for header in ("Traffic Source", "traffic_source", "trafficSource"):
            with self.subTest(header=header):
                self.assertEqual(map_header(header, RecordType.TRAFFIC_REPORT), "trafficSource")

    def test_case_insensitive_match(self) -> None:
        self.assertEqual(map_header("FOREIGN PARTNER ID", RecordType.TRAFFIC_REPORT), "foreignPartnerId")
        self.assertEqual(map_header("casino real ngr", RecordType.PLAYERS_DATA), "casinoRealNgr")

    def test_fallback_camel_cases_unknown_spelling(self) -> None:
        self.assertEqual(map_header("TRAFFIC SOURCE!", RecordType.TRAFFIC_REPORT), "trafficSource")
        self.assertEqual(map_header("Some Extra Column", RecordType.TRAFFIC_REPORT), "someExtraColumn")

    def test_camel_case_header_edge_cases(self) -> None:
        self.assertEqual(camel_case_header("  --  "), "")
        self.assertEqual(camel_case_header("ftd_sum"), "ftdSum")
        self.assertEqual(camel_case_header("Player  ID"), "playerId")
        self.assertEqual(camel_case_header("Traffic-Source"), "trafficSource")

    def test_every_fixture_header_maps_to_known_field(self) -> None:
        for header in TRAFFIC_HEADERS:
            with self.subTest(header=header):
                self.assertIn(map_header(header, RecordType.TRAFFIC_REPORT), known_fields(RecordType.TRAFFIC_REPORT))
        player_fields = known_fields(RecordType.PLAYERS_DATA)
        mapped = [map_header(header, RecordType.PLAYERS_DATA) for header in PLAYER_HEADERS]
        self.assertEqual([name for name in mapped if name not in player_fields], ["notes"])

    def test_columns_exist_on_models(self) -> None:
        models = {RecordType.TRAFFIC_REPORT: TrafficReport, RecordType.PLAYERS_DATA: PlayerRecord}
        for record_type, columns in FIELD_COLUMNS.items():
            table_columns = set(models[record_type].__table__.c.keys())
            for field_name, column in columns.items():
                with self.subTest(record_type=record_type, field=field_name):
                    self.assertIn(column, table_columns)
        self.assertEqual(column_for("foreignLandingId", RecordType.TRAFFIC_REPORT), "foreign_landing_id")

    def test_every_mapping_target_is_known(self) -> None:
        for record_type, mapping in FIELD_MAPPINGS.items():
            self.assertTrue(set(mapping.values()) <= known_fields(record_type))

    def test_missing_required_fields(self) -> None:
        headers = ["date", "Foreign Brand ID", "Traffic Source"]
        self.assertEqual(
            missing_required_fields(headers, RecordType.TRAFFIC_REPORT),
            ["foreignPartnerId", "foreignCampaignId", "foreignLandingId"],
        )
        self.assertEqual(missing_required_fields(PLAYER_HEADERS, RecordType.PLAYERS_DATA), [])


if __name__ == "__main__":
    unittest.main()
