from __future__ import annotations

import unittest
from datetime import datetime, timezone
from decimal import Decimal

from app.transformers.field_transformer import transform_row
from db.models.import_job import RecordType
from factories import PLAYER_HEADERS, TRAFFIC_HEADERS, player_row, traffic_row


class TestFieldTransformer(unittest.TestCase):
    def test_traffic_row_is_typed(self) -> None:
        payload = transform_row(traffic_row(), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT)

        self.assertEqual(payload["date"], datetime(2024, 1, 15, tzinfo=timezone.utc))
        self.assertEqual(payload["foreignBrandId"], 1)
        self.assertEqual(payload["allClicks"], 25)
        self.assertEqual(payload["cr"], Decimal("12.5"))
        self.assertEqual(payload["trafficSource"], "seo")
        self.assertEqual(len(payload), len(TRAFFIC_HEADERS))

    def test_integers_truncate_toward_zero(self) -> None:
        payload = transform_row(traffic_row(clicks="12.9"), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT)
        self.assertEqual(payload["allClicks"], 12)

    def test_empty_cells_follow_nullability(self) -> None:
        row = traffic_row(source="  ", clicks="")
        row[TRAFFIC_HEADERS.index("CR")] = ""
        payload = transform_row(row, TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT)
        self.assertEqual(payload["trafficSource"], "")
        self.assertEqual(payload["cr"], Decimal("0"))
        self.assertIsNone(payload["allClicks"])

        players = transform_row(player_row(), PLAYER_HEADERS, RecordType.PLAYERS_DATA)
        self.assertIsNone(players["promoId"])
        self.assertIsNone(players["tagSub2"])
        self.assertEqual(players["depositsSum"], Decimal("150.50"))
        self.assertEqual(players["signUpDate"], datetime(2024, 1, 20, tzinfo=timezone.utc))

    def test_unknown_headers_are_dropped(self) -> None:
        payload = transform_row(player_row(), PLAYER_HEADERS, RecordType.PLAYERS_DATA)
        self.assertNotIn("notes", payload)

    def test_untransformable_cell_is_omitted(self) -> None:
        row = traffic_row(clicks="lots")
        payload = transform_row(row, TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT)
        self.assertNotIn("allClicks", payload)
        self.assertEqual(payload["uniqueClicks"], 20)


if __name__ == "__main__":
    unittest.main()
