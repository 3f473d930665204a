from __future__ import annotations

import unittest

from app.domain.imports import FindingSeverity
from app.validators.record_validator import validate_row
from db.models.import_job import RecordType
from factories import PLAYER_HEADERS, TRAFFIC_HEADERS, player_row, traffic_row


class TestRecordValidator(unittest.TestCase):
    def test_valid_rows_have_no_findings(self) -> None:
        self.assertEqual(validate_row(traffic_row(), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2), [])
        self.assertEqual(validate_row(player_row(), PLAYER_HEADERS, RecordType.PLAYERS_DATA, 2), [])

    def test_missing_required_value(self) -> None:
        findings = validate_row(traffic_row(brand=""), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 7)

        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].row_number, 7)
        self.assertEqual(findings[0].column, "Foreign Brand ID")
        self.assertEqual(findings[0].message, "Foreign Brand ID is required")
        self.assertTrue(findings[0].is_error)

    def test_required_traffic_fields_reject_empty_cells(self) -> None:
        row = traffic_row(clicks="")
        row[TRAFFIC_HEADERS.index("Country")] = ""
        row[TRAFFIC_HEADERS.index("Device Type")] = " "
        findings = validate_row(row, TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2)

        self.assertEqual(
            [finding.message for finding in findings],
            ["Device Type is required", "Country is required", "All Clicks is required"],
        )
        self.assertTrue(all(finding.is_error for finding in findings))

    def test_empty_traffic_source_and_rates_are_accepted(self) -> None:
        row = traffic_row(source="")
        row[TRAFFIC_HEADERS.index("CR")] = ""
        row[TRAFFIC_HEADERS.index("RFTD")] = ""
        self.assertEqual(validate_row(row, TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2), [])

    def test_required_player_fields_reject_empty_cells(self) -> None:
        row = player_row()
        row[PLAYER_HEADERS.index("Company name")] = ""
        row[PLAYER_HEADERS.index("Currency")] = ""
        findings = validate_row(row, PLAYER_HEADERS, RecordType.PLAYERS_DATA, 5)

        self.assertEqual(
            [(finding.column, finding.message) for finding in findings],
            [("Company name", "Company name is required"), ("Currency", "Currency is required")],
        )

    def test_invalid_date_and_number_messages(self) -> None:
        row = traffic_row(date="not-a-date", clicks="-3")
        findings = validate_row(row, TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2)
        messages = [finding.message for finding in findings]

        self.assertIn("Invalid date format for date", messages)
        self.assertIn("Invalid numeric value for All Clicks", messages)

    def test_count_accepts_zero_fraction_only(self) -> None:
        ok = validate_row(traffic_row(clicks="12.0"), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2)
        bad = validate_row(traffic_row(clicks="12.5"), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2)
        self.assertEqual(ok, [])
        self.assertEqual([finding.column for finding in bad], ["All Clicks"])

    def test_identifier_rejects_fractions(self) -> None:
        findings = validate_row(traffic_row(partner="10.0"), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2)
        self.assertEqual([finding.message for finding in findings], ["Invalid numeric value for Foreign Partner ID"])

    def test_flag_and_amount_rules(self) -> None:
        row = player_row(prequalified="2", deposits_sum="-10")
        findings = validate_row(row, PLAYER_HEADERS, RecordType.PLAYERS_DATA, 3)
        messages = {finding.column: finding.message for finding in findings}

        self.assertEqual(messages["Prequalified"], "Invalid flag value for Prequalified (expected 0 or 1)")
        self.assertEqual(messages["Deposits sum"], "Invalid numeric value for Deposits sum")

    def test_nullable_fields_skip_when_empty(self) -> None:
        row = player_row()
        row[PLAYER_HEADERS.index("Original player ID")] = ""
        row[PLAYER_HEADERS.index("Sign up date")] = "   "
        row[PLAYER_HEADERS.index("FTD count")] = ""
        row[PLAYER_HEADERS.index("Casino Real NGR")] = ""
        self.assertEqual(validate_row(row, PLAYER_HEADERS, RecordType.PLAYERS_DATA, 2), [])

    def test_unknown_device_type_is_a_warning(self) -> None:
        findings = validate_row(traffic_row(device="Smart TV"), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 4)

        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].severity, FindingSeverity.WARNING)
        self.assertEqual(findings[0].message, "Unrecognised device type for Device Type")

    def test_device_type_is_case_insensitive(self) -> None:
        findings = validate_row(traffic_row(device="DESKTOP"), TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2)
        self.assertEqual(findings, [])

    def test_overlong_text_is_rejected(self) -> None:
        row = traffic_row(source="x" * 101)
        findings = validate_row(row, TRAFFIC_HEADERS, RecordType.TRAFFIC_REPORT, 2)
        self.assertEqual([finding.message for finding in findings], ["Invalid value for Traffic Source"])


if __name__ == "__main__":
    unittest.main()
