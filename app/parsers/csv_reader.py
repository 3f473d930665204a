"""
app/parsers/csv_reader.py

Decoding and splitting of uploaded comma-delimited files.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

from app.services.errors import CSVParseError, EmptyImportFileError


@dataclass(frozen=True)
class ParsedCSV:
    """
    Header line plus data rows, each row aligned to the header width.
    """

    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    def preview(self, limit: int = 3) -> list[dict[str, str]]:
        return [dict(zip(self.headers, row)) for row in self.rows[: max(0, limit)]]


def decode_csv_bytes(content: bytes) -> str:
    """
    Decode raw upload bytes as UTF-8, tolerating a leading BOM.
    """

    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CSVParseError("CSV must be UTF-8 encoded.") from exc


def _is_blank(row: list[str]) -> bool:
    return all(not cell.strip() for cell in row)


def parse_csv_text(text: str) -> ParsedCSV:
    """
    Split CSV text into headers and data rows.

    Blank lines are skipped, short rows are padded with empty strings and
    cells beyond the header width are dropped.

    Raises:
        CSVParseError: on malformed quoting.
        EmptyImportFileError: when there is no header or no data row.
    """

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=",", strict=True)
    records: list[list[str]] = []
    try:
        for record in reader:
            if _is_blank(record):
                continue
            records.append(record)
    except csv.Error as exc:
        raise CSVParseError(f"Invalid CSV format: {exc}") from exc

    if len(records) < 2:
        raise EmptyImportFileError()

    headers = [header.strip() for header in records[0]]
    width = len(headers)
    rows: list[list[str]] = []
    for record in records[1:]:
        if len(record) < width:
            record = record + [""] * (width - len(record))
        rows.append(record[:width])

    return ParsedCSV(headers=headers, rows=rows)


def parse_csv_bytes(content: bytes) -> ParsedCSV:
    return parse_csv_text(decode_csv_bytes(content))
