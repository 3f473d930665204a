"""
app/parsers package marker.
"""

from app.parsers.csv_reader import ParsedCSV, decode_csv_bytes, parse_csv_bytes, parse_csv_text
from app.parsers.dates import is_parseable_datetime, parse_datetime

__all__ = [
    "ParsedCSV",
    "decode_csv_bytes",
    "is_parseable_datetime",
    "parse_csv_bytes",
    "parse_csv_text",
    "parse_datetime",
]
