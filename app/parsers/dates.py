"""
app/parsers/dates.py

Permissive date/time parsing shared by validation and transformation.
"""

from __future__ import annotations

from datetime import datetime, timezone

DATETIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%d.%m.%Y %H:%M:%S",
    "%b %d, %Y",
    "%d %b %Y",
)


def parse_datetime(value: str) -> datetime:
    """
    Parse a date or timestamp string into an aware UTC datetime.

    ISO-8601 (with optional trailing ``Z``) is tried first, then the
    common export formats above. Naive values are taken as UTC.

    Raises:
        ValueError: when no format matches.
    """

    raw = value.strip()
    if not raw:
        raise ValueError("Empty date value.")

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except ValueError:
        pass

    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValueError(f"Unrecognised date value: {raw!r}")


def is_parseable_datetime(value: str) -> bool:
    try:
        parse_datetime(value)
    except ValueError:
        return False
    return True
