"""Date parsing helpers shared by the engines and metadata readers."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

_DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y:%m:%d %H:%M:%S",  # EXIF
]

_PDF_DATE = re.compile(
    r"^D:(?P<year>\d{4})(?P<month>\d{2})?(?P<day>\d{2})?"
    r"(?P<hour>\d{2})?(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?P<tz>Z|[+-]\d{2}'?\d{2}'?)?"
)


def parse_datetime(value: Any) -> datetime:
    """
    Parse a timestamp into a timezone-aware datetime (UTC when unspecified).

    Accepts datetime/date objects, epoch milliseconds, ISO 8601 strings,
    PDF date strings and a handful of common formats.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if value is None or value == "":
        raise ValueError("Empty date value")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, bool):
        raise ValueError(f"Unable to parse date: {value!r}")
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.startswith("D:"):
            return parse_pdf_date(text)
        parsed = _parse_text(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_text(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    raise ValueError(f"Unable to parse date: {text}")


def parse_date(value: Any) -> date:
    """Parse a value into a calendar date. Raises ValueError when unparsable."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_datetime(value).date()


def try_parse_date(value: Any) -> Optional[date]:
    """Like parse_date but returns None for unparsable input."""
    try:
        return parse_date(value)
    except ValueError:
        return None


def parse_pdf_date(text: str) -> datetime:
    """
    Parse a PDF date string such as ``D:20240115093000+10'00'``.

    Raises:
        ValueError: If the string is not a PDF date
    """
    match = _PDF_DATE.match(text.strip())
    if not match:
        raise ValueError(f"Unable to parse PDF date: {text}")

    parts = match.groupdict()
    parsed = datetime(
        int(parts["year"]),
        int(parts["month"] or 1),
        int(parts["day"] or 1),
        int(parts["hour"] or 0),
        int(parts["minute"] or 0),
        int(parts["second"] or 0),
    )

    tz = parts["tz"]
    if tz and tz != "Z":
        digits = tz.replace("'", "")
        sign = 1 if digits[0] == "+" else -1
        hours, minutes = int(digits[1:3]), int(digits[3:5])
        offset = sign * (hours * 60 + minutes)
        parsed = parsed - timedelta(minutes=offset)
    return parsed.replace(tzinfo=timezone.utc)
