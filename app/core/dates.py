from __future__ import annotations

from datetime import date as DateType, datetime

DATE_FORMAT = "%Y-%m-%d"


def normalize_date(value: DateType | datetime | str) -> str:
    """
    Normalize a stored or submitted date into a canonical YYYY-MM-DD string.

    Accepts native date/datetime objects, plain "YYYY-MM-DD" strings and ISO
    timestamps such as "2024-03-01T00:00:00.000Z" (the calendar part is kept,
    matching how spreadsheet cells serialize dates).
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, DateType):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if len(text) > 10 and text[10] in ("T", " "):
        text = text[:10]
    try:
        return datetime.strptime(text, DATE_FORMAT).date().isoformat()
    except ValueError:
        raise ValueError(f"Invalid date format: {value}, expected YYYY-MM-DD")


def parse_date(value: DateType | datetime | str) -> DateType:
    return DateType.fromisoformat(normalize_date(value))
