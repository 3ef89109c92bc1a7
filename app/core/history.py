from __future__ import annotations

from datetime import date as DateType, timedelta
from enum import Enum
from typing import Iterable

from app.core.dates import parse_date
from app.core.schemas import WeightEntryRecord
from app.core.stats import sort_entries


class TimeRange(str, Enum):
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    ALL = "all"
    CUSTOM = "custom"


_RANGE_DAYS = {
    TimeRange.LAST_7_DAYS: 7,
    TimeRange.LAST_30_DAYS: 30,
}


def filter_history(
    entries: Iterable[WeightEntryRecord],
    time_range: TimeRange,
    today: DateType | None = None,
    start: DateType | None = None,
    end: DateType | None = None,
) -> list[WeightEntryRecord]:
    """
    Date-sorted entries inside the requested window.

    7days/30days keep entries dated on or after today minus N days; custom
    keeps start..end inclusive and needs both bounds.
    """
    ordered = sort_entries(entries)

    if time_range is TimeRange.ALL:
        return ordered

    if time_range is TimeRange.CUSTOM:
        if start is None or end is None:
            raise ValueError("custom range needs both start and end dates")
        if start > end:
            raise ValueError("start date must not be after end date")
        return [e for e in ordered if start <= parse_date(e.date) <= end]

    cutoff = (today or DateType.today()) - timedelta(days=_RANGE_DAYS[time_range])
    return [e for e in ordered if parse_date(e.date) >= cutoff]
