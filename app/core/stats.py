from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from app.core.dates import parse_date
from app.core.schemas import BmiCategory, Stats, UserRecord, WeightEntryRecord

DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30

EMPTY_STATS = Stats()

# (upper bound exclusive, label, severity); 0 is handled separately
_BMI_BANDS = [
    (18.5, "Underweight", "info"),
    (25.0, "Healthy Weight", "success"),
    (30.0, "Overweight", "warning"),
]


def round_half_up(value: float, places: int) -> float:
    """Round on the decimal representation, halves away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_bmi(weight_kg: float, height_cm: float | None) -> float:
    if not height_cm or height_cm <= 0:
        return 0
    height_m = height_cm / 100
    return round_half_up(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float) -> BmiCategory:
    if bmi == 0:
        return BmiCategory(label="Not available", severity="none")
    for upper, label, severity in _BMI_BANDS:
        if bmi < upper:
            return BmiCategory(label=label, severity=severity)
    return BmiCategory(label="Obese", severity="danger")


def sort_entries(entries: Iterable[WeightEntryRecord]) -> list[WeightEntryRecord]:
    """
    Order entries by calendar date, oldest first.

    The sort is stable: entries sharing a date keep their input order, so the
    later one in the dataset ends up last and is treated as current.
    """
    return sorted(entries, key=lambda e: parse_date(e.date))


def _goal_progress(start: float, current: float, target_weight: float | None) -> float | None:
    if not target_weight:
        return None
    to_lose = start - target_weight
    lost = start - current
    if to_lose == 0:
        return None
    return min(100.0, max(0.0, (lost / to_lose) * 100))


def generate_stats(entries: Iterable[WeightEntryRecord], user: UserRecord) -> Stats:
    """
    Compute the stats snapshot for one user's entries.

    An empty entry list yields EMPTY_STATS. Rounded fields (change, bmi,
    weeklyAvg, monthlyAvg) use half-up rounding via round_half_up.
    """
    ordered = sort_entries(entries)
    if not ordered:
        return EMPTY_STATS

    first, last = ordered[0], ordered[-1]
    start = first.weight_kg
    current = last.weight_kg
    change = round_half_up(current - start, 2)

    elapsed_days = (parse_date(last.date) - parse_date(first.date)).days
    weeks = max(1, elapsed_days / DAYS_PER_WEEK)
    months = max(1, elapsed_days / DAYS_PER_MONTH)

    return Stats(
        current=current,
        start=start,
        change=change,
        bmi=calculate_bmi(current, user.height_cm),
        weekly_avg=round_half_up(change / weeks, 2),
        monthly_avg=round_half_up(change / months, 2),
        goal_progress=_goal_progress(start, current, user.target_weight),
    )
