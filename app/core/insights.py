from __future__ import annotations

import math
from typing import Sequence

from app.core.schemas import Stats, UserRecord, WeightEntryRecord

MIN_ENTRIES_FOR_INSIGHTS = 3
RAPID_LOSS_KG_PER_WEEK = -0.5
NEAR_GOAL_KG = 1

KEEP_LOGGING = "Keep logging daily to unlock insights!"
RAPID_LOSS = "You are losing weight at a rapid pace (>0.5kg/week). Ensure you're staying hydrated."
SUSTAINABLE_LOSS = "You have a sustainable weekly loss rate."
STABLE = "Your weight is stable."
NEAR_GOAL = "You are very close to your goal!"


def format_kg(value: float) -> str:
    """Render a kg amount without trailing zeros: 2.0 -> '2', 1.50 -> '1.5'."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def generate_insights(
    stats: Stats,
    user: UserRecord,
    entries: Sequence[WeightEntryRecord],
) -> list[str]:
    """
    Ordered observations for the stats snapshot.

    Order: overall change, loss-rate note (only when losing), goal note.
    """
    if len(entries) < MIN_ENTRIES_FOR_INSIGHTS:
        return [KEEP_LOGGING]

    insights: list[str] = []

    if stats.change < 0:
        insights.append(f"Great job! You've lost {format_kg(abs(stats.change))}kg so far.")
        if stats.weekly_avg < RAPID_LOSS_KG_PER_WEEK:
            insights.append(RAPID_LOSS)
        elif stats.weekly_avg < 0:
            insights.append(SUSTAINABLE_LOSS)
    elif stats.change > 0:
        insights.append(f"You have gained {format_kg(stats.change)}kg since starting.")
    else:
        insights.append(STABLE)

    if user.target_weight:
        diff = stats.current - user.target_weight
        if abs(diff) < NEAR_GOAL_KG:
            insights.append(NEAR_GOAL)
        elif stats.weekly_avg < 0 and diff > 0:
            weeks_left = math.ceil(abs(diff / stats.weekly_avg))
            insights.append(f"At this rate, you could reach your goal in ~{weeks_left} weeks.")

    return insights
