from datetime import date as DateType

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import SessionLocal, engine
from app.core.errors import StoreBusyError
from app.core.history import TimeRange, filter_history
from app.core.insights import generate_insights
from app.core.lock import store_lock
from app.core.schemas import BmiCategory, Stats
from app.core.stats import bmi_category, generate_stats
from app.core.store import SqlRecordStore

router = APIRouter(tags=["stats"])


class HistoryPoint(BaseModel):
    date: str
    weight_kg: float


class UserStatsOut(BaseModel):
    user_name: str
    stats: Stats
    bmi_category: BmiCategory
    insights: list[str]

    # Chart series for the requested window
    range: TimeRange
    history: list[HistoryPoint]


def _ensure_db():
    if not engine or not SessionLocal:
        raise HTTPException(503, "DB not configured (DATABASE_URL missing)")


@router.get("/users/{user_name}/stats", response_model=UserStatsOut)
def get_user_stats(
    user_name: str,
    time_range: TimeRange = Query(TimeRange.LAST_30_DAYS, alias="range"),
    start: DateType | None = None,
    end: DateType | None = None,
):
    """
    Stats, BMI category and insights over all of the user's entries, plus the
    history series restricted to the requested range.
    """
    _ensure_db()

    db: Session = SessionLocal()
    try:
        with store_lock.hold(settings.LOCK_TIMEOUT_SECONDS):
            store = SqlRecordStore(db)
            user = store.get_user(user_name)
            if not user:
                raise HTTPException(404, f"User '{user_name}' not found")
            entries = store.list_weights(user_name)
    except StoreBusyError as e:
        raise HTTPException(503, str(e))
    finally:
        db.close()

    try:
        history = filter_history(entries, time_range, start=start, end=end)
    except ValueError as e:
        raise HTTPException(400, str(e))

    stats = generate_stats(entries, user)

    return UserStatsOut(
        user_name=user.user_name,
        stats=stats,
        bmi_category=bmi_category(stats.bmi),
        insights=generate_insights(stats, user, entries),
        range=time_range,
        history=[HistoryPoint(date=e.date, weight_kg=e.weight_kg) for e in history],
    )
