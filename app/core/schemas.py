from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.dates import normalize_date


def _blank_to_none(value):
    # empty spreadsheet cells come back as ""
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class UserRecord(BaseModel):
    user_name: str = Field(..., min_length=1)
    created_at: str | None = None
    # 0 is accepted and read as "not set"
    height_cm: float | None = Field(None, ge=0, allow_inf_nan=False)
    target_weight: float | None = Field(None, ge=0, allow_inf_nan=False)
    notes: str | None = None

    @field_validator("created_at", "height_cm", "target_weight", "notes", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return _blank_to_none(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def created_at_as_text(cls, value):
        if isinstance(value, datetime):
            return value.isoformat()
        return value


class WeightEntryRecord(BaseModel):
    user_name: str = Field(..., min_length=1)
    date: str
    weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    note: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def canonical_date(cls, value):
        return normalize_date(value)

    @field_validator("note", mode="before")
    @classmethod
    def blank_note(cls, value):
        return _blank_to_none(value)


class Stats(BaseModel):
    """Derived snapshot over a user's full entry list; serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    current: float = 0
    start: float = 0
    change: float = 0
    bmi: float = 0
    weekly_avg: float = Field(0, alias="weeklyAvg")
    monthly_avg: float = Field(0, alias="monthlyAvg")
    goal_progress: float | None = Field(None, alias="goalProgress")


class BmiCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    severity: str
