from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.dates import normalize_date, parse_date
from app.core.db import Base
from app.core.errors import DuplicateUserError, EntryNotFoundError, UserNotFoundError
from app.core.schemas import UserRecord, WeightEntryRecord, utc_timestamp
from app.models.user import User
from app.models.weight_entry import WeightEntry

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """
    Storage behind the gateway actions: a Users table and a Weight_Log table.

    Callers serialize access through the global StoreLock; implementations
    do not lock on their own.
    """

    @abstractmethod
    def list_users(self) -> list[UserRecord]: ...

    @abstractmethod
    def get_user(self, user_name: str) -> UserRecord | None: ...

    @abstractmethod
    def create_user(self, user: UserRecord) -> UserRecord: ...

    @abstractmethod
    def delete_user(self, user_name: str) -> bool: ...

    @abstractmethod
    def list_weights(self, user_name: str) -> list[WeightEntryRecord]: ...

    @abstractmethod
    def save_weight(self, entry: WeightEntryRecord) -> WeightEntryRecord: ...

    @abstractmethod
    def delete_weight(self, user_name: str, date: str) -> bool: ...


def _user_record(row: User) -> UserRecord:
    return UserRecord(
        user_name=row.user_name,
        created_at=row.created_at,
        height_cm=row.height_cm,
        target_weight=row.target_weight,
        notes=row.notes,
    )


def _entry_record(row: WeightEntry) -> WeightEntryRecord:
    return WeightEntryRecord(
        user_name=row.user_name,
        date=normalize_date(row.date),
        weight_kg=row.weight_kg,
        note=row.note,
    )


class SqlRecordStore(RecordStore):
    def __init__(self, db: Session):
        self.db = db

    def list_users(self) -> list[UserRecord]:
        rows = self.db.query(User).order_by(User.created_at.asc(), User.user_name.asc()).all()
        return [_user_record(r) for r in rows]

    def get_user(self, user_name: str) -> UserRecord | None:
        row = self.db.get(User, user_name)
        return _user_record(row) if row else None

    def create_user(self, user: UserRecord) -> UserRecord:
        if self.db.get(User, user.user_name) is not None:
            raise DuplicateUserError(user.user_name)

        row = User(
            user_name=user.user_name,
            created_at=user.created_at or utc_timestamp(),
            height_cm=user.height_cm,
            target_weight=user.target_weight,
            notes=user.notes,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateUserError(user.user_name)

        logger.info("Created user %s", user.user_name)
        return _user_record(row)

    def delete_user(self, user_name: str) -> bool:
        # entries go first; orphaned rows are removed even if the user row is gone
        removed = (
            self.db.query(WeightEntry)
            .filter(WeightEntry.user_name == user_name)
            .delete()
        )
        self.db.query(User).filter(User.user_name == user_name).delete()
        self.db.commit()
        logger.info("Deleted user %s and %d entries", user_name, removed)
        return True

    def list_weights(self, user_name: str) -> list[WeightEntryRecord]:
        rows = (
            self.db.query(WeightEntry)
            .filter(WeightEntry.user_name == user_name)
            .order_by(WeightEntry.date.asc())
            .all()
        )
        return [_entry_record(r) for r in rows]

    def save_weight(self, entry: WeightEntryRecord) -> WeightEntryRecord:
        if self.db.get(User, entry.user_name) is None:
            raise UserNotFoundError(entry.user_name)

        d = parse_date(entry.date)
        row = (
            self.db.query(WeightEntry)
            .filter(WeightEntry.user_name == entry.user_name)
            .filter(WeightEntry.date == d)
            .one_or_none()
        )

        if row is None:
            row = WeightEntry(user_name=entry.user_name, date=d)
            self.db.add(row)

        row.weight_kg = entry.weight_kg
        row.note = entry.note

        self.db.commit()
        return _entry_record(row)

    def delete_weight(self, user_name: str, date: str) -> bool:
        d = parse_date(date)
        removed = (
            self.db.query(WeightEntry)
            .filter(WeightEntry.user_name == user_name)
            .filter(WeightEntry.date == d)
            .delete()
        )
        if not removed:
            self.db.rollback()
            raise EntryNotFoundError(user_name, normalize_date(date))

        self.db.commit()
        return True


def init_store(bind) -> None:
    """Create the Users and Weight_Log tables when missing."""
    Base.metadata.create_all(bind=bind)
