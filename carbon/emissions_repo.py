from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy.orm import Session

from .models import EmissionEntry, ReportLock, Scope3Entry


class EmissionsRepo:
    """Per-user Scope 1/2 rows. Every query is scoped by user_id."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, **fields: Any) -> EmissionEntry:
        entry = EmissionEntry(**fields)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def _query(self, user_id: str):
        return self.db.query(EmissionEntry).filter(EmissionEntry.user_id == user_id)

    def list_for_user(
        self, user_id: str, *, limit: int | None = None, offset: int = 0, ascending: bool = False
    ) -> list[EmissionEntry]:
        order = EmissionEntry.month.asc() if ascending else EmissionEntry.month.desc()
        q = self._query(user_id).order_by(order, EmissionEntry.id.desc()).offset(offset)
        if limit is not None:
            q = q.limit(limit)
        return q.all()

    def count_for_user(self, user_id: str) -> int:
        return self._query(user_id).count()

    def get(self, user_id: str, entry_id: int) -> EmissionEntry | None:
        return self._query(user_id).filter(EmissionEntry.id == entry_id).first()

    def get_for_month(self, user_id: str, month: date) -> EmissionEntry | None:
        return self._query(user_id).filter(EmissionEntry.month == month).order_by(EmissionEntry.id.desc()).first()

    def delete(self, user_id: str, entry_id: int) -> bool:
        entry = self.get(user_id, entry_id)
        if entry is None:
            return False
        self.db.delete(entry)
        self.db.commit()
        return True

    def distinct_user_ids(self) -> list[str]:
        rows = (
            self.db.query(EmissionEntry.user_id)
            .filter(EmissionEntry.user_id.isnot(None))
            .distinct()
            .order_by(EmissionEntry.user_id)
            .all()
        )
        return [r[0] for r in rows]


class Scope3Repo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, **fields: Any) -> Scope3Entry:
        entry = Scope3Entry(**fields)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def list_for_user(self, user_id: str) -> list[Scope3Entry]:
        return (
            self.db.query(Scope3Entry)
            .filter(Scope3Entry.user_id == user_id)
            .order_by(Scope3Entry.month.desc(), Scope3Entry.id.desc())
            .all()
        )

    def get(self, user_id: str, entry_id: int) -> Scope3Entry | None:
        return (
            self.db.query(Scope3Entry)
            .filter(Scope3Entry.user_id == user_id, Scope3Entry.id == entry_id)
            .first()
        )

    def delete(self, user_id: str, entry_id: int) -> bool:
        entry = self.get(user_id, entry_id)
        if entry is None:
            return False
        self.db.delete(entry)
        self.db.commit()
        return True


class ReportLockRepo:
    """One lock flag per (user, month); set_lock upserts."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, month: date) -> ReportLock | None:
        return (
            self.db.query(ReportLock)
            .filter(ReportLock.user_id == user_id, ReportLock.month == month)
            .first()
        )

    def set_lock(self, user_id: str, month: date, locked: bool) -> ReportLock:
        row = self.get(user_id, month)
        if row is None:
            row = ReportLock(user_id=user_id, month=month)
            self.db.add(row)
        row.locked = locked
        row.updated_at = datetime.now(UTC)
        self.db.commit()
        self.db.refresh(row)
        return row

    def list_for_user(self, user_id: str) -> list[ReportLock]:
        return (
            self.db.query(ReportLock)
            .filter(ReportLock.user_id == user_id)
            .order_by(ReportLock.month.desc())
            .all()
        )


__all__ = ["EmissionsRepo", "Scope3Repo", "ReportLockRepo"]
