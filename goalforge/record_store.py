"""
record_store.py — Record Store contract and its SQLAlchemy implementation.

Every read is scoped to the owning user except the department-KPI read path
and the credential helpers used by authentication. Writes are last-write-wins
per record; there is no cross-record transaction.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from goalforge import models, schemas
from goalforge.database import get_db
from goalforge.mappers import load_kpi, load_user, mapping_for


class RecordStore(ABC):
    """Key-value persistence of typed records, keyed by id and scoped by user."""

    @abstractmethod
    def get_all(self, kind: type, user_id: str) -> list:
        ...

    @abstractmethod
    def get(self, kind: type, record_id: str, user_id: Optional[str] = None):
        """Return the record or None. With user_id set, other users' records are invisible."""
        ...

    @abstractmethod
    def upsert(self, record):
        ...

    @abstractmethod
    def delete(self, kind: type, record_id: str, user_id: str) -> None:
        ...

    @abstractmethod
    def get_department_kpis(self, department: str, level: Optional[str] = None) -> list[schemas.KPI]:
        """KPIs owned by any user of the department, optionally filtered by level."""
        ...

    @abstractmethod
    def get_kpis_by_parent(self, parent_id: str) -> list[schemas.KPI]:
        """Every KPI whose parent_kpi_id points at parent_id, whoever owns it."""
        ...

    # --- Users & credentials ---
    @abstractmethod
    def get_user(self, user_id: str):
        ...

    @abstractmethod
    def find_user_by_email(self, email: str):
        ...

    @abstractmethod
    def get_password_hash(self, user_id: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_password_hash(self, user_id: str, hashed: str) -> None:
        ...


def _row(obj) -> dict:
    return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}


class SqlRecordStore(RecordStore):
    """Record Store backed by a SQLAlchemy session (SQLite locally, Postgres hosted)."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, kind: type, user_id: str) -> list:
        mapping = mapping_for(kind)
        rows = self.db.query(mapping.model).filter_by(user_id=user_id).all()
        return [mapping.load(_row(r)) for r in rows]

    def get(self, kind: type, record_id: str, user_id: Optional[str] = None):
        mapping = mapping_for(kind)
        query = self.db.query(mapping.model).filter_by(id=record_id)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        obj = query.first()
        return mapping.load(_row(obj)) if obj else None

    def upsert(self, record):
        mapping = mapping_for(type(record))
        row = mapping.dump(record)
        try:
            obj = self.db.get(mapping.model, record.id)
            if obj is None:
                self.db.add(mapping.model(**row))
            else:
                for key, value in row.items():
                    setattr(obj, key, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return record

    def delete(self, kind: type, record_id: str, user_id: str) -> None:
        mapping = mapping_for(kind)
        try:
            self.db.query(mapping.model).filter_by(id=record_id, user_id=user_id).delete()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def get_department_kpis(self, department: str, level: Optional[str] = None) -> list[schemas.KPI]:
        query = (
            self.db.query(models.KPI)
            .join(models.User, models.User.id == models.KPI.user_id)
            .filter(models.User.department == department)
        )
        if level:
            query = query.filter(models.KPI.level == level)
        return [load_kpi(_row(r)) for r in query.all()]

    def get_kpis_by_parent(self, parent_id: str) -> list[schemas.KPI]:
        rows = self.db.query(models.KPI).filter(models.KPI.parent_kpi_id == parent_id).all()
        return [load_kpi(_row(r)) for r in rows]

    def get_user(self, user_id: str):
        obj = self.db.get(models.User, user_id)
        return load_user(_row(obj)) if obj else None

    def find_user_by_email(self, email: str):
        obj = (
            self.db.query(models.User)
            .filter(func.lower(models.User.email) == email.strip().lower())
            .first()
        )
        return load_user(_row(obj)) if obj else None

    def get_password_hash(self, user_id: str) -> Optional[str]:
        obj = self.db.get(models.User, user_id)
        return obj.hashed_password if obj else None

    def set_password_hash(self, user_id: str, hashed: str) -> None:
        obj = self.db.get(models.User, user_id)
        if obj is None:
            return
        try:
            obj.hashed_password = hashed
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    """FastAPI dependency: a Record Store bound to the request's session."""
    return SqlRecordStore(db)
