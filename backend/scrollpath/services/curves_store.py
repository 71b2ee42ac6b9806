"""
Persistence of curve document metadata.

A ``CurveRecord`` ties a user-facing curve identifier to the canonical
document on disk (stored once per content hash) together with summary
values computed at upload time.  The helpers below wrap the small set
of queries the API needs.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import SQLModel, Field, select

from .db import create_db_and_tables, get_session


class CurveRecord(SQLModel, table=True):
    """Database model representing an uploaded curve document.

    Several records may point at the same ``file_path`` when identical
    documents are uploaded under different names.
    """

    curve_id: str = Field(primary_key=True)
    file_hash: str = Field(index=True)
    name: str
    file_path: str
    point_count: int
    length: float
    created_at: datetime = Field(default_factory=datetime.utcnow)


def init_db() -> None:
    """Initialise the database and create tables if they do not exist."""
    create_db_and_tables()


def insert_curve_record(record: CurveRecord) -> CurveRecord:
    """Persist a new ``CurveRecord`` and return it refreshed."""
    with get_session() as session:
        session.add(record)
        session.commit()
        session.refresh(record)
        return record


def get_curve_record(curve_id: str) -> Optional[CurveRecord]:
    """Retrieve a ``CurveRecord`` by identifier, or ``None``."""
    with get_session() as session:
        return session.get(CurveRecord, curve_id)


def list_curves() -> List[CurveRecord]:
    """Return all curve records, oldest first."""
    with get_session() as session:
        statement = select(CurveRecord).order_by(CurveRecord.created_at)
        return list(session.exec(statement))


def count_records_for_hash(file_hash: str) -> int:
    """Return how many curve records reference the document ``file_hash``."""
    with get_session() as session:
        statement = select(CurveRecord).where(CurveRecord.file_hash == file_hash)
        return len(session.exec(statement).all())


def delete_curve(curve_id: str) -> Optional[CurveRecord]:
    """Delete a curve record.

    Returns:
        The deleted record, or ``None`` if it did not exist.  The
        document file is left for the caller to clean up.
    """
    with get_session() as session:
        record = session.get(CurveRecord, curve_id)
        if record is None:
            return None
        # Detached copy; the instance itself is expired by the commit.
        deleted = CurveRecord(**record.model_dump())
        session.delete(record)
        session.commit()
        return deleted
