"""
Database - Schedule Database I/O Operations

SQLAlchemy-backed schedule store. One row per (user_id, item_id).

This module handles ONLY database I/O.
The SM-2 update rule lives in review_schedule; orchestration in scheduler.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from quizsrs import config
from quizsrs.sm2.errors import PersistenceError
from quizsrs.sm2.models import Base, ReviewScheduleRow
from quizsrs.sm2.records import (
    ReviewScheduleRecord,
    decode_record,
    schedule_to_record,
)
from quizsrs.sm2.review_schedule import ReviewSchedule
from quizsrs.sm2.store import ScheduleStore, check_item_id, storage_lock

logger = logging.getLogger(__name__)


def get_engine(db_url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for the schedule database.

    SQLite files get their parent directory created; in-memory SQLite
    shares one connection across threads. Other backends use a
    connection pool.

    Args:
        db_url: Database URL (defaults to config.get_database_url())

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = db_url or config.get_database_url()
    url = make_url(db_url)

    if url.get_backend_name() == "sqlite":
        database = url.database
        if not database or database == ":memory:":
            return create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False
            )
        Path(database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            echo=False
        )

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def _row_to_schedule(row: ReviewScheduleRow) -> ReviewSchedule:
    return decode_record(
        {
            "item_id": row.item_id,
            "group_id": row.group_id,
            "next_review_due_at": row.next_review_due_at,
            "interval_seconds": row.interval_seconds,
            "ease_factor": row.ease_factor,
            "consecutive_correct": row.consecutive_correct,
            "review_count": row.review_count,
            "last_reviewed_at": row.last_reviewed_at,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        },
        row.item_id
    )


def _apply_record(row: ReviewScheduleRow, record: ReviewScheduleRecord) -> None:
    row.group_id = record.group_id
    row.next_review_due_at = record.next_review_due_at
    row.interval_seconds = record.interval_seconds
    row.ease_factor = record.ease_factor
    row.consecutive_correct = record.consecutive_correct
    row.review_count = record.review_count
    row.last_reviewed_at = record.last_reviewed_at
    row.created_at = record.created_at
    row.updated_at = record.updated_at


class SqlScheduleStore(ScheduleStore):
    """
    Schedule store backed by the review_schedule table.

    Every operation opens its own session and closes it before returning.
    """

    def __init__(self, engine: Optional[Engine] = None, user_id: Optional[str] = None):
        """
        Args:
            engine: SQLAlchemy engine (defaults to get_engine())
            user_id: User scope for all rows (defaults to config.get_default_user_id())
        """
        self.engine = engine or get_engine()
        self.user_id = user_id or config.get_default_user_id()
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._write_lock = storage_lock("sql", str(self.engine.url), self.user_id)

    def _session(self) -> Session:
        return self._session_factory()

    def init_db(self) -> None:
        """
        Initialize database schema if the table doesn't exist.

        Safe to call multiple times.
        """
        try:
            inspector = inspect(self.engine)
            if ReviewScheduleRow.__tablename__ not in inspector.get_table_names():
                Base.metadata.create_all(self.engine)
                logger.info("Created %s table", ReviewScheduleRow.__tablename__)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to initialize schedule database: {exc}") from exc

    def reset_db(self) -> None:
        """
        DANGEROUS: Drop the schedule table for every user and recreate it.
        """
        try:
            Base.metadata.drop_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to reset schedule database: {exc}") from exc
        logger.warning("Dropped %s table", ReviewScheduleRow.__tablename__)
        self.init_db()

    def get(self, item_id: str) -> Optional[ReviewSchedule]:
        session = self._session()
        try:
            row = session.get(ReviewScheduleRow, (self.user_id, item_id))
            if row is None:
                return None
            return _row_to_schedule(row)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load schedule {item_id!r}: {exc}") from exc
        finally:
            session.close()

    def get_all(self) -> dict[str, ReviewSchedule]:
        session = self._session()
        try:
            rows = session.query(ReviewScheduleRow).filter(
                ReviewScheduleRow.user_id == self.user_id
            ).all()
            return {row.item_id: _row_to_schedule(row) for row in rows}
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load schedules: {exc}") from exc
        finally:
            session.close()

    def put(self, item_id: str, schedule: ReviewSchedule) -> None:
        check_item_id(item_id, schedule)
        record = schedule_to_record(schedule)

        with self._write_lock:
            session = self._session()
            try:
                row = session.get(ReviewScheduleRow, (self.user_id, item_id))
                if row is None:
                    row = ReviewScheduleRow(user_id=self.user_id, item_id=item_id)
                    session.add(row)
                _apply_record(row, record)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise PersistenceError(f"Failed to save schedule {item_id!r}: {exc}") from exc
            finally:
                session.close()

    def modify(
        self,
        item_id: str,
        update: Callable[[Optional[ReviewSchedule]], ReviewSchedule]
    ) -> ReviewSchedule:
        """
        Read, update and write one row in a single transaction.

        The row is selected FOR UPDATE where the backend supports it;
        SQLite relies on the process-wide storage lock.
        """
        with self._write_lock:
            session = self._session()
            try:
                row = session.get(
                    ReviewScheduleRow,
                    (self.user_id, item_id),
                    with_for_update=True
                )
                current = _row_to_schedule(row) if row is not None else None
                updated = update(current)
                check_item_id(item_id, updated)

                if row is None:
                    row = ReviewScheduleRow(user_id=self.user_id, item_id=item_id)
                    session.add(row)
                _apply_record(row, schedule_to_record(updated))
                session.commit()
                return updated
            except SQLAlchemyError as exc:
                session.rollback()
                raise PersistenceError(f"Failed to save schedule {item_id!r}: {exc}") from exc
            finally:
                session.close()

    def delete_by_group(self, group_id: str) -> int:
        with self._write_lock:
            session = self._session()
            try:
                deleted = session.query(ReviewScheduleRow).filter(
                    ReviewScheduleRow.user_id == self.user_id,
                    ReviewScheduleRow.group_id == group_id
                ).delete(synchronize_session=False)
                session.commit()
                return deleted
            except SQLAlchemyError as exc:
                session.rollback()
                raise PersistenceError(
                    f"Failed to delete schedules for group {group_id!r}: {exc}"
                ) from exc
            finally:
                session.close()
