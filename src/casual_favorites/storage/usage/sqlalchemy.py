"""
SQLAlchemy-based usage storage implementation.

Works with any SQLAlchemy-compatible database (SQLite, PostgreSQL, MySQL,
etc.). Each application is one row holding its weight, launch counter and
context history serialized as a JSON array.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import Column, DateTime, Engine, Float, Integer, String, Text
from sqlalchemy.orm import Session, declarative_base

from casual_favorites.exceptions import HistoryDecodeError
from casual_favorites.models import ContextSnapshot, HistoryEntry, UsageRecord
from casual_favorites.scoring.weights import update_weight

logger = logging.getLogger(__name__)

Base = declarative_base()

_history_adapter = TypeAdapter(List[ContextSnapshot])


class UsageRecordDB(Base):
    """SQLAlchemy model for per-application usage."""

    __tablename__ = "usage_records"

    app_id = Column(String, primary_key=True)
    weight = Column(Float, nullable=False, default=0.0, index=True)
    launch_count = Column(Integer, nullable=False, default=0)

    # JSON array of ContextSnapshot, oldest first
    context_history = Column(Text, nullable=False, default="[]")

    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def decode_history(self) -> List[ContextSnapshot]:
        try:
            return _history_adapter.validate_json(self.context_history or "[]")
        except ValidationError as e:
            raise HistoryDecodeError(self.app_id, f"{e.error_count()} validation error(s)") from e

    def encode_history(self, history: List[ContextSnapshot]) -> None:
        self.context_history = _history_adapter.dump_json(history).decode("utf-8")

    def to_usage_record(self) -> UsageRecord:
        """Convert database model to UsageRecord."""
        return UsageRecord(
            app_id=self.app_id,
            weight=self.weight,
            launch_count=self.launch_count,
            history=self.decode_history(),
        )


class SQLAlchemyUsageStore:
    """
    SQLAlchemy-based usage storage.

    Implements both the UsageStore and CandidateSource protocols.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///favorites.db")
        store = SQLAlchemyUsageStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the SQLAlchemy usage store.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemyUsageStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """Context manager for database sessions with automatic commit/rollback."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables created/verified")

    def _get_or_create(self, session: Session, app_id: str) -> UsageRecordDB:
        row = session.get(UsageRecordDB, app_id)
        if row is None:
            row = UsageRecordDB(app_id=app_id, weight=0.0, launch_count=0, context_history="[]")
            session.add(row)
        return row

    def read_history(self, app_id: str) -> List[HistoryEntry]:
        """Read an application's context history."""
        with self._session() as session:
            row = session.get(UsageRecordDB, app_id)
            if row is None:
                return []

            return [
                HistoryEntry(snapshot=snapshot, launched_at=snapshot.timestamp)
                for snapshot in row.decode_history()
            ]

    def append_history(
        self, app_id: str, snapshot: ContextSnapshot, max_entries: int = 50
    ) -> int:
        """Append a launch context, evicting the oldest entries beyond the cap."""
        with self._session() as session:
            row = self._get_or_create(session, app_id)

            try:
                history = row.decode_history()
            except HistoryDecodeError as e:
                logger.warning(f"Discarding unreadable history: {e}")
                history = []

            history = (history + [snapshot])[-max_entries:]
            row.encode_history(history)
            row.updated_at = datetime.now()

            logger.debug(f"Appended context for {app_id} (history size: {len(history)})")

            return len(history)

    def read_base_weight(self, app_id: str) -> float:
        """Read an application's long-run weight."""
        with self._session() as session:
            row = session.get(UsageRecordDB, app_id)
            return row.weight if row else 0.0

    def update_base_weight(self, app_id: str, factor: float) -> float:
        """Apply the EMA update for one launch."""
        with self._session() as session:
            row = self._get_or_create(session, app_id)
            row.weight = update_weight(row.weight or 0.0, factor)
            row.launch_count = (row.launch_count or 0) + 1
            row.updated_at = datetime.now()

            logger.debug(
                f"Updated weight for {app_id}: {row.weight:.4f} "
                f"(launches: {row.launch_count})"
            )

            return row.weight

    def get_record(self, app_id: str) -> Optional[UsageRecord]:
        """Retrieve the full usage record of an application."""
        with self._session() as session:
            row = session.get(UsageRecordDB, app_id)
            if row is None:
                return None

            return row.to_usage_record()

    def list_records(self) -> List[UsageRecord]:
        """Return every tracked record, skipping rows whose history is unreadable."""
        with self._session() as session:
            records = []
            for row in session.query(UsageRecordDB).order_by(UsageRecordDB.weight.desc()):
                try:
                    records.append(row.to_usage_record())
                except HistoryDecodeError as e:
                    logger.warning(f"Skipping record: {e}")
            return records

    def remove(self, app_id: str) -> bool:
        """Stop tracking an application."""
        with self._session() as session:
            count = session.query(UsageRecordDB).filter(UsageRecordDB.app_id == app_id).delete()

            if count:
                logger.info(f"Removed usage record for {app_id}")

            return count > 0

    def list_candidates(self, pool_size: int) -> List[str]:
        """Tracked applications, highest weight first, up to pool_size."""
        with self._session() as session:
            rows = (
                session.query(UsageRecordDB.app_id)
                .order_by(UsageRecordDB.weight.desc())
                .limit(pool_size)
                .all()
            )
            return [row.app_id for row in rows]
