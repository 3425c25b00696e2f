"""
Record Store

Durable storage for incident records (one table per scenario) and the shared
notification log. Every public operation is awaitable; the blocking SQLAlchemy
work runs in the threadpool with one session per operation.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, TypeVar

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import case, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from .database import create_session_factory
from .errors import StorageReadError, StorageWriteError
from .models import INCIDENT_MODELS, Notification
from .scenarios import StorageTarget
from .timeutils import TimeRange

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class NotificationEntry:
    id: int
    created_at: str
    scenario: str
    message: str


def _incident_model(target: StorageTarget):
    if not isinstance(target, StorageTarget):
        raise TypeError(f"Not a registered storage target: {target!r}")
    return INCIDENT_MODELS[target]


def _apply_range(query: Query, column, time_range: Optional[TimeRange]) -> Query:
    if time_range is None:
        return query
    if time_range.start is not None:
        query = query.filter(column >= time_range.start)
    if time_range.end is not None:
        query = query.filter(column <= time_range.end)
    return query


class RecordStore:
    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    # ------------------------------------------------------------------
    # Unit-of-work plumbing
    # ------------------------------------------------------------------

    def _write(self, work: Callable[[Session], T], error_message: str) -> T:
        with self._session_factory() as session:
            try:
                result = work(session)
                session.commit()
                return result
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"{error_message}: {e}")
                raise StorageWriteError(error_message) from e

    def _read(self, work: Callable[[Session], T]) -> T:
        with self._session_factory() as session:
            try:
                return work(session)
            except SQLAlchemyError as e:
                logger.error(f"DB read failed: {e}")
                raise StorageReadError() from e

    # ------------------------------------------------------------------
    # Incident records
    # ------------------------------------------------------------------

    async def insert_incident(self, target: StorageTarget, created_at: str, file_path: str) -> int:
        model = _incident_model(target)

        def work(session: Session) -> int:
            row = model(created_at=created_at, file_path=file_path)
            session.add(row)
            session.flush()
            return row.id

        return await run_in_threadpool(self._write, work, "DB insert failed")

    async def count(self, target: StorageTarget, time_range: Optional[TimeRange] = None) -> int:
        model = _incident_model(target)

        def work(session: Session) -> int:
            return _apply_range(session.query(model), model.created_at, time_range).count()

        return await run_in_threadpool(self._read, work)

    async def latest_timestamp(self, target: StorageTarget) -> Optional[str]:
        model = _incident_model(target)

        def work(session: Session) -> Optional[str]:
            row = (
                session.query(model.created_at)
                .order_by(model.created_at.desc(), model.id.desc())
                .first()
            )
            return row[0] if row else None

        return await run_in_threadpool(self._read, work)

    async def incident_stats(
        self, target: StorageTarget, window: TimeRange
    ) -> Tuple[int, int, Optional[str]]:
        """(total, inside window, latest created_at) from one SELECT."""
        model = _incident_model(target)
        in_window = model.created_at >= (window.start or "")
        if window.end is not None:
            in_window = in_window & (model.created_at <= window.end)

        def work(session: Session) -> Tuple[int, int, Optional[str]]:
            total, today, latest = session.query(
                func.count(model.id),
                func.coalesce(func.sum(case((in_window, 1), else_=0)), 0),
                func.max(model.created_at),
            ).one()
            return int(total), int(today), latest

        return await run_in_threadpool(self._read, work)

    async def delete_all(self, target: StorageTarget) -> int:
        model = _incident_model(target)

        def work(session: Session) -> int:
            return session.query(model).delete(synchronize_session=False)

        return await run_in_threadpool(self._write, work, "DB clear failed")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def insert_notification(self, created_at: str, scenario: str, message: str) -> int:
        def work(session: Session) -> int:
            row = Notification(created_at=created_at, scenario=scenario, message=message)
            session.add(row)
            session.flush()
            return row.id

        return await run_in_threadpool(self._write, work, "Notify insert failed")

    async def count_notifications(
        self, scenario: Optional[str] = None, time_range: Optional[TimeRange] = None
    ) -> int:
        def work(session: Session) -> int:
            query = session.query(Notification)
            if scenario:
                query = query.filter(Notification.scenario == scenario)
            return _apply_range(query, Notification.created_at, time_range).count()

        return await run_in_threadpool(self._read, work)

    async def query_notifications(
        self,
        scenario: Optional[str] = None,
        time_range: Optional[TimeRange] = None,
        limit: int = 100,
    ) -> List[NotificationEntry]:
        """Newest first; equal timestamps fall back to insertion order."""
        def work(session: Session) -> List[NotificationEntry]:
            query = session.query(Notification)
            if scenario:
                query = query.filter(Notification.scenario == scenario)
            query = _apply_range(query, Notification.created_at, time_range)
            rows = (
                query.order_by(Notification.created_at.desc(), Notification.id.desc())
                .limit(limit)
                .all()
            )
            return [
                NotificationEntry(
                    id=row.id,
                    created_at=row.created_at,
                    scenario=row.scenario,
                    message=row.message,
                )
                for row in rows
            ]

        return await run_in_threadpool(self._read, work)

    async def delete_notifications(self, scenario: str) -> int:
        def work(session: Session) -> int:
            return (
                session.query(Notification)
                .filter(Notification.scenario == scenario)
                .delete(synchronize_session=False)
            )

        return await run_in_threadpool(self._write, work, "Notification clear failed")

    def close(self) -> None:
        self._engine.dispose()
