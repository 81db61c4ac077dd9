"""Public service interface for the Scheduling module.

Other modules should import from here, not from scheduling.database directly.

ScheduleService is the schedule store: CRUD over ``report_schedules`` plus
the two timestamp transitions (manual trigger and completed send). Both
transitions use a compare-and-swap update so a scheduler tick racing a
manual "run now" records at most one send per slot.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from fieldreports.core.config import Settings, settings as default_settings
from fieldreports.core.database import async_session_factory, get_async_db
from fieldreports.core.exceptions import ScheduleConflict, ScheduleNotFound, ValidationFailure
from fieldreports.core.utils import utcnow
from fieldreports.scheduling.clock import next_send, next_send_from_anchor, parse_delivery_time
from fieldreports.scheduling.database import (
    ReportSchedule,
    ReportScheduleCreate,
    ReportScheduleRead,
    ReportScheduleUpdate,
)

logger = logging.getLogger(__name__)


def _validate(schema, data):
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ValidationFailure(str(e)) from e


class ScheduleService:
    """Schedule store backed by SQLAlchemy."""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        config: Optional[Settings] = None,
    ):
        self.session_factory = session_factory or async_session_factory
        self.config = config or default_settings

    async def list_schedules(self, active_only: bool = False) -> List[ReportScheduleRead]:
        """All schedules, newest first."""
        async with get_async_db(self.session_factory) as session:
            stmt = select(ReportSchedule)
            if active_only:
                stmt = stmt.where(ReportSchedule.is_active.is_(True))
            stmt = stmt.order_by(ReportSchedule.created_at.desc(), ReportSchedule.id.desc())
            result = await session.execute(stmt)
            return [ReportScheduleRead.model_validate(s) for s in result.scalars().all()]

    async def get_schedule(self, schedule_id: int) -> ReportScheduleRead:
        async with get_async_db(self.session_factory) as session:
            schedule = await self._load(session, schedule_id)
            return ReportScheduleRead.model_validate(schedule)

    async def create_schedule(
        self,
        data: Union[ReportScheduleCreate, Dict[str, Any]],
        now: Optional[datetime] = None,
    ) -> ReportScheduleRead:
        """
        Create a schedule and compute its first ``next_send`` from now.

        Raises:
            ValidationFailure: payload fails schema validation
        """
        payload = _validate(ReportScheduleCreate, data)
        delivery_time = parse_delivery_time(payload.delivery_time, self.config)
        now = now or utcnow()

        schedule = ReportSchedule(
            name=payload.name,
            type=payload.type.value,
            frequency=payload.frequency.value,
            delivery_time=delivery_time,
            recipients=payload.recipients,
            is_active=payload.is_active,
            pdf_template=payload.pdf_template,
            next_send=next_send(payload.frequency, delivery_time, now, self.config),
        )
        async with get_async_db(self.session_factory) as session:
            session.add(schedule)
            await session.flush()
            await session.refresh(schedule)
            logger.info(f"Created report schedule {schedule.id} ({schedule.name})")
            return ReportScheduleRead.model_validate(schedule)

    async def update_schedule(
        self,
        schedule_id: int,
        data: Union[ReportScheduleUpdate, Dict[str, Any]],
        now: Optional[datetime] = None,
    ) -> ReportScheduleRead:
        """
        Apply a partial update.

        Changing ``frequency`` or ``delivery_time`` recomputes ``next_send``
        from now using the merged values.
        """
        payload = _validate(ReportScheduleUpdate, data)
        changes = payload.model_dump(exclude_unset=True)
        # Explicit nulls on required columns are ignored
        changes = {
            key: value for key, value in changes.items()
            if value is not None or key == "pdf_template"
        }

        async with get_async_db(self.session_factory) as session:
            schedule = await self._load(session, schedule_id)
            for key, value in changes.items():
                if hasattr(value, "value"):
                    value = value.value
                setattr(schedule, key, value)

            if "frequency" in changes or "delivery_time" in changes:
                schedule.delivery_time = parse_delivery_time(schedule.delivery_time, self.config)
                schedule.next_send = next_send(
                    schedule.frequency, schedule.delivery_time, now or utcnow(), self.config
                )

            await session.flush()
            await session.refresh(schedule)
            return ReportScheduleRead.model_validate(schedule)

    async def delete_schedule(self, schedule_id: int) -> ReportScheduleRead:
        async with get_async_db(self.session_factory) as session:
            schedule = await self._load(session, schedule_id)
            deleted = ReportScheduleRead.model_validate(schedule)
            await session.delete(schedule)
            logger.info(f"Deleted report schedule {schedule_id}")
            return deleted

    async def due_schedules(self, now: Optional[datetime] = None) -> List[ReportScheduleRead]:
        """Active schedules whose ``next_send`` is at or before ``now``."""
        now = now or utcnow()
        async with get_async_db(self.session_factory) as session:
            stmt = (
                select(ReportSchedule)
                .where(ReportSchedule.is_active.is_(True))
                .where(ReportSchedule.next_send <= now)
                .order_by(ReportSchedule.next_send)
            )
            result = await session.execute(stmt)
            return [ReportScheduleRead.model_validate(s) for s in result.scalars().all()]

    async def record_send(
        self,
        schedule: ReportScheduleRead,
        sent_at: Optional[datetime] = None,
    ) -> ReportScheduleRead:
        """
        Mark a send as done and move ``next_send`` forward from ``sent_at``.

        ``schedule`` must be the snapshot read at trigger time; the update only
        applies if the row still carries that snapshot's timestamps.

        Raises:
            ScheduleConflict: another trigger recorded a send first
        """
        sent_at = sent_at or utcnow()
        upcoming = next_send_from_anchor(
            schedule.frequency, schedule.delivery_time, sent_at, self.config
        )

        async with get_async_db(self.session_factory) as session:
            stmt = (
                update(ReportSchedule)
                .where(ReportSchedule.id == schedule.id)
                .where(ReportSchedule.next_send == schedule.next_send)
                .values(last_sent=sent_at, next_send=upcoming)
            )
            if schedule.last_sent is None:
                stmt = stmt.where(ReportSchedule.last_sent.is_(None))
            else:
                stmt = stmt.where(ReportSchedule.last_sent == schedule.last_sent)

            result = await session.execute(stmt.execution_options(synchronize_session=False))
            if result.rowcount != 1:
                raise ScheduleConflict(schedule.id)

            refreshed = await self._load(session, schedule.id, populate_existing=True)
            logger.info(f"Recorded send for schedule {schedule.id}; next send {upcoming.isoformat()}")
            return ReportScheduleRead.model_validate(refreshed)

    async def _load(self, session, schedule_id: int, populate_existing: bool = False) -> ReportSchedule:
        stmt = select(ReportSchedule).where(ReportSchedule.id == schedule_id)
        if populate_existing:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)
        schedule = result.scalar_one_or_none()
        if schedule is None:
            raise ScheduleNotFound(schedule_id)
        return schedule
