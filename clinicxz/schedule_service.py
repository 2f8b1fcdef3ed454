# clinicxz/schedule_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import delete, func, select, update

from clinicxz.codec import row_to_dict
from clinicxz.models import ScheduleEvent
from clinicxz.relational import Repository
from clinicxz.schemas import ScheduleEventIn, parse

logger = logging.getLogger(__name__)

SCHEDULED = "Scheduled"
COMPLETED = "Completed"
CANCELED = "Canceled"
STATUSES = [SCHEDULED, COMPLETED, CANCELED]


class ScheduleRepository(Repository):
    """Calendar events. Not linked to patients."""

    async def list(self) -> List[Dict[str, Any]]:
        """
        Ascending by the stored time string. Ordering is lexicographic, so
        callers should store a sortable format (ISO date-time).
        """
        stmt = select(ScheduleEvent).order_by(ScheduleEvent.time.asc(), ScheduleEvent.id.asc())
        async with self.db.transaction() as session:
            return [row_to_dict(e) for e in await session.scalars(stmt)]

    async def create(self, title: str, time: str) -> int:
        event_in = parse(ScheduleEventIn, {"title": title, "time": time})
        async with self.db.transaction() as session:
            event = ScheduleEvent(title=event_in.title, time=event_in.time, status=SCHEDULED)
            session.add(event)
            await session.flush()
            event_id = event.id
        logger.info("Scheduled event %s at %s", event_id, event_in.time)
        return event_id

    async def set_status(self, event_id: int, status: str) -> None:
        # any string is written; the app only sends Completed / Canceled
        async with self.db.transaction() as session:
            await session.execute(update(ScheduleEvent).where(ScheduleEvent.id == event_id).values(status=status))
        logger.info("Event %s -> %s", event_id, status)

    async def delete(self, event_id: int) -> None:
        async with self.db.transaction() as session:
            await session.execute(delete(ScheduleEvent).where(ScheduleEvent.id == event_id))

    async def count_upcoming(self) -> int:
        async with self.db.transaction() as session:
            return await session.scalar(
                select(func.count()).select_from(ScheduleEvent).where(ScheduleEvent.status == SCHEDULED)
            )
