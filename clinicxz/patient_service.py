# clinicxz/patient_service.py
"""
Patients and everything a patient owns: kids, the core-issues checklist,
therapy sessions and tracked issues.

Callers pass plain dicts (or the models in schemas.py) and get plain nested
dicts back. JSON text never leaves this module.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Union

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects import sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from clinicxz.codec import (
    decode_core_issues,
    decode_kid,
    decode_patient,
    default_core_issues,
    encode_core_issues,
    encode_patient,
    row_to_dict,
)
from clinicxz.errors import NotFoundError
from clinicxz.models import CoreIssues, Kid, Patient, TherapySession, TrackedIssue
from clinicxz.relational import Repository
from clinicxz.schemas import CoreIssuesIn, KidIn, PatientIn, SessionIn, TrackedIssueIn, parse

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], Any]

# columns used by list/search screens (no children loaded)
SUMMARY_COLUMNS = [
    Patient.id,
    Patient.full_name,
    Patient.phone_number,
    Patient.core_reason,
    Patient.created_at,
]


def average_progress(tracked_issues: Iterable[Mapping[str, Any]]) -> int:
    """Mean of percentage_cured, rounded half up. 0 when nothing is tracked."""
    values = [t.get("percentage_cured") or 0 for t in tracked_issues]
    if not values:
        return 0
    return int(math.floor(sum(values) / len(values) + 0.5))


async def _require_patient(session: AsyncSession, patient_id: int) -> Patient:
    patient = await session.get(Patient, patient_id)
    if patient is None:
        raise NotFoundError("Patient", patient_id)
    return patient


def _add_kids(session: AsyncSession, patient_id: int, kids: List[KidIn]) -> int:
    added = 0
    for kid in kids:
        if kid.is_empty():
            continue
        session.add(Kid(sex=kid.sex or "", age=kid.age, patient_id=patient_id))
        added += 1
    return added


# ============================================================
# Patients
# ============================================================

class PatientRepository(Repository):

    async def list_summaries(self) -> List[Dict[str, Any]]:
        """Newest first. Only the summary columns, never the children."""
        stmt = select(*SUMMARY_COLUMNS).order_by(Patient.created_at.desc(), Patient.id.desc())
        async with self.db.transaction() as session:
            rows = (await session.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def search(self, query: str) -> List[Dict[str, Any]]:
        """
        Case-insensitive match on name, substring match on phone number.
        Case folding is Unicode-aware (lower() is replaced on connect, see relational.py).
        """
        q = (query or "").strip()
        if not q:
            return await self.list_summaries()

        stmt = (
            select(*SUMMARY_COLUMNS)
            .where(
                or_(
                    Patient.full_name.icontains(q, autoescape=True),
                    Patient.phone_number.contains(q, autoescape=True),
                )
            )
            .order_by(Patient.created_at.desc(), Patient.id.desc())
        )
        async with self.db.transaction() as session:
            rows = (await session.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def count(self) -> int:
        async with self.db.transaction() as session:
            return await session.scalar(select(func.count()).select_from(Patient))

    async def get_by_id(self, patient_id: int) -> Dict[str, Any]:
        async with self.db.transaction() as session:
            patient = await _require_patient(session, patient_id)
            out = decode_patient(row_to_dict(patient))

            kids = await session.scalars(select(Kid).where(Kid.patient_id == patient_id).order_by(Kid.id))
            out["kids"] = [decode_kid(row_to_dict(k)) for k in kids]

            core = await session.scalar(select(CoreIssues).where(CoreIssues.patient_id == patient_id))
            if core is None:
                # a missing checklist row reads as the all-empty default
                out["core_issues"] = default_core_issues(patient_id)
            else:
                out["core_issues"] = decode_core_issues(row_to_dict(core), patient_id)

            sessions = await session.scalars(
                select(TherapySession)
                .where(TherapySession.patient_id == patient_id)
                .order_by(TherapySession.date.desc(), TherapySession.id.desc())
            )
            out["sessions"] = [row_to_dict(s) for s in sessions]

            tracked = await session.scalars(
                select(TrackedIssue).where(TrackedIssue.patient_id == patient_id).order_by(TrackedIssue.id)
            )
            out["tracked_issues"] = [row_to_dict(t) for t in tracked]

        out["progress"] = average_progress(out["tracked_issues"])
        logger.debug("Loaded patient %s", patient_id)
        return out

    async def create(self, data: Payload) -> int:
        """
        Insert the patient, its kids and its (empty) checklist row.
        Raises ValidationError when full_name or phone_number is empty.
        """
        patient_in = parse(PatientIn, data)

        async with self.db.transaction() as session:
            patient = Patient(**encode_patient(patient_in))
            session.add(patient)
            await session.flush()  # assigns patient.id

            kids = _add_kids(session, patient.id, patient_in.kids)
            session.add(CoreIssues(patient_id=patient.id))
            patient_id = patient.id

        logger.info("Created patient %s with %d kid(s)", patient_id, kids)
        return patient_id

    async def update(self, patient_id: int, data: Payload) -> None:
        """
        Overwrite the patient's own fields and replace the whole kids list.
        Checklist, sessions and tracked issues are left alone.
        """
        patient_in = parse(PatientIn, data)

        async with self.db.transaction() as session:
            result = await session.execute(
                update(Patient).where(Patient.id == patient_id).values(**encode_patient(patient_in))
            )
            if result.rowcount == 0:
                raise NotFoundError("Patient", patient_id)

            await session.execute(delete(Kid).where(Kid.patient_id == patient_id))
            kids = _add_kids(session, patient_id, patient_in.kids)

        logger.info("Updated patient %s (%d kid(s))", patient_id, kids)

    async def delete(self, patient_id: int) -> None:
        # kids, core_issues, sessions and tracked_issues go with it (ON DELETE CASCADE)
        async with self.db.transaction() as session:
            await session.execute(delete(Patient).where(Patient.id == patient_id))
        logger.info("Deleted patient %s", patient_id)

    async def update_core_issues(self, patient_id: int, data: Payload) -> None:
        """Write the checklist, creating the row first if it is missing."""
        issues_in = parse(CoreIssuesIn, data)

        async with self.db.transaction() as session:
            await _require_patient(session, patient_id)

            # no-op when the row already exists, also under concurrent calls
            await session.execute(
                sqlite.insert(CoreIssues)
                .values(patient_id=patient_id)
                .on_conflict_do_nothing(index_elements=[CoreIssues.patient_id])
            )

            await session.execute(
                update(CoreIssues)
                .where(CoreIssues.patient_id == patient_id)
                .values(**encode_core_issues(issues_in))
                .execution_options(synchronize_session=False)
            )

        logger.info("Updated core issues of patient %s", patient_id)


# ============================================================
# Sessions
# ============================================================

class SessionRepository(Repository):
    """
    Therapy sessions. Title/date are checked by the caller
    (schemas.check_session_fields); the store only enforces NOT NULL.
    """

    async def list_for_patient(self, patient_id: int) -> List[Dict[str, Any]]:
        stmt = (
            select(TherapySession)
            .where(TherapySession.patient_id == patient_id)
            .order_by(TherapySession.date.desc(), TherapySession.id.desc())
        )
        async with self.db.transaction() as session:
            return [row_to_dict(s) for s in await session.scalars(stmt)]

    async def add(self, patient_id: int, data: Payload) -> int:
        session_in = parse(SessionIn, data)
        async with self.db.transaction() as session:
            await _require_patient(session, patient_id)
            row = TherapySession(
                title=session_in.title,
                date=session_in.date,
                log=session_in.log or "",
                progress_note=session_in.progress_note or "",
                patient_id=patient_id,
            )
            session.add(row)
            await session.flush()
            session_id = row.id
        logger.info("Added session %s to patient %s", session_id, patient_id)
        return session_id

    async def update(self, session_id: int, data: Payload) -> None:
        session_in = parse(SessionIn, data)
        async with self.db.transaction() as session:
            result = await session.execute(
                update(TherapySession)
                .where(TherapySession.id == session_id)
                .values(
                    title=session_in.title,
                    date=session_in.date,
                    log=session_in.log or "",
                    progress_note=session_in.progress_note or "",
                )
            )
            if result.rowcount == 0:
                raise NotFoundError("Session", session_id)

    async def delete(self, session_id: int) -> None:
        async with self.db.transaction() as session:
            await session.execute(delete(TherapySession).where(TherapySession.id == session_id))


# ============================================================
# Tracked issues
# ============================================================

class TrackedIssueRepository(Repository):
    """percentage_cured is stored as given; keeping it in 0..100 is up to the caller."""

    async def add(self, patient_id: int, data: Payload) -> int:
        issue_in = parse(TrackedIssueIn, data)
        async with self.db.transaction() as session:
            await _require_patient(session, patient_id)
            row = TrackedIssue(
                name=issue_in.name,
                percentage_cured=issue_in.percentage_cured,
                patient_id=patient_id,
            )
            session.add(row)
            await session.flush()
            issue_id = row.id
        logger.info("Tracking issue %s for patient %s", issue_id, patient_id)
        return issue_id

    async def update(self, issue_id: int, data: Payload) -> None:
        issue_in = parse(TrackedIssueIn, data)
        async with self.db.transaction() as session:
            result = await session.execute(
                update(TrackedIssue)
                .where(TrackedIssue.id == issue_id)
                .values(name=issue_in.name, percentage_cured=issue_in.percentage_cured)
            )
            if result.rowcount == 0:
                raise NotFoundError("TrackedIssue", issue_id)

    async def delete(self, issue_id: int) -> None:
        async with self.db.transaction() as session:
            await session.execute(delete(TrackedIssue).where(TrackedIssue.id == issue_id))
