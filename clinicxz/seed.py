"""
clinicxz/seed.py

1) create the tables and the bootstrap login (initialize)
2) with --demo: insert synthetic (not real!) patients and events

Run:
python -m clinicxz.seed [--demo]
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any, Dict

from clinicxz import config
from clinicxz.patient_service import PatientRepository, SessionRepository, TrackedIssueRepository
from clinicxz.relational import ClinicDatabase
from clinicxz.schedule_service import ScheduleRepository

logger = logging.getLogger(__name__)

DEMO_PATIENTS = [
    {
        "full_name": "Demo Patient A",
        "phone_number": "0000000001",
        "age": 34,
        "place": "Calicut",
        "is_married": True,
        "husband_name": "Demo Spouse",
        "kids_count": 2,
        "kids": [{"sex": "Male", "age": 6}, {"sex": "Female", "age": 3}],
        "core_reason": "Repeated washing",
        "previously_sought_help": ["psychologist"],
        "psychologist_name": ["Dr. Example"],
    },
    {
        "full_name": "Demo Patient B",
        "phone_number": "0000000002",
        "age": 22,
        "core_reason": "Intrusive doubts during prayer",
    },
]

DEMO_EVENTS = [
    ("Follow-up: Demo Patient A", "2030-01-01 10:00"),
    ("Intake: Demo Patient B", "2030-01-02 15:30"),
]


async def seed_demo(db: ClinicDatabase) -> Dict[str, Any]:
    """Insert demo rows unless there are patients already."""
    patients = PatientRepository(db)
    if await patients.count() > 0:
        return {"skipped": True, "reason": "DB already has patients."}

    report = {"skipped": False, "patients": 0, "events": 0}
    sessions = SessionRepository(db)
    tracked = TrackedIssueRepository(db)
    for data in DEMO_PATIENTS:
        patient_id = await patients.create(data)
        await sessions.add(patient_id, {"title": "Intake", "date": "2030-01-01", "log": "First meeting."})
        await tracked.add(patient_id, {"name": data["core_reason"], "percentage_cured": 10})
        report["patients"] += 1

    schedule = ScheduleRepository(db)
    for title, when in DEMO_EVENTS:
        await schedule.create(title, when)
        report["events"] += 1
    return report


async def main(demo: bool = False) -> None:
    db = ClinicDatabase()
    try:
        await db.initialize()
        logger.info("Database ready at %s", db.url)
        if demo:
            logger.info("Demo seed: %s", await seed_demo(db))
    finally:
        await db.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the clinicxz database.")
    parser.add_argument("--demo", action="store_true", help="insert synthetic patients if the DB is empty")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main(demo=args.demo))
