# clinicxz/dashboard.py
from __future__ import annotations

from typing import Any, Dict

from clinicxz.patient_service import PatientRepository
from clinicxz.schedule_service import ScheduleRepository


async def dashboard_summary(
    patients: PatientRepository,
    schedule: ScheduleRepository,
    recent: int = 8,
) -> Dict[str, Any]:
    """Counts for the home screen plus the newest patients."""
    summaries = await patients.list_summaries()
    return {
        "total_patients": await patients.count(),
        "upcoming_events": await schedule.count_upcoming(),
        "recent_patients": summaries[:recent],
    }
