# tests/conftest.py
import pytest
from sqlalchemy import text

from clinicxz.auth_service import AuthRepository
from clinicxz.patient_service import PatientRepository, SessionRepository, TrackedIssueRepository
from clinicxz.relational import ClinicDatabase
from clinicxz.schedule_service import ScheduleRepository


@pytest.fixture
async def db(tmp_path):
    database = ClinicDatabase(f"sqlite+aiosqlite:///{tmp_path / 'clinic.db'}", echo=False)
    await database.initialize()
    yield database
    await database.dispose()


@pytest.fixture
def patients(db):
    return PatientRepository(db)


@pytest.fixture
def sessions(db):
    return SessionRepository(db)


@pytest.fixture
def tracked(db):
    return TrackedIssueRepository(db)


@pytest.fixture
def schedule(db):
    return ScheduleRepository(db)


@pytest.fixture
def auth(db):
    return AuthRepository(db)


@pytest.fixture
def run_sql(db):
    """Execute raw SQL against the test DB (to fake legacy or corrupt rows)."""
    async def _run(sql, **params):
        async with db.transaction() as session:
            result = await session.execute(text(sql), params)
            if result.returns_rows:
                return result.all()
            return None
    return _run
