# tests/test_sessions_and_tracked.py
import pytest

from clinicxz.errors import NotFoundError, StorageFault, ValidationError
from clinicxz.schemas import check_session_fields


@pytest.fixture
async def patient_id(patients):
    return await patients.create({"full_name": "Rahim", "phone_number": "12345"})


async def test_sessions_are_newest_date_first(patients, sessions, patient_id):
    await sessions.add(patient_id, {"title": "One", "date": "2024-01-05"})
    await sessions.add(patient_id, {"title": "Three", "date": "2024-03-01"})
    await sessions.add(patient_id, {"title": "Two", "date": "2024-02-10"})

    p = await patients.get_by_id(patient_id)
    assert [s["title"] for s in p["sessions"]] == ["Three", "Two", "One"]
    assert [s["title"] for s in await sessions.list_for_patient(patient_id)] == ["Three", "Two", "One"]


async def test_session_optional_text_defaults_to_empty(sessions, patient_id):
    session_id = await sessions.add(patient_id, {"title": "Intake", "date": "2024-01-01"})
    [row] = await sessions.list_for_patient(patient_id)
    assert row["id"] == session_id
    assert row["log"] == ""
    assert row["progress_note"] == ""


async def test_edit_and_delete_one_session(sessions, patient_id):
    keep = await sessions.add(patient_id, {"title": "Keep", "date": "2024-01-01"})
    edit = await sessions.add(patient_id, {"title": "Edit me", "date": "2024-01-02"})

    await sessions.update(
        edit, {"title": "Edited", "date": "2024-01-03", "log": "talked", "progress_note": "calmer"}
    )
    rows = {s["id"]: s for s in await sessions.list_for_patient(patient_id)}
    assert rows[edit]["title"] == "Edited"
    assert rows[edit]["progress_note"] == "calmer"
    assert rows[keep]["title"] == "Keep"

    await sessions.delete(edit)
    assert [s["id"] for s in await sessions.list_for_patient(patient_id)] == [keep]


async def test_update_unknown_session(sessions):
    with pytest.raises(NotFoundError):
        await sessions.update(99, {"title": "x", "date": "2024-01-01"})


async def test_session_for_unknown_patient(sessions):
    with pytest.raises(NotFoundError):
        await sessions.add(404, {"title": "x", "date": "2024-01-01"})


async def test_store_rejects_session_without_title(sessions, patient_id):
    # the form checks this first; the NOT NULL column is the last line
    with pytest.raises(StorageFault):
        await sessions.add(patient_id, {"date": "2024-01-01"})


def test_session_form_check():
    assert check_session_fields({"title": "Intake", "date": "2024-01-01"}).title == "Intake"
    with pytest.raises(ValidationError) as exc:
        check_session_fields({"title": "  ", "date": "2024-01-01"})
    assert exc.value.fields == ["title"]
    with pytest.raises(ValidationError) as exc:
        check_session_fields({})
    assert exc.value.fields == ["title", "date"]


async def test_tracked_issue_lifecycle(patients, tracked, patient_id):
    issue_id = await tracked.add(patient_id, {"name": "Washing"})
    [row] = (await patients.get_by_id(patient_id))["tracked_issues"]
    assert row["id"] == issue_id
    assert row["percentage_cured"] == 0

    await tracked.update(issue_id, {"name": "Washing", "percentage_cured": 45})
    assert (await patients.get_by_id(patient_id))["progress"] == 45

    await tracked.delete(issue_id)
    assert (await patients.get_by_id(patient_id))["tracked_issues"] == []


async def test_percentage_is_not_clamped_by_the_store(patients, tracked, patient_id):
    issue_id = await tracked.add(patient_id, {"name": "Doubts", "percentage_cured": 120})
    await tracked.update(issue_id, {"name": "Doubts", "percentage_cured": -5})
    [row] = (await patients.get_by_id(patient_id))["tracked_issues"]
    assert row["percentage_cured"] == -5


async def test_tracked_issue_needs_a_name(tracked, patient_id):
    with pytest.raises(ValidationError):
        await tracked.add(patient_id, {"percentage_cured": 10})


async def test_update_unknown_tracked_issue(tracked):
    with pytest.raises(NotFoundError):
        await tracked.update(99, {"name": "x", "percentage_cured": 1})
