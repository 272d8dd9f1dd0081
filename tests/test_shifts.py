"""
Shift rostering
"""
import sqlite3

import pytest

from app.errors import ShiftNotFound, ValidationError
from app.services import shifts as shift_service
from conftest import SqliteCursor


def _batch(conn, staff_ids, **overrides):
    kwargs = {
        "shift_date": "2026-10-20",
        "start_time": "06:00",
        "end_time": "14:00",
        "shift_type": "Morning",
    }
    kwargs.update(overrides)
    return shift_service.create_shift_batch(conn, staff_ids, **kwargs)


@pytest.mark.parametrize("staff_ids", [[5, 9, 12], "5, 9,12", ("5", "9", "12")])
def test_one_shift_per_staff_id(conn, seed, staff_ids):
    created = _batch(conn, staff_ids, branch_id=1, description="Front desk", created_by_id=2)

    assert [s["staffId"] for s in created] == ["5", "9", "12"]
    assert seed.count("shifts") == 3
    for shift in created:
        assert shift["shiftDate"] == "2026-10-20"
        assert shift["startTime"] == "06:00"
        assert shift["shiftType"] == "Morning"
        assert shift["status"] == "Pending"
        assert shift["createdById"] == 2


def test_single_staff_id(conn):
    created = _batch(conn, 7)
    assert len(created) == 1
    assert created[0]["staffId"] == "7"


@pytest.mark.parametrize("staff_ids, overrides", [
    ([], {}),
    (" , ", {}),
    (None, {}),
    ([1], {"shift_date": None}),
    ([1], {"start_time": ""}),
    ([1], {"end_time": None}),
    ([1], {"shift_type": None}),
])
def test_missing_required_fields(conn, seed, staff_ids, overrides):
    with pytest.raises(ValidationError):
        _batch(conn, staff_ids, **overrides)
    assert seed.count("shifts") == 0


def test_list_shifts_of_admin(conn, seed, gym):
    _, staff_id = seed.housekeeper(gym["admin_id"])
    other_admin = seed.admin(name="Other Owner")
    _, other_staff = seed.housekeeper(other_admin, name="Someone Else")
    _batch(conn, [staff_id], branch_id=gym["branch_id"])
    _batch(conn, [other_staff])

    shifts = shift_service.list_shifts(conn, gym["admin_id"])

    assert len(shifts) == 1
    assert shifts[0]["staffName"] == "Harry Housekeeper"
    assert shifts[0]["branchName"] == "Main Branch"


def test_get_shifts_by_staff(conn):
    _batch(conn, [3, 4])
    _batch(conn, "3", shift_date="2026-10-21")

    shifts = shift_service.get_shifts_by_staff(conn, 3)
    assert [s["shiftDate"] for s in shifts] == ["2026-10-21", "2026-10-20"]


def test_update_shift(conn):
    shift_id = _batch(conn, [3])[0]["id"]

    updated = shift_service.update_shift(
        conn, shift_id, {"endTime": "15:00", "description": "Cover", "shiftType": None}
    )

    assert updated["endTime"] == "15:00"
    assert updated["description"] == "Cover"
    assert updated["shiftType"] == "Morning"


def test_update_without_fields_returns_shift(conn):
    shift_id = _batch(conn, [3])[0]["id"]
    assert shift_service.update_shift(conn, shift_id, {})["id"] == shift_id


def test_update_status(conn):
    shift_id = _batch(conn, [3])[0]["id"]

    assert shift_service.update_shift_status(conn, shift_id, "Approved")["status"] == "Approved"

    with pytest.raises(ValidationError) as exc_info:
        shift_service.update_shift_status(conn, shift_id, "")
    assert exc_info.value.message == "Status required"


def test_delete_shift(conn, seed):
    shift_id = _batch(conn, [3])[0]["id"]

    assert shift_service.delete_shift(conn, shift_id) is True
    assert seed.count("shifts") == 0

    with pytest.raises(ShiftNotFound):
        shift_service.delete_shift(conn, shift_id)


def test_missing_shift(conn):
    with pytest.raises(ShiftNotFound):
        shift_service.get_shift(conn, 1)
    with pytest.raises(ShiftNotFound):
        shift_service.update_shift(conn, 1, {"status": "Approved"})


def test_failed_batch_keeps_rows_created_before_the_failure(conn, seed, monkeypatch):
    real_execute = SqliteCursor.execute
    inserts = []

    def failing_second_insert(self, sql, params=()):
        if "INSERT INTO shifts" in sql:
            inserts.append(params)
            if len(inserts) == 2:
                raise sqlite3.OperationalError("disk I/O error")
        return real_execute(self, sql, params)

    monkeypatch.setattr(SqliteCursor, "execute", failing_second_insert)

    with pytest.raises(sqlite3.OperationalError):
        _batch(conn, [5, 9, 12])

    monkeypatch.undo()
    assert len(inserts) == 2
    assert seed.count("shifts") == 1
    assert [s["staffId"] for s in shift_service.get_shifts_by_staff(conn, 5)] == ["5"]
