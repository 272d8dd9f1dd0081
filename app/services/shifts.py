"""
Shift service - staff rostering.

A shift request may name several staff members; it is stored as one shift
row per staff member. Rows are committed one at a time, so a failure midway
leaves the rows created before it in place.
"""
import logging
from datetime import datetime

from app.errors import ServiceError, ValidationError, ShiftNotFound

logger = logging.getLogger(__name__)

DEFAULT_SHIFT_STATUS = "Pending"

SHIFT_UPDATE_FIELDS = (
    "staffId",
    "branchId",
    "shiftDate",
    "startTime",
    "endTime",
    "shiftType",
    "description",
    "status",
)


def normalize_staff_ids(staff_ids) -> list:
    """Accept a list, a comma-separated string or a single id."""
    if staff_ids is None:
        return []
    if isinstance(staff_ids, (list, tuple)):
        values = staff_ids
    else:
        values = str(staff_ids).split(",")
    return [str(v).strip() for v in values if str(v).strip()]


def _create_shift(conn, staff_id, branch_id, shift_date, start_time, end_time,
                  shift_type, description, created_by_id) -> dict:
    now = datetime.now()
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            INSERT INTO shifts
            (staffId, branchId, shiftDate, startTime, endTime, shiftType, description,
             status, createdById, createdAt)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (
                staff_id,
                branch_id,
                shift_date,
                start_time,
                end_time,
                shift_type,
                description,
                DEFAULT_SHIFT_STATUS,
                created_by_id,
                now,
            ),
        )
        conn.commit()
        shift_id = cursor.lastrowid
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    return {
        "id": shift_id,
        "staffId": staff_id,
        "branchId": branch_id,
        "shiftDate": shift_date,
        "startTime": start_time,
        "endTime": end_time,
        "shiftType": shift_type,
        "description": description,
        "status": DEFAULT_SHIFT_STATUS,
        "createdById": created_by_id,
    }


def create_shift_batch(conn, staff_ids, shift_date, start_time, end_time, shift_type,
                       branch_id=None, description=None, created_by_id=None) -> list:
    """Create one shift per staff id, in the order given."""
    staff_id_list = normalize_staff_ids(staff_ids)
    if not staff_id_list or not shift_date or not start_time or not end_time or not shift_type:
        raise ValidationError("Please fill all required fields")

    created = []
    for staff_id in staff_id_list:
        created.append(
            _create_shift(
                conn, staff_id, branch_id, shift_date, start_time, end_time,
                shift_type, description, created_by_id,
            )
        )

    logger.info(f"Created {len(created)} shift(s) on {shift_date} for staff {staff_id_list}")
    return created


def list_shifts(conn, admin_id) -> list:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT sh.*, u.fullName AS staffName, br.name AS branchName
            FROM shifts sh
            JOIN staff s ON s.id = sh.staffId
            JOIN user u ON s.userId = u.id
            LEFT JOIN branch br ON br.id = sh.branchId
            WHERE u.adminId = %s
            ORDER BY sh.shiftDate DESC, sh.id DESC
            """,
            (admin_id,),
        )
        return cursor.fetchall()
    finally:
        cursor.close()


def get_shift(conn, shift_id) -> dict:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("SELECT * FROM shifts WHERE id = %s", (shift_id,))
        shift = cursor.fetchone()
    finally:
        cursor.close()

    if not shift:
        raise ShiftNotFound()
    return shift


def get_shifts_by_staff(conn, staff_id) -> list:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            "SELECT * FROM shifts WHERE staffId = %s ORDER BY shiftDate DESC, id DESC",
            (str(staff_id),),
        )
        return cursor.fetchall()
    finally:
        cursor.close()


def update_shift(conn, shift_id, data: dict) -> dict:
    existing = get_shift(conn, shift_id)

    fields = []
    values = []
    for key in SHIFT_UPDATE_FIELDS:
        if data.get(key) is not None:
            fields.append(f"{key} = %s")
            values.append(data[key])

    if not fields:
        return existing

    values.append(shift_id)
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(f"UPDATE shifts SET {', '.join(fields)} WHERE id = %s", values)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    return get_shift(conn, shift_id)


def update_shift_status(conn, shift_id, status: str) -> dict:
    """Approve / reject a shift"""
    if not status:
        raise ValidationError("Status required")
    return update_shift(conn, shift_id, {"status": status})


def delete_shift(conn, shift_id) -> bool:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("SELECT id FROM shifts WHERE id = %s", (shift_id,))
        if not cursor.fetchone():
            raise ShiftNotFound()
        cursor.execute("DELETE FROM shifts WHERE id = %s", (shift_id,))
        conn.commit()
    except ServiceError:
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()
    return True
