"""
Attendance service - member check-in / check-out and daily reports
"""
import logging
from datetime import datetime, date
from typing import Optional

from app.errors import ServiceError, MemberNotFound, AttendanceNotFound, AlreadyCheckedOut

logger = logging.getLogger(__name__)


def check_in(conn, member_id, branch_id=None, mode: str = "Manual", notes: str = None) -> dict:
    now = datetime.now()
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("SELECT id, branchId FROM member WHERE id = %s", (member_id,))
        member = cursor.fetchone()
        if not member:
            raise MemberNotFound("Member not found")

        branch_id = branch_id or member["branchId"]
        cursor.execute(
            """
            INSERT INTO memberattendance (memberId, branchId, checkIn, status, mode, notes, createdAt)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (member_id, branch_id, now, "Present", mode or "Manual", notes, now),
        )
        conn.commit()
        attendance_id = cursor.lastrowid
    except ServiceError:
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    return {
        "id": attendance_id,
        "memberId": member_id,
        "branchId": branch_id,
        "checkIn": now.isoformat(),
        "status": "Present",
        "mode": mode or "Manual",
        "notes": notes,
    }


def get_attendance(conn, attendance_id) -> dict:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT ma.*, m.fullName AS memberName, br.name AS branchName
            FROM memberattendance ma
            LEFT JOIN member m ON m.id = ma.memberId
            LEFT JOIN branch br ON br.id = ma.branchId
            WHERE ma.id = %s
            """,
            (attendance_id,),
        )
        record = cursor.fetchone()
    finally:
        cursor.close()

    if not record:
        raise AttendanceNotFound()
    return record


def check_out(conn, attendance_id) -> dict:
    record = get_attendance(conn, attendance_id)
    if record["checkOut"]:
        raise AlreadyCheckedOut()

    checkout_time = datetime.now()
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            "UPDATE memberattendance SET checkOut = %s WHERE id = %s",
            (checkout_time, attendance_id),
        )
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    return {
        "id": attendance_id,
        "memberId": record["memberId"],
        "checkIn": record["checkIn"],
        "checkOut": checkout_time.isoformat(),
    }


def attendance_by_member(conn, member_id) -> list:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            "SELECT * FROM memberattendance WHERE memberId = %s ORDER BY checkIn DESC, id DESC",
            (member_id,),
        )
        return cursor.fetchall()
    finally:
        cursor.close()


def attendance_by_admin(conn, admin_id) -> list:
    """All attendance of an admin's members, newest first"""
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT ma.*, m.fullName AS memberName, m.email AS memberEmail,
                   m.phone AS memberPhone, br.name AS branchName
            FROM memberattendance ma
            JOIN member m ON m.id = ma.memberId
            LEFT JOIN branch br ON br.id = ma.branchId
            WHERE m.adminId = %s
            ORDER BY ma.checkIn DESC, ma.id DESC
            """,
            (admin_id,),
        )
        return cursor.fetchall()
    finally:
        cursor.close()


def daily_attendance(conn, admin_id, day: Optional[date] = None,
                     status: Optional[str] = None, search: Optional[str] = None) -> list:
    """Attendance of an admin's members on one day, with optional filters"""
    day = day or date.today()

    where_clauses = ["m.adminId = %s", "DATE(ma.checkIn) = %s"]
    params = [admin_id, day.isoformat()]

    if status:
        where_clauses.append("ma.status = %s")
        params.append(status)

    if search:
        where_clauses.append("(m.fullName LIKE %s OR m.email LIKE %s OR m.phone LIKE %s)")
        search_term = f"%{search}%"
        params.extend([search_term, search_term, search_term])

    where_sql = " WHERE " + " AND ".join(where_clauses)

    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            f"""
            SELECT ma.*, m.fullName AS memberName, m.email AS memberEmail, m.phone AS memberPhone
            FROM memberattendance ma
            JOIN member m ON m.id = ma.memberId
            {where_sql}
            ORDER BY ma.checkIn DESC
            """,
            params,
        )
        return cursor.fetchall()
    finally:
        cursor.close()


def today_summary(conn, admin_id, day: Optional[date] = None) -> dict:
    """Present / currently in / completed counts for today"""
    day = day or date.today()
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT
                SUM(CASE WHEN ma.status = 'Present' THEN 1 ELSE 0 END) AS present,
                SUM(CASE WHEN ma.checkOut IS NULL THEN 1 ELSE 0 END) AS active,
                SUM(CASE WHEN ma.checkOut IS NOT NULL THEN 1 ELSE 0 END) AS completed
            FROM memberattendance ma
            JOIN member m ON m.id = ma.memberId
            WHERE m.adminId = %s
              AND DATE(ma.checkIn) = %s
            """,
            (admin_id, day.isoformat()),
        )
        row = cursor.fetchone() or {}
    finally:
        cursor.close()

    return {
        "present": int(row.get("present") or 0),
        "active": int(row.get("active") or 0),
        "completed": int(row.get("completed") or 0),
    }


def delete_attendance(conn, attendance_id) -> bool:
    get_attendance(conn, attendance_id)

    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("DELETE FROM memberattendance WHERE id = %s", (attendance_id,))
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    logger.info(f"Deleted attendance record {attendance_id}")
    return True
