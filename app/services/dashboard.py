"""
Housekeeping dashboard - today's shifts and the weekly roster of the
housekeeping staff working under the caller's admin.
"""
import logging
from datetime import date, timedelta

from app.config import HOUSEKEEPING_ROLE_ID
from app.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def housekeeping_dashboard(conn, user_id, today: date = None) -> dict:
    today = today or date.today()
    week_start = today - timedelta(days=today.weekday())

    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            "SELECT id, adminId, roleId FROM user WHERE id = %s AND roleId = %s",
            (user_id, HOUSEKEEPING_ROLE_ID),
        )
        user = cursor.fetchone()
        if not user:
            logger.warning(f"User {user_id} denied housekeeping dashboard access")
            raise UnauthorizedError("Unauthorized: Not a housekeeping user")

        admin_id = user["adminId"]

        cursor.execute(
            """
            SELECT COUNT(DISTINCT sh.id) AS shifts
            FROM shifts sh
            JOIN staff s ON s.id = sh.staffId
            JOIN user u ON s.userId = u.id
            WHERE u.adminId = %s
              AND u.roleId = %s
              AND DATE(sh.shiftDate) = %s
            """,
            (admin_id, HOUSEKEEPING_ROLE_ID, today.isoformat()),
        )
        row = cursor.fetchone()
        today_shifts = int(row["shifts"] or 0) if row else 0

        cursor.execute(
            """
            SELECT DISTINCT sh.shiftDate, sh.startTime, sh.endTime, sh.branchId, sh.status
            FROM shifts sh
            JOIN staff s ON s.id = sh.staffId
            JOIN user u ON s.userId = u.id
            WHERE u.adminId = %s
              AND u.roleId = %s
              AND DATE(sh.shiftDate) >= %s
            ORDER BY sh.shiftDate ASC
            """,
            (admin_id, HOUSEKEEPING_ROLE_ID, week_start.isoformat()),
        )
        roster_rows = cursor.fetchall()
    finally:
        cursor.close()

    return {
        "todayShifts": today_shifts,
        "weeklyRoster": [
            {
                "date": r["shiftDate"],
                "start": r["startTime"],
                "end": r["endTime"],
                "branch": r["branchId"],
                "status": r["status"],
            }
            for r in roster_rows
        ],
    }
