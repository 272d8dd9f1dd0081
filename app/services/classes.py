"""
Class service - class types, schedules, and the booking eligibility rules.

Every function takes an open connection as its first argument. Functions that
write commit on success and roll back on failure; reads never commit.
"""
import json
import logging
from datetime import datetime, date, timezone
from typing import Optional

from app.config import TRAINER_ROLE_IDS
from app.errors import (
    ServiceError,
    ValidationError,
    MemberNotFound,
    ScheduleNotFound,
    BookingNotFound,
    AlreadyBooked,
    ClassFull,
    NoActivePlan,
    SessionLimitReached,
    PlanExpired,
)

logger = logging.getLogger(__name__)

SCHEDULE_UPDATE_FIELDS = (
    "className",
    "trainerId",
    "date",
    "day",
    "startTime",
    "endTime",
    "capacity",
    "status",
    "members",
    "price",
)

ATTENDANCE_MODE_CLASS_BOOKING = "Class Booking"


# ============== Helper Functions ==============

def _to_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def format_schedule_date(value) -> str:
    """Normalize a schedule date to a UTC 'YYYY-MM-DD HH:MM:SS.mmm' string."""
    try:
        parsed = _to_datetime(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")
    if parsed is None:
        raise ValidationError("Date is required")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.strftime("%Y-%m-%d %H:%M:%S.") + f"{parsed.microsecond // 1000:03d}"


def _decode_members(row: dict) -> dict:
    members = row.get("members")
    if isinstance(members, (str, bytes)):
        try:
            row["members"] = json.loads(members)
        except ValueError:
            row["members"] = []
    elif members is None:
        row["members"] = []
    return row


def _parse_capacity(value) -> int:
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Capacity must be a number")
    if capacity < 0:
        raise ValidationError("Capacity must not be negative")
    return capacity


def _is_date_over(membership_to, now: datetime = None) -> bool:
    expiry = _to_datetime(membership_to)
    if expiry is None:
        return False
    now = now or datetime.now()
    # compare as naive local time
    if expiry.tzinfo is not None:
        expiry = expiry.astimezone().replace(tzinfo=None)
    if now.tzinfo is not None:
        now = now.astimezone().replace(tzinfo=None)
    return now > expiry


# ============== Members & Plans ==============

def resolve_member(conn, login_user_id) -> dict:
    """Map a login user to its ACTIVE member profile."""
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            "SELECT id, branchId, adminId FROM member WHERE userId = %s AND status = 'ACTIVE'",
            (login_user_id,),
        )
        member = cursor.fetchone()
    finally:
        cursor.close()

    if not member:
        raise MemberNotFound()
    return member


def get_plan_status(conn, member_id, now: datetime = None) -> Optional[dict]:
    """
    Current plan state of a member, or None if no ACTIVE assignment exists.

    The current assignment is the most recently created ACTIVE one (highest
    id). bookedSessions counts every booking the member ever made, not only
    the ones made under the current assignment.
    """
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT mpa.id AS assignmentId, mp.sessions AS totalSessions, mpa.membershipTo
            FROM member_plan_assignment mpa
            JOIN memberplan mp ON mp.id = mpa.planId
            WHERE mpa.memberId = %s
              AND mpa.status = 'ACTIVE'
            ORDER BY mpa.id DESC
            LIMIT 1
            """,
            (member_id,),
        )
        plan = cursor.fetchone()
        if not plan:
            return None

        cursor.execute(
            "SELECT COUNT(*) AS booked FROM booking WHERE memberId = %s",
            (member_id,),
        )
        booked_sessions = int(cursor.fetchone()["booked"])
    finally:
        cursor.close()

    total_sessions = int(plan["totalSessions"] or 0)
    session_limit_reached = total_sessions > 0 and booked_sessions >= total_sessions

    return {
        "assignmentId": plan["assignmentId"],
        "totalSessions": total_sessions,
        "bookedSessions": booked_sessions,
        "membershipTo": plan["membershipTo"],
        "sessionLimitReached": session_limit_reached,
        "dateExpired": _is_date_over(plan["membershipTo"], now),
        # None means unlimited
        "remainingSessions": max(0, total_sessions - booked_sessions) if total_sessions > 0 else None,
    }


def check_booking_eligibility(conn, member_id, now: datetime = None) -> dict:
    """Raise the matching EligibilityDenied error if the member may not book."""
    plan = get_plan_status(conn, member_id, now)
    if plan is None:
        raise NoActivePlan()

    if plan["sessionLimitReached"]:
        raise SessionLimitReached(
            f"Session Limit Reached! You have used "
            f"{plan['bookedSessions']}/{plan['totalSessions']} sessions."
        )
    if plan["dateExpired"]:
        raise PlanExpired()
    return plan


# ============== Class Types ==============

def create_class_type(conn, name: str) -> dict:
    if not name or not str(name).strip():
        raise ValidationError("Class type name is required")

    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("INSERT INTO classtype (name) VALUES (%s)", (name,))
        conn.commit()
        return {"id": cursor.lastrowid, "name": name}
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()


def list_class_types(conn) -> list:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("SELECT * FROM classtype ORDER BY id DESC")
        return cursor.fetchall()
    finally:
        cursor.close()


def list_trainers(conn, admin_id) -> list:
    """
    Trainers (personal and general) under an admin. Personal trainers already
    tied to an ACTIVE personal plan are left out.
    """
    placeholders = ",".join(["%s"] * len(TRAINER_ROLE_IDS))
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            f"""
            SELECT u.id, u.fullName, u.email, u.phone, u.branchId, u.roleId
            FROM user u
            WHERE u.roleId IN ({placeholders})
              AND u.adminId = %s
              AND NOT EXISTS (
                  SELECT 1
                  FROM memberplan mp
                  WHERE mp.trainerId = u.id
                    AND mp.trainerType = 'personal'
                    AND mp.status = 'ACTIVE'
              )
            ORDER BY u.id DESC
            """,
            list(TRAINER_ROLE_IDS) + [admin_id],
        )
        return cursor.fetchall()
    finally:
        cursor.close()


# ============== Schedules ==============

def create_schedule(conn, data: dict) -> dict:
    admin_id = data.get("adminId")
    class_name = data.get("className")
    trainer_id = data.get("trainerId")
    schedule_date = data.get("date")
    start_time = data.get("startTime")
    end_time = data.get("endTime")
    capacity = data.get("capacity")
    status = data.get("status") or "Active"
    members = data.get("members") or []
    price = data.get("price") or 0

    if not admin_id:
        raise ValidationError("Admin is required")
    if not class_name:
        raise ValidationError("Class name is required")
    if not trainer_id:
        raise ValidationError("Trainer is required")
    if not schedule_date:
        raise ValidationError("Date is required")
    if not start_time or not end_time:
        raise ValidationError("Start & End time required")
    if capacity is None:
        raise ValidationError("Capacity is required")
    capacity = _parse_capacity(capacity)

    stored_date = format_schedule_date(schedule_date)

    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            INSERT INTO classschedule
            (adminId, className, trainerId, date, day, startTime, endTime, capacity, status, members, price)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (
                admin_id,
                class_name,
                trainer_id,
                stored_date,
                data.get("day"),
                start_time,
                end_time,
                capacity,
                status,
                json.dumps(members),
                price,
            ),
        )
        conn.commit()
        schedule_id = cursor.lastrowid
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    logger.info(f"Created class schedule {schedule_id} for admin {admin_id}")

    return {
        "id": schedule_id,
        "adminId": admin_id,
        "className": class_name,
        "trainerId": trainer_id,
        "date": stored_date,
        "day": data.get("day"),
        "startTime": start_time,
        "endTime": end_time,
        "capacity": capacity,
        "status": status,
        "members": members,
        "price": price,
    }


def list_schedules(conn, admin_id) -> list:
    """Admin overview of schedules with booked member counts"""
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT cs.*,
                   u.fullName AS trainerName,
                   (SELECT COUNT(*) FROM booking bk WHERE bk.scheduleId = cs.id) AS membersCount
            FROM classschedule cs
            LEFT JOIN user u ON cs.trainerId = u.id
            WHERE u.adminId = %s
            ORDER BY cs.id DESC
            """,
            (admin_id,),
        )
        rows = cursor.fetchall()
    finally:
        cursor.close()

    return [
        {
            "id": item["id"],
            "className": item["className"],
            "trainerId": item["trainerId"],
            "trainerName": item["trainerName"],
            "date": item["date"],
            "time": f"{item['startTime']} - {item['endTime']}",
            "day": item["day"],
            "status": item["status"],
            "capacity": item["capacity"],
            "membersCount": item["membersCount"],
            "price": item["price"],
        }
        for item in rows
    ]


def get_schedule(conn, schedule_id) -> dict:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT cs.*, u.fullName AS trainerName
            FROM classschedule cs
            LEFT JOIN user u ON cs.trainerId = u.id
            WHERE cs.id = %s
            """,
            (schedule_id,),
        )
        schedule = cursor.fetchone()
    finally:
        cursor.close()

    if not schedule:
        raise ScheduleNotFound()
    return _decode_members(schedule)


def update_schedule(conn, schedule_id, data: dict) -> dict:
    """
    Partial update: only recognized fields that are present and not None are
    written. Returns the stored row merged with the applied values.
    """
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("SELECT * FROM classschedule WHERE id = %s", (schedule_id,))
        existing = cursor.fetchone()
        if not existing:
            raise ScheduleNotFound()

        fields = []
        values = []
        applied = {}

        for key in SCHEDULE_UPDATE_FIELDS:
            value = data.get(key)
            if value is None:
                continue

            if key == "members":
                applied[key] = value
                value = json.dumps(value)
            elif key == "date":
                value = format_schedule_date(value)
                applied[key] = value
            elif key == "capacity":
                value = _parse_capacity(value)
                applied[key] = value
            else:
                applied[key] = value

            fields.append(f"{key} = %s")
            values.append(value)

        merged = _decode_members(dict(existing))
        merged.update(applied)

        if not fields:
            return merged

        values.append(schedule_id)
        cursor.execute(
            f"UPDATE classschedule SET {', '.join(fields)} WHERE id = %s",
            values,
        )
        conn.commit()
        return merged
    except ServiceError:
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()


def delete_schedule(conn, schedule_id) -> bool:
    """Delete a schedule together with every booking that references it."""
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute("SELECT id FROM classschedule WHERE id = %s", (schedule_id,))
        if not cursor.fetchone():
            raise ScheduleNotFound()

        cursor.execute("DELETE FROM booking WHERE scheduleId = %s", (schedule_id,))
        deleted_bookings = cursor.rowcount
        cursor.execute("DELETE FROM classschedule WHERE id = %s", (schedule_id,))
        conn.commit()
    except ServiceError:
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    logger.info(f"Deleted class schedule {schedule_id} and {deleted_bookings} booking(s)")
    return True


# ============== Booking ==============

def book_class(conn, login_user_id, schedule_id, now: datetime = None) -> dict:
    """
    Book a class for the member behind ``login_user_id``.

    The booking row and its "Class Booking" attendance row are committed in
    one transaction. The insert itself re-checks capacity, and the
    (memberId, scheduleId) unique key rejects a concurrent double booking.
    """
    now = now or datetime.now()

    member = resolve_member(conn, login_user_id)
    member_id = member["id"]
    branch_id = member["branchId"]

    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            "SELECT id FROM booking WHERE memberId = %s AND scheduleId = %s",
            (member_id, schedule_id),
        )
        if cursor.fetchone():
            raise AlreadyBooked()

        cursor.execute("SELECT * FROM classschedule WHERE id = %s", (schedule_id,))
        schedule = cursor.fetchone()
        if not schedule:
            raise ScheduleNotFound("Schedule not found")

        check_booking_eligibility(conn, member_id, now)

        cursor.execute(
            "SELECT COUNT(*) AS count FROM booking WHERE scheduleId = %s",
            (schedule_id,),
        )
        if cursor.fetchone()["count"] >= schedule["capacity"]:
            raise ClassFull()

        try:
            cursor.execute(
                """
                INSERT INTO booking (memberId, scheduleId, createdAt)
                SELECT %s, cs.id, %s
                FROM classschedule cs
                WHERE cs.id = %s
                  AND (SELECT COUNT(*) FROM booking b WHERE b.scheduleId = cs.id) < cs.capacity
                """,
                (member_id, now, schedule_id),
            )
        except conn.IntegrityError:
            conn.rollback()
            raise AlreadyBooked()

        if cursor.rowcount == 0:
            conn.rollback()
            raise ClassFull()

        cursor.execute(
            "SELECT id FROM booking WHERE memberId = %s AND scheduleId = %s",
            (member_id, schedule_id),
        )
        booking_id = cursor.fetchone()["id"]

        logger.info(
            f"[CLASS BOOKING] Creating attendance record for memberId={member_id}, branchId={branch_id}"
        )
        cursor.execute(
            """
            INSERT INTO memberattendance (memberId, branchId, checkIn, status, mode, notes, createdAt)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                member_id,
                branch_id,
                now,
                "Present",
                ATTENDANCE_MODE_CLASS_BOOKING,
                f"Booked for class schedule ID: {schedule_id}",
                now,
            ),
        )
        attendance_id = cursor.lastrowid
        conn.commit()
    except ServiceError:
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    logger.info(f"[CLASS BOOKING] Attendance record created with ID: {attendance_id}")

    return {
        "id": booking_id,
        "memberId": member_id,
        "scheduleId": schedule_id,
    }


def list_bookable_schedules(conn, member_id, admin_id, now: datetime = None) -> list:
    """
    Schedules of the admin's trainers, annotated for one member.

    isBookable only reflects the member's plan and whether the member already
    booked the class. Capacity is checked by book_class alone, so a listed
    class can still turn out to be full when booked.
    """
    valid_member_id = None
    cursor = conn.cursor(dictionary=True)
    try:
        if member_id:
            cursor.execute(
                "SELECT id FROM member WHERE id = %s AND adminId = %s AND status = 'ACTIVE'",
                (member_id, admin_id),
            )
            if cursor.fetchone():
                valid_member_id = member_id

        plan_expired = False
        remaining_sessions = None
        if valid_member_id:
            plan = get_plan_status(conn, valid_member_id, now)
            if plan is None:
                plan_expired = True
                remaining_sessions = 0
            else:
                plan_expired = plan["sessionLimitReached"] or plan["dateExpired"]
                remaining_sessions = plan["remainingSessions"]

        cursor.execute(
            """
            SELECT cs.id, cs.className, cs.date, cs.day, cs.startTime, cs.endTime,
                   cs.status, cs.capacity, cs.price,
                   u.fullName AS trainerName,
                   (SELECT COUNT(*) FROM booking b2 WHERE b2.scheduleId = cs.id) AS membersCount,
                   bk.id AS bookingId,
                   mu.id AS bookedUserId,
                   mu.fullName AS bookedMemberName,
                   mu.email AS bookedMemberEmail,
                   mu.phone AS bookedMemberPhone
            FROM classschedule cs
            LEFT JOIN user u ON cs.trainerId = u.id
            LEFT JOIN booking bk ON bk.scheduleId = cs.id AND bk.memberId = %s
            LEFT JOIN member m ON m.id = bk.memberId
            LEFT JOIN user mu ON mu.id = m.userId
            WHERE u.adminId = %s
            ORDER BY cs.id DESC
            """,
            (valid_member_id, admin_id),
        )
        rows = cursor.fetchall()
    finally:
        cursor.close()

    result = []
    for item in rows:
        is_booked = item["bookingId"] is not None
        result.append({
            "id": item["id"],
            "className": item["className"],
            "date": item["date"],
            "day": item["day"],
            "time": f"{item['startTime']} - {item['endTime']}",
            "trainer": item["trainerName"],
            "status": item["status"],
            "capacity": item["capacity"],
            "membersCount": item["membersCount"],
            "price": item["price"],
            "isBooked": is_booked,
            "bookingId": item["bookingId"],
            "isBookable": not plan_expired and not is_booked,
            "sessionExpired": plan_expired,
            "remainingSessions": remaining_sessions,
            "bookedMember": {
                "id": item["bookedUserId"],
                "name": item["bookedMemberName"],
                "email": item["bookedMemberEmail"],
                "phone": item["bookedMemberPhone"],
            } if is_booked else None,
        })
    return result


def cancel_booking(conn, member_id, schedule_id) -> bool:
    """Delete a booking. The attendance row written at booking time stays."""
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            "SELECT id FROM booking WHERE memberId = %s AND scheduleId = %s",
            (member_id, schedule_id),
        )
        existing = cursor.fetchone()
        if not existing:
            raise BookingNotFound()

        cursor.execute("DELETE FROM booking WHERE id = %s", (existing["id"],))
        conn.commit()
    except ServiceError:
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    logger.info(f"Cancelled booking {existing['id']} (member {member_id}, schedule {schedule_id})")
    return True


def member_bookings(conn, member_id) -> list:
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT b.*, cs.date, cs.startTime, cs.endTime, cs.day, cs.className,
                   u.fullName AS trainerName
            FROM booking b
            LEFT JOIN classschedule cs ON b.scheduleId = cs.id
            LEFT JOIN user u ON cs.trainerId = u.id
            WHERE b.memberId = %s
            ORDER BY b.id DESC
            """,
            (member_id,),
        )
        return cursor.fetchall()
    finally:
        cursor.close()
