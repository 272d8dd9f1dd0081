"""
CMS Attendance Router - Member check-in / check-out and attendance reports
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Depends, Query
from pydantic import BaseModel

from app.db import get_db
from app.errors import ServiceError
from app.middleware import verify_bearer_token, resolve_admin_id
from app.services import attendance as attendance_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["CMS - Attendance"])


# ============== Request Models ==============

class CheckInRequest(BaseModel):
    memberId: int
    branchId: Optional[int] = None
    mode: str = "Manual"
    notes: Optional[str] = None


def _internal_error(error_code: str, action: str, e: Exception):
    logger.error(f"Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error_code": error_code, "message": str(e)},
    )


# ============== Endpoints ==============

@router.post("/checkin", status_code=status.HTTP_201_CREATED)
def member_check_in(request: CheckInRequest, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Member check-in"""
    try:
        record = attendance_service.check_in(
            conn, request.memberId, branch_id=request.branchId, mode=request.mode, notes=request.notes
        )
        return {"success": True, "message": "Check-in successful", "data": record}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("CHECKIN_FAILED", "checking in member", e)


@router.put("/checkout/{attendance_id}")
def member_check_out(attendance_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Member check-out"""
    try:
        record = attendance_service.check_out(conn, attendance_id)
        return {"success": True, "message": "Check-out successful", "data": record}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("CHECKOUT_FAILED", "checking out member", e)


@router.get("/admin")
def get_attendance_by_admin(
    admin_id: Optional[int] = Query(None),
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """All attendance of the admin's members"""
    try:
        records = attendance_service.attendance_by_admin(conn, resolve_admin_id(auth, admin_id))
        return {"success": True, "count": len(records), "data": records}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_ADMIN_ATTENDANCE_FAILED", "getting admin attendance", e)


@router.get("/daily")
def get_daily_attendance(
    day: Optional[date] = Query(None, alias="date"),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    admin_id: Optional[int] = Query(None),
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Daily attendance report (with search and status filter)"""
    try:
        records = attendance_service.daily_attendance(
            conn, resolve_admin_id(auth, admin_id), day=day, status=status_filter, search=search
        )
        return {"success": True, "count": len(records), "data": records}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_DAILY_ATTENDANCE_FAILED", "getting daily attendance", e)


@router.get("/summary/today")
def get_today_summary(
    admin_id: Optional[int] = Query(None),
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Dashboard summary (present, active, completed)"""
    try:
        summary = attendance_service.today_summary(conn, resolve_admin_id(auth, admin_id))
        return {"success": True, "data": summary}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_ATTENDANCE_SUMMARY_FAILED", "getting attendance summary", e)


@router.get("/member/{member_id}")
def get_attendance_by_member(member_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Attendance history of a member"""
    try:
        return {"success": True, "data": attendance_service.attendance_by_member(conn, member_id)}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_MEMBER_ATTENDANCE_FAILED", "getting member attendance", e)


@router.get("/{attendance_id}")
def attendance_detail(attendance_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Single attendance detail"""
    try:
        return {"success": True, "data": attendance_service.get_attendance(conn, attendance_id)}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_ATTENDANCE_FAILED", "getting attendance", e)


@router.delete("/{attendance_id}")
def delete_attendance(attendance_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Delete an attendance record"""
    try:
        attendance_service.delete_attendance(conn, attendance_id)
        return {"success": True, "message": "Attendance deleted"}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("DELETE_ATTENDANCE_FAILED", "deleting attendance", e)
