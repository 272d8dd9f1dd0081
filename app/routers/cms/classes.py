"""
CMS Classes Router - Class types, schedules, and booking management
"""
import logging
from typing import Optional, List, Union

from fastapi import APIRouter, HTTPException, status, Depends, Query
from pydantic import BaseModel, Field

from app.db import get_db
from app.errors import ServiceError
from app.middleware import verify_bearer_token, resolve_admin_id
from app.services import classes as class_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["CMS - Classes"])


# ============== Request Models ==============

class ClassTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class ClassScheduleCreate(BaseModel):
    adminId: Optional[int] = None
    className: Optional[str] = None
    trainerId: Optional[int] = None
    date: Optional[str] = None
    day: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    capacity: Optional[int] = None
    status: str = "Active"
    members: List[Union[int, str]] = []
    price: float = 0


class ClassScheduleUpdate(BaseModel):
    className: Optional[str] = None
    trainerId: Optional[int] = None
    date: Optional[str] = None
    day: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    status: Optional[str] = None
    members: Optional[List[Union[int, str]]] = None
    price: Optional[float] = None


class BookClassForMemberRequest(BaseModel):
    userId: int
    scheduleId: int


def _internal_error(error_code: str, action: str, e: Exception):
    logger.error(f"Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error_code": error_code, "message": str(e)},
    )


# ============== Class Types ==============

@router.get("/types")
def get_all_class_types(auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get all class types"""
    try:
        return {"success": True, "data": class_service.list_class_types(conn)}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_CLASS_TYPES_FAILED", "getting class types", e)


@router.post("/types", status_code=status.HTTP_201_CREATED)
def create_class_type(
    request: ClassTypeCreate, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)
):
    """Create a new class type"""
    try:
        class_type = class_service.create_class_type(conn, request.name)
        return {"success": True, "message": "Class type created", "data": class_type}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("CREATE_CLASS_TYPE_FAILED", "creating class type", e)


@router.get("/trainers")
def get_trainers(
    admin_id: Optional[int] = Query(None),
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Get personal and general trainers of the admin"""
    try:
        trainers = class_service.list_trainers(conn, resolve_admin_id(auth, admin_id))
        return {"success": True, "data": trainers}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_TRAINERS_FAILED", "getting trainers", e)


# ============== Schedules ==============

@router.get("/schedules")
def get_all_schedules(
    admin_id: Optional[int] = Query(None),
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Get all class schedules of the admin"""
    try:
        schedules = class_service.list_schedules(conn, resolve_admin_id(auth, admin_id))
        return {"success": True, "data": schedules}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_SCHEDULES_FAILED", "getting schedules", e)


@router.post("/schedules", status_code=status.HTTP_201_CREATED)
def create_schedule(
    request: ClassScheduleCreate, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)
):
    """Create a new class schedule"""
    data = request.model_dump()
    data["adminId"] = resolve_admin_id(auth, data.get("adminId"))

    try:
        schedule = class_service.create_schedule(conn, data)
        return {"success": True, "message": "Class schedule created", "data": schedule}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("CREATE_SCHEDULE_FAILED", "creating schedule", e)


@router.get("/schedules/{schedule_id}")
def get_schedule(schedule_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get class schedule detail"""
    try:
        return {"success": True, "data": class_service.get_schedule(conn, schedule_id)}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_SCHEDULE_FAILED", "getting schedule", e)


@router.put("/schedules/{schedule_id}")
def update_schedule(
    schedule_id: int,
    request: ClassScheduleUpdate,
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Update a class schedule (only the fields sent)"""
    try:
        schedule = class_service.update_schedule(
            conn, schedule_id, request.model_dump(exclude_none=True)
        )
        return {"success": True, "message": "Class schedule updated", "data": schedule}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("UPDATE_SCHEDULE_FAILED", "updating schedule", e)


@router.delete("/schedules/{schedule_id}")
def delete_schedule(schedule_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Delete a class schedule and its bookings"""
    try:
        class_service.delete_schedule(conn, schedule_id)
        return {"success": True, "message": "Class schedule deleted"}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("DELETE_SCHEDULE_FAILED", "deleting schedule", e)


# ============== Bookings Management ==============

@router.post("/bookings", status_code=status.HTTP_201_CREATED)
def book_class_for_member(
    request: BookClassForMemberRequest,
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Book a class on behalf of a member (by the member's login user id)"""
    try:
        booking = class_service.book_class(conn, request.userId, request.scheduleId)
        return {"success": True, "message": "Class booked successfully", "data": booking}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("BOOK_CLASS_FAILED", "booking class for member", e)


@router.delete("/bookings/{member_id}/{schedule_id}")
def cancel_booking_admin(
    member_id: int,
    schedule_id: int,
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Cancel a member's booking"""
    try:
        class_service.cancel_booking(conn, member_id, schedule_id)
        return {"success": True, "message": "Booking cancelled"}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("CANCEL_BOOKING_FAILED", "cancelling booking", e)


@router.get("/bookings/member/{member_id}")
def get_member_bookings(member_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get all bookings of a member"""
    try:
        return {"success": True, "data": class_service.member_bookings(conn, member_id)}
    except ServiceError:
        raise
    except Exception as e:
        raise _internal_error("GET_BOOKINGS_FAILED", "getting member bookings", e)
