"""
Member Classes Router - Class schedules and booking for members
"""
import logging

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel

from app.db import get_db
from app.errors import ServiceError
from app.middleware import verify_bearer_token
from app.services import classes as class_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["Member - Classes"])


# ============== Request Models ==============

class BookClassRequest(BaseModel):
    schedule_id: int


# ============== Endpoints ==============

@router.get("/schedules")
def get_class_schedules(auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get the gym's class schedules with my booking status"""
    try:
        member = class_service.resolve_member(conn, auth["user_id"])
        schedules = class_service.list_bookable_schedules(conn, member["id"], member["adminId"])
        return {"success": True, "data": schedules}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error getting schedules: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "GET_SCHEDULES_FAILED", "message": str(e)},
        )


@router.post("/book", status_code=status.HTTP_201_CREATED)
def book_class(request: BookClassRequest, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Book a class"""
    try:
        booking = class_service.book_class(conn, auth["user_id"], request.schedule_id)
        return {
            "success": True,
            "message": "Class booked successfully",
            "data": booking,
        }
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error booking class: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "BOOK_CLASS_FAILED", "message": str(e)},
        )


@router.delete("/book/{schedule_id}")
def cancel_booking(schedule_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Cancel a class booking"""
    try:
        member = class_service.resolve_member(conn, auth["user_id"])
        class_service.cancel_booking(conn, member["id"], schedule_id)
        return {
            "success": True,
            "message": "Booking cancelled",
        }
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error cancelling booking: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "CANCEL_BOOKING_FAILED", "message": str(e)},
        )


@router.get("/my-bookings")
def get_my_bookings(auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get my class bookings"""
    try:
        member = class_service.resolve_member(conn, auth["user_id"])
        return {
            "success": True,
            "data": class_service.member_bookings(conn, member["id"]),
        }
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error getting bookings: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "GET_BOOKINGS_FAILED", "message": str(e)},
        )
