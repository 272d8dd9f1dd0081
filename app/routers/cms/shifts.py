"""
CMS Shifts Router - Staff shift rostering
"""
import logging
from typing import Optional, List, Union

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel

from app.db import get_db
from app.errors import ServiceError
from app.middleware import verify_bearer_token, resolve_admin_id
from app.services import shifts as shift_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shifts", tags=["CMS - Shifts"])


# ============== Request Models ==============

class ShiftCreate(BaseModel):
    staffIds: Optional[Union[List[Union[int, str]], str, int]] = None
    branchId: Optional[int] = None
    shiftDate: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    shiftType: Optional[str] = None
    description: Optional[str] = None


class ShiftUpdate(BaseModel):
    staffId: Optional[str] = None
    branchId: Optional[int] = None
    shiftDate: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    shiftType: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class ShiftStatusUpdate(BaseModel):
    status: Optional[str] = None


# ============== Endpoints ==============

@router.post("", status_code=status.HTTP_201_CREATED)
def create_shift(request: ShiftCreate, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Create one shift per selected staff member"""
    try:
        shifts = shift_service.create_shift_batch(
            conn,
            staff_ids=request.staffIds,
            shift_date=request.shiftDate,
            start_time=request.startTime,
            end_time=request.endTime,
            shift_type=request.shiftType,
            branch_id=request.branchId,
            description=request.description,
            created_by_id=auth["user_id"],
        )
        return {
            "success": True,
            "message": "Shifts created successfully!",
            "data": shifts,
        }
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error creating shifts: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "CREATE_SHIFT_FAILED", "message": str(e)},
        )


@router.get("/admin/{admin_id}")
def get_all_shifts(admin_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get all shifts of an admin's staff"""
    try:
        shifts = shift_service.list_shifts(conn, resolve_admin_id(auth, admin_id))
        return {"success": True, "count": len(shifts), "data": shifts}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error getting shifts: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "GET_SHIFTS_FAILED", "message": str(e)},
        )


@router.get("/staff/{staff_id}")
def get_shifts_by_staff(staff_id: str, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get shifts of one staff member"""
    try:
        return {"success": True, "data": shift_service.get_shifts_by_staff(conn, staff_id)}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error getting staff shifts: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "GET_SHIFTS_FAILED", "message": str(e)},
        )


@router.get("/{shift_id}")
def get_shift(shift_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get shift detail"""
    try:
        return {"success": True, "data": shift_service.get_shift(conn, shift_id)}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error getting shift: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "GET_SHIFT_FAILED", "message": str(e)},
        )


@router.put("/{shift_id}")
def update_shift(
    shift_id: int,
    request: ShiftUpdate,
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Update a shift"""
    try:
        updated = shift_service.update_shift(conn, shift_id, request.model_dump(exclude_none=True))
        return {"success": True, "message": "Shift updated", "data": updated}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error updating shift: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "UPDATE_SHIFT_FAILED", "message": str(e)},
        )


@router.patch("/{shift_id}/status")
def update_shift_status(
    shift_id: int,
    request: ShiftStatusUpdate,
    auth: dict = Depends(verify_bearer_token),
    conn=Depends(get_db),
):
    """Approve / reject a shift"""
    try:
        updated = shift_service.update_shift_status(conn, shift_id, request.status)
        return {
            "success": True,
            "message": f"Shift {request.status} successfully",
            "data": updated,
        }
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error updating shift status: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "UPDATE_SHIFT_STATUS_FAILED", "message": str(e)},
        )


@router.delete("/{shift_id}")
def delete_shift(shift_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Delete a shift"""
    try:
        shift_service.delete_shift(conn, shift_id)
        return {"success": True, "message": "Shift deleted"}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error deleting shift: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "DELETE_SHIFT_FAILED", "message": str(e)},
        )
