"""
Housekeeping Dashboard Router
"""
import logging

from fastapi import APIRouter, HTTPException, status, Depends

from app.db import get_db
from app.errors import ServiceError
from app.middleware import verify_bearer_token
from app.services.dashboard import housekeeping_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Housekeeping - Dashboard"])


@router.get("")
def get_dashboard(auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Today's shifts and the weekly roster of housekeeping staff"""
    try:
        return {"success": True, "data": housekeeping_dashboard(conn, auth["user_id"])}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error getting housekeeping dashboard: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "GET_DASHBOARD_FAILED", "message": str(e)},
        )
