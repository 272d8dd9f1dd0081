"""
CMS Invoices Router - Invoice data derived from payments
"""
import logging

from fastapi import APIRouter, HTTPException, status, Depends

from app.db import get_db
from app.errors import ServiceError
from app.middleware import verify_bearer_token
from app.services.invoice import get_invoice_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["CMS - Invoices"])


@router.get("/{payment_id}")
def get_invoice(payment_id: int, auth: dict = Depends(verify_bearer_token), conn=Depends(get_db)):
    """Get invoice for a payment"""
    try:
        return {"success": True, "data": get_invoice_data(conn, payment_id)}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error getting invoice: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "GET_INVOICE_FAILED", "message": str(e)},
        )
