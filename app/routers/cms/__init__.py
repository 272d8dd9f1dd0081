from fastapi import APIRouter

router = APIRouter(prefix="/api/cms")

from . import classes, shifts, attendance, invoices

router.include_router(classes.router)
router.include_router(shifts.router)
router.include_router(attendance.router)
router.include_router(invoices.router)
