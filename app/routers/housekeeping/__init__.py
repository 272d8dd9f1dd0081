from fastapi import APIRouter

router = APIRouter(prefix="/api/housekeeping")

from . import dashboard

router.include_router(dashboard.router)
