from fastapi import APIRouter

router = APIRouter(prefix="/api/member")

from . import classes

router.include_router(classes.router)
