from fastapi import APIRouter

from .features.access.router import router as access_router

router = APIRouter()

router.include_router(access_router)
