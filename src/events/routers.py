from fastapi import APIRouter

from .features.manage_events.router import router as manage_events_router
from .features.public_event.router import router as public_event_router

router = APIRouter()

router.include_router(manage_events_router)
router.include_router(public_event_router)
