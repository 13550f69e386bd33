from fastapi import APIRouter

from volunteer_hub.api.v1.events import router as events_router
from volunteer_hub.api.v1.me import router as me_router
from volunteer_hub.api.v1.notifications import router as notifications_router
from volunteer_hub.api.v1.participations import router as participations_router
from volunteer_hub.api.v1.sweeps import router as sweeps_router

router = APIRouter()
router.include_router(events_router)
router.include_router(participations_router)
router.include_router(me_router)
router.include_router(notifications_router)
router.include_router(sweeps_router)
