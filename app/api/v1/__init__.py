from fastapi import APIRouter
from .frontdesk.frontdesk_routes import router as frontdesk_router
from .nurse.nurse_routes import router as nurse_router

router = APIRouter()


router.include_router(frontdesk_router)
router.include_router(nurse_router)
