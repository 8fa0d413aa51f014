from fastapi import APIRouter

from .applications import application_router
from .credit_limits import credit_limit_router
from .health import health_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(application_router, tags=["Applications"])
router.include_router(credit_limit_router, tags=["Credit Limits"])
