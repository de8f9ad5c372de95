"""API routers for the aircraft tracker."""

from fastapi import APIRouter

from .aircraft import router as aircraft_router
from .health import router as health_router
from .stats import router as stats_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(aircraft_router)
api_router.include_router(stats_router)

__all__ = ["api_router"]
