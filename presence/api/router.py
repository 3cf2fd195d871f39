"""
Main API router
"""
from fastapi import APIRouter

from presence.api.v1 import attendance, health, sites, version

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
api_router.include_router(sites.router, prefix="/sites", tags=["sites"])
