"""Main API router that aggregates all route modules."""

from fastapi import APIRouter

from userverify.api import health, verification

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(verification.router, prefix="/verification", tags=["verification"])
