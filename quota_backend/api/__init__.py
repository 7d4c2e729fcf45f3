"""
Backend API package initialization.

This package contains FastAPI router modules for the Survey Quota backend:
- quotas: quota planning and project quota configurations
- tracking: line item allocations, completes and project summaries
- quota_generator: proxy to the external Quota Generator API
"""

from fastapi import APIRouter

# Import router modules
from quota_backend.api.quotas import router as quotas_router
from quota_backend.api.tracking import router as tracking_router
from quota_backend.api.quota_generator import router as quota_generator_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(quotas_router, prefix="/quotas", tags=["quotas"])
api_router.include_router(tracking_router, prefix="/tracking", tags=["tracking"])
api_router.include_router(quota_generator_router, prefix="/quota-generator", tags=["quota-generator"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "quotas_router",
    "tracking_router",
    "quota_generator_router",
]
