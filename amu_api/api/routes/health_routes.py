"""
Health check routes for monitoring.
"""
from fastapi import APIRouter, Depends
from amu_api.core import config
from amu_api.core.dependencies import get_reference_repository
from amu_api.repositories.reference_repository import ReferenceRepository

router = APIRouter(prefix="/v1/api", tags=["Health"])


@router.get("/health")
async def health_check(
    reference_repository: ReferenceRepository = Depends(get_reference_repository)
):
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": config.settings.api_title,
        "version": config.settings.api_version,
        "withdrawal_rules": len(reference_repository)
    }
