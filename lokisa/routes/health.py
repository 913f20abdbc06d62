"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException
from lokisa.core.settings import settings
from lokisa.services.repository import IssueRepository, get_issue_repository
from lokisa.utils.timestamps import utcnow


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": utcnow().isoformat()
    }


@router.get("/db")
def database_health(repository: IssueRepository = Depends(get_issue_repository)):
    """
    Storage connectivity check.
    Lists issues through the active repository.
    """
    try:
        issues = repository.list()
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )

    return {
        "status": "healthy",
        "database": type(repository).__name__,
        "connected": True,
        "issues_count": len(issues),
        "timestamp": utcnow().isoformat()
    }
