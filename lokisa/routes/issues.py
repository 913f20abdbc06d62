"""
Issue endpoints - submission, retrieval, nearby search and support.

Route handlers are sync functions so FastAPI runs the blocking Firestore
calls in its thread pool. Domain errors propagate to the handlers in
lokisa.main.
"""

from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query, status

from lokisa.models.issue import (
    Issue,
    IssueCreate,
    StatusUpdate,
    SupportRequest,
    SupportResult,
    SupportStatus,
)
from lokisa.services.issue_service import IssueService, get_issue_service
from lokisa.services.support_service import SupportCoordinator, get_support_coordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/issues", tags=["Issues"])


@router.get("", response_model=List[Issue])
def list_issues(service: IssueService = Depends(get_issue_service)):
    """All issues, most recent first."""
    return service.list()


@router.get("/nearby", response_model=List[Issue])
def nearby_issues(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: Optional[float] = Query(None, description="Radius in km (default 5)"),
    service: IssueService = Depends(get_issue_service),
):
    """Issues within radius km of (lat, lng). A radius <= 0 returns nothing."""
    return service.nearby(lat, lng, radius)


@router.get("/{issue_id}", response_model=Issue)
def get_issue(issue_id: int, service: IssueService = Depends(get_issue_service)):
    return service.get(issue_id)


@router.post("", response_model=Issue, status_code=status.HTTP_201_CREATED)
def submit_issue(issue: IssueCreate, service: IssueService = Depends(get_issue_service)):
    """
    Submit a new issue.

    This endpoint:
    1. Validates the issue data
    2. Stores it with a fresh report ID
    3. Emails the responsible department (best effort)
    """
    logger.info(f"📝 POST /api/issues - type={issue.type} at {issue.latitude}, {issue.longitude}")
    created = service.submit(issue)
    logger.info(f"✅ Issue created: {created.id} ({created.report_id})")
    return created


@router.patch("/{issue_id}/status", response_model=Issue)
def update_issue_status(
    issue_id: int,
    update: StatusUpdate,
    service: IssueService = Depends(get_issue_service),
):
    return service.update_status(issue_id, update.status)


@router.post("/{issue_id}/support", response_model=SupportResult)
def support_issue(
    issue_id: int,
    body: SupportRequest,
    coordinator: SupportCoordinator = Depends(get_support_coordinator),
):
    """Support an issue once per device. A repeat attempt answers 409."""
    return coordinator.support(issue_id, body.device_id)


@router.delete("/{issue_id}/support", response_model=SupportResult)
def revoke_support(
    issue_id: int,
    body: SupportRequest,
    coordinator: SupportCoordinator = Depends(get_support_coordinator),
):
    return coordinator.revoke(issue_id, body.device_id)


@router.get("/{issue_id}/support/{device_id}", response_model=SupportStatus)
def support_status(
    issue_id: int,
    device_id: str,
    coordinator: SupportCoordinator = Depends(get_support_coordinator),
):
    return SupportStatus(issue_id=issue_id, supported=coordinator.is_supported(issue_id, device_id))
