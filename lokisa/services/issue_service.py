"""
Issue service - submission, lookup, nearby queries and status changes.

DESIGN NOTE:
- The repository is the source of truth; this layer only orchestrates
- Email delivery is best effort: a failed email never fails a submission
- Recipients and delivery status are recorded on the issue for auditing
"""

from typing import Any, Dict, List, Optional, Union
import logging

from lokisa.core.errors import NotFoundError
from lokisa.core.settings import settings
from lokisa.models.geo import Coordinate
from lokisa.models.issue import Issue, IssueCreate, IssueStatus, NotificationKind
from lokisa.services.municipality_resolver import MunicipalityResolver, get_municipality_resolver
from lokisa.services.notifications import EmailNotifier, get_email_notifier, notify_safely
from lokisa.services.proximity import find_nearby
from lokisa.services.repository import IssueRepository, get_issue_repository

logger = logging.getLogger(__name__)


class IssueService:

    def __init__(
        self,
        repository: IssueRepository,
        resolver: MunicipalityResolver,
        notifier: Optional[EmailNotifier] = None,
        default_radius_km: float = 5.0,
    ):
        self.repository = repository
        self.resolver = resolver
        self.notifier = notifier
        self.default_radius_km = default_radius_km

    def submit(self, data: Union[IssueCreate, Dict[str, Any]]) -> Issue:
        """
        Create a new issue and notify the responsible department.

        Flow:
        1. Validate and persist (raises ValidationError on bad input)
        2. Send the 'new' email to the routed recipients
        3. Record recipients and delivery status on the issue
        """
        issue = self.repository.create(data)

        result = notify_safely(self.notifier, issue, NotificationKind.NEW)
        if result is not None:
            recipients = result.recipients
            delivered = result.success
        else:
            recipients = self.resolver.department_emails(issue.coordinate, issue.type)
            delivered = False

        updated = self.repository.record_email_delivery(issue.id, recipients, delivered)
        return updated or issue

    def get(self, issue_id: int) -> Issue:
        issue = self.repository.get_by_id(issue_id)
        if issue is None:
            raise NotFoundError(f"Issue {issue_id} not found")
        return issue

    def list(self) -> List[Issue]:
        return self.repository.list()

    def nearby(self, latitude: float, longitude: float, radius_km: Optional[float] = None) -> List[Issue]:
        center = Coordinate(latitude=latitude, longitude=longitude)
        if radius_km is None:
            radius_km = self.default_radius_km
        return find_nearby(self.repository.list(), center, radius_km)

    def update_status(self, issue_id: int, status: IssueStatus) -> Issue:
        issue = self.repository.update_status(issue_id, status)
        if issue is None:
            raise NotFoundError(f"Issue {issue_id} not found")
        logger.info(f"Issue {issue_id} status changed to {issue.status.value}")
        return issue


# Global service instance
_issue_service = None


def get_issue_service() -> IssueService:
    """Get or create IssueService singleton."""
    global _issue_service
    if _issue_service is None:
        _issue_service = IssueService(
            get_issue_repository(),
            get_municipality_resolver(),
            get_email_notifier(),
            default_radius_km=settings.NEARBY_DEFAULT_RADIUS_KM,
        )
    return _issue_service
