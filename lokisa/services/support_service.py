"""
Support Service - one support (upvote) per device per issue.

State per (device_id, issue_id): Unsupported --support--> Supported
--revoke--> Unsupported. The existence checks here give a fast, friendly
error; the repository's unique key is what actually prevents duplicates.
"""

from typing import Optional
import logging

from lokisa.core.errors import ConflictError, NotFoundError, ValidationError
from lokisa.models.issue import NotificationKind, SupportResult
from lokisa.services.notifications import EmailNotifier, get_email_notifier, notify_safely
from lokisa.services.repository import IssueRepository, get_issue_repository
from lokisa.utils.security import mask_device_id

logger = logging.getLogger(__name__)


def _require_device_id(device_id: Optional[str]) -> str:
    if device_id is None or not str(device_id).strip():
        raise ValidationError("Device ID is required")
    return str(device_id).strip()


class SupportCoordinator:
    """Service for supporting and revoking support on issues."""

    def __init__(self, repository: IssueRepository, notifier: Optional[EmailNotifier] = None):
        self.repository = repository
        self.notifier = notifier

    def support(self, issue_id: int, device_id: str) -> SupportResult:
        """
        Record device_id's support for issue_id.

        Raises:
            NotFoundError: issue does not exist
            ConflictError: device already supports the issue
        """
        device_id = _require_device_id(device_id)

        if self.repository.get_by_id(issue_id) is None:
            raise NotFoundError(f"Issue {issue_id} not found")

        # Duplicate check is repeated atomically inside add_support
        if self.repository.get_support(issue_id, device_id) is not None:
            raise ConflictError("You have already supported this issue")

        _, issue = self.repository.add_support(issue_id, device_id)
        logger.info(f"Issue {issue_id} supported by {mask_device_id(device_id)} ({issue.upvote_count} supporters)")

        result = notify_safely(self.notifier, issue, NotificationKind.SUPPORT)
        return SupportResult(issue=issue, supported=True, notified=bool(result and result.success))

    def revoke(self, issue_id: int, device_id: str) -> SupportResult:
        """
        Withdraw device_id's support for issue_id.

        Raises:
            NotFoundError: issue or support record does not exist
        """
        device_id = _require_device_id(device_id)

        if self.repository.get_by_id(issue_id) is None:
            raise NotFoundError(f"Issue {issue_id} not found")
        if self.repository.get_support(issue_id, device_id) is None:
            raise NotFoundError("No support record found for this issue")

        issue = self.repository.remove_support(issue_id, device_id)
        logger.info(f"Support on issue {issue_id} revoked by {mask_device_id(device_id)}")
        return SupportResult(issue=issue, supported=False)

    def is_supported(self, issue_id: int, device_id: str) -> bool:
        device_id = _require_device_id(device_id)
        return self.repository.is_supported(issue_id, device_id)


# Global service instance
_support_coordinator = None


def get_support_coordinator() -> SupportCoordinator:
    """Get or create SupportCoordinator singleton."""
    global _support_coordinator
    if _support_coordinator is None:
        _support_coordinator = SupportCoordinator(get_issue_repository(), get_email_notifier())
    return _support_coordinator
