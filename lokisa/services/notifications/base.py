from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from pydantic import BaseModel, Field

from lokisa.models.issue import Issue, NotificationKind

logger = logging.getLogger(__name__)


class DeliveryResult(BaseModel):
    success: bool
    error: Optional[str] = None
    recipients: List[str] = Field(default_factory=list)


class EmailNotifier(ABC):
    """
    Abstract email notifier for issue events.

    Contract:
    - Input: the issue as stored (counts already updated) and the event kind.
    - Output: DeliveryResult listing the addresses the message went to.
    - SHOULD NOT raise for delivery failures; return success=False instead.
      Callers still guard against exceptions, since a notification must
      never fail the operation that triggered it.
    """

    name = "base"

    @abstractmethod
    def send(self, issue: Issue, kind: NotificationKind) -> DeliveryResult:
        raise NotImplementedError


def issue_type_name(issue_type: str) -> str:
    """'burst-pipe' → 'Burst pipe'"""
    if not issue_type:
        return "Issue"
    text = issue_type.replace("-", " ").replace("_", " ")
    return text[:1].upper() + text[1:]


def build_subject(issue: Issue, kind: NotificationKind, days_open: Optional[int] = None) -> str:
    type_name = issue_type_name(issue.type)
    if kind == NotificationKind.SUPPORT:
        noun = "supporter" if issue.upvote_count == 1 else "supporters"
        return f"SUPPORTED [{issue.report_id}]: {type_name} at {issue.address} ({issue.upvote_count} {noun})"
    if kind == NotificationKind.REMINDER:
        suffix = f" (open {days_open} days)" if days_open is not None else ""
        return f"REMINDER [{issue.report_id}]: {type_name} at {issue.address}{suffix}"
    return f"New Report [{issue.report_id}]: {type_name} at {issue.address}"


def notify_safely(notifier: Optional[EmailNotifier], issue: Issue, kind: NotificationKind) -> Optional[DeliveryResult]:
    """
    Send a notification without letting any failure escape.

    Returns None when no notifier is configured or the notifier raised.
    """
    if notifier is None:
        return None
    try:
        result = notifier.send(issue, kind)
    except Exception as e:
        logger.error(f"Failed to send '{kind.value}' email for issue {issue.id}: {e}", exc_info=True)
        return None

    if not result.success:
        logger.error(f"'{kind.value}' email for issue {issue.id} not delivered: {result.error}")
    return result
