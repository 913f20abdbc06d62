import logging
from typing import Callable, List

from lokisa.models.geo import Coordinate
from lokisa.models.issue import Issue, NotificationKind
from .base import DeliveryResult, EmailNotifier, build_subject

logger = logging.getLogger(__name__)


class LoggingEmailNotifier(EmailNotifier):
    """
    Development notifier: resolves recipients and logs the subject line
    instead of sending anything. Always reports success.
    """

    name = "log"

    def __init__(self, recipients_for: Callable[[Coordinate, str], List[str]]):
        self.recipients_for = recipients_for

    def send(self, issue: Issue, kind: NotificationKind) -> DeliveryResult:
        recipients = self.recipients_for(issue.coordinate, issue.type)
        logger.info(f"[EMAIL:{kind.value}] to={recipients} subject={build_subject(issue, kind)!r}")
        return DeliveryResult(success=True, recipients=recipients)
