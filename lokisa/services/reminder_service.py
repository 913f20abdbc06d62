"""
Reminder Service - nudge departments about issues left unresolved.

An issue is due when it is not resolved, is at least REMINDER_AGE_DAYS old
and has had no reminder in the last REMINDER_INTERVAL_DAYS. The last send
time is persisted on the issue, so restarts do not cause repeat emails.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional
import logging

from pydantic import BaseModel

from lokisa.core.settings import settings
from lokisa.models.issue import Issue, IssueStatus, NotificationKind
from lokisa.services.notifications import EmailNotifier, get_email_notifier, notify_safely
from lokisa.services.repository import IssueRepository, get_issue_repository
from lokisa.utils.timestamps import parse_timestamp, utcnow

logger = logging.getLogger(__name__)


class ReminderRun(BaseModel):
    checked: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0


class ReminderService:

    UNRESOLVED = (IssueStatus.REPORTED, IssueStatus.IN_PROGRESS)

    def __init__(
        self,
        repository: IssueRepository,
        notifier: Optional[EmailNotifier],
        age_days: int = 45,
        interval_days: int = 7,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.notifier = notifier
        self.age = timedelta(days=age_days)
        self.interval = timedelta(days=interval_days)
        self.clock = clock

    def is_due(self, issue: Issue, now: datetime) -> bool:
        if issue.status not in self.UNRESOLVED:
            return False
        if now - parse_timestamp(issue.created_at) < self.age:
            return False
        last_sent = parse_timestamp(issue.last_reminder_sent_at)
        return last_sent is None or now - last_sent >= self.interval

    def send_due_reminders(self, now: Optional[datetime] = None) -> ReminderRun:
        now = parse_timestamp(now) if now is not None else self.clock()
        run = ReminderRun()

        for issue in self.repository.list():
            run.checked += 1
            if not self.is_due(issue, now):
                run.skipped += 1
                continue

            result = notify_safely(self.notifier, issue, NotificationKind.REMINDER)
            if result is not None and result.success:
                self.repository.mark_reminder_sent(issue.id, now)
                run.sent += 1
                logger.info(f"Sent reminder email for issue ID {issue.id}, report ID {issue.report_id}")
            else:
                run.failed += 1

        logger.info(f"Reminder run finished: {run.model_dump()}")
        return run


# Global service instance
_reminder_service = None


def get_reminder_service() -> ReminderService:
    """Get or create ReminderService singleton."""
    global _reminder_service
    if _reminder_service is None:
        _reminder_service = ReminderService(
            get_issue_repository(),
            get_email_notifier(),
            age_days=settings.REMINDER_AGE_DAYS,
            interval_days=settings.REMINDER_INTERVAL_DAYS,
        )
    return _reminder_service
