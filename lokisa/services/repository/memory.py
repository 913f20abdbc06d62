"""
In-process issue repository.

Used for local development (USE_MOCK_DB=true) and tests. A single lock
serialises every mutation, which gives the same guarantees the Firestore
transactions give: the (issue_id, device_id) key is checked and inserted
atomically, and counters are read-modify-written under the lock.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import logging
import threading

from lokisa.core.errors import ConflictError, NotFoundError
from lokisa.models.issue import Issue, IssueCreate, IssueStatus, Support
from lokisa.utils.report_ids import generate_report_id
from lokisa.utils.security import mask_device_id
from lokisa.utils.timestamps import utcnow

from .base import MAX_REPORT_ID_ATTEMPTS, IssueRepository, validate_issue_input

logger = logging.getLogger(__name__)


class MemoryIssueRepository(IssueRepository):

    def __init__(
        self,
        report_id_factory: Callable[[], str] = generate_report_id,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._report_id_factory = report_id_factory
        self._clock = clock
        self._lock = threading.RLock()
        self._issues: Dict[int, Issue] = {}
        self._report_ids: Dict[str, int] = {}
        self._supports: Dict[Tuple[int, str], Support] = {}
        self._next_issue_id = 1
        self._next_support_id = 1

    # Issues

    def create(self, data: Union[IssueCreate, Dict[str, Any]]) -> Issue:
        payload = validate_issue_input(data)

        with self._lock:
            report_id = self._unused_report_id()
            issue = Issue(
                id=self._next_issue_id,
                report_id=report_id,
                upvote_count=0,
                created_at=self._clock(),
                **payload.model_dump(),
            )
            self._next_issue_id += 1
            self._issues[issue.id] = issue
            self._report_ids[report_id] = issue.id

        logger.info(f"Issue created: id={issue.id} report_id={issue.report_id} type={issue.type}")
        return issue

    def _unused_report_id(self) -> str:
        for _ in range(MAX_REPORT_ID_ATTEMPTS):
            report_id = self._report_id_factory()
            if report_id not in self._report_ids:
                return report_id
            logger.warning(f"Report ID collision on {report_id}, regenerating")
        raise ConflictError("Could not generate a unique report ID")

    def get_by_id(self, issue_id: int) -> Optional[Issue]:
        return self._issues.get(issue_id)

    def list(self) -> List[Issue]:
        with self._lock:
            issues = list(self._issues.values())
        # Ties on created_at fall back to the newer id
        return sorted(issues, key=lambda i: (i.created_at, i.id), reverse=True)

    def _replace(self, issue_id: int, **changes) -> Optional[Issue]:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                return None
            updated = issue.model_copy(update=changes)
            self._issues[issue_id] = updated
            return updated

    def increment_upvote_count(self, issue_id: int) -> Optional[Issue]:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                return None
            return self._replace(issue_id, upvote_count=issue.upvote_count + 1)

    def decrement_upvote_count(self, issue_id: int) -> Optional[Issue]:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                return None
            return self._replace(issue_id, upvote_count=max(0, issue.upvote_count - 1))

    def update_status(self, issue_id: int, status: IssueStatus) -> Optional[Issue]:
        return self._replace(issue_id, status=IssueStatus(status))

    def record_email_delivery(self, issue_id: int, recipients: List[str], delivered: bool) -> Optional[Issue]:
        return self._replace(issue_id, email_sent_to=list(recipients), email_delivered=delivered)

    def mark_reminder_sent(self, issue_id: int, sent_at: datetime) -> Optional[Issue]:
        return self._replace(issue_id, last_reminder_sent_at=sent_at)

    # Supports

    def get_support(self, issue_id: int, device_id: str) -> Optional[Support]:
        return self._supports.get((issue_id, device_id))

    def add_support(self, issue_id: int, device_id: str) -> Tuple[Support, Issue]:
        with self._lock:
            if issue_id not in self._issues:
                raise NotFoundError(f"Issue {issue_id} not found")
            key = (issue_id, device_id)
            if key in self._supports:
                raise ConflictError("You have already supported this issue")

            support = Support(
                id=self._next_support_id,
                issue_id=issue_id,
                device_id=device_id,
                created_at=self._clock(),
            )
            self._next_support_id += 1
            self._supports[key] = support
            issue = self.increment_upvote_count(issue_id)

        logger.info(f"Support added: issue={issue_id} device={mask_device_id(device_id)}")
        return support, issue

    def remove_support(self, issue_id: int, device_id: str) -> Issue:
        with self._lock:
            if issue_id not in self._issues:
                raise NotFoundError(f"Issue {issue_id} not found")
            if self._supports.pop((issue_id, device_id), None) is None:
                raise NotFoundError("No support record found for this issue")
            issue = self.decrement_upvote_count(issue_id)

        logger.info(f"Support removed: issue={issue_id} device={mask_device_id(device_id)}")
        return issue

    def count_supports(self, issue_id: int) -> int:
        with self._lock:
            return sum(1 for (sid, _) in self._supports if sid == issue_id)
