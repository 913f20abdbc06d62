"""
Firestore issue repository.

Collections:
- issues/{id}             issue documents, id is the integer id as a string
- supports/{sha256}       one document per (issue_id, device_id) pair
- report_ids/{report_id}  guard documents enforcing report_id uniqueness
- counters/{name}         monotonic id counters ("issues", "supports")

Every multi-document change runs inside a Firestore transaction. Support
documents are keyed by a hash of the pair, so a concurrent duplicate either
sees the document on retry or fails the create at commit time.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import logging

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from lokisa.config.firebase import get_db
from lokisa.core.errors import ConflictError, NotFoundError
from lokisa.models.issue import Issue, IssueCreate, IssueStatus, Support
from lokisa.utils.report_ids import generate_report_id
from lokisa.utils.security import mask_device_id, support_document_id
from lokisa.utils.timestamps import parse_timestamp, utcnow

from .base import MAX_REPORT_ID_ATTEMPTS, IssueRepository, validate_issue_input

logger = logging.getLogger(__name__)

ISSUES = "issues"
SUPPORTS = "supports"
REPORT_IDS = "report_ids"
COUNTERS = "counters"


class _ReportIdTaken(Exception):
    pass


def _next_counter_value(transaction, counter_ref) -> int:
    snapshot = counter_ref.get(transaction=transaction)
    current = (snapshot.to_dict() or {}).get("value", 0) if snapshot.exists else 0
    return int(current) + 1


def _issue_from_document(data: Dict[str, Any]) -> Issue:
    data = dict(data)
    data["created_at"] = parse_timestamp(data.get("created_at"))
    data["last_reminder_sent_at"] = parse_timestamp(data.get("last_reminder_sent_at"))
    data.setdefault("email_sent_to", [])
    return Issue.model_validate(data)


def _support_from_document(data: Dict[str, Any]) -> Support:
    data = dict(data)
    data["created_at"] = parse_timestamp(data.get("created_at"))
    return Support.model_validate(data)


def _create_issue(transaction, db, payload: Dict[str, Any], report_id: str, now: datetime) -> Dict[str, Any]:
    counter_ref = db.collection(COUNTERS).document(ISSUES)
    guard_ref = db.collection(REPORT_IDS).document(report_id)

    # Reads must happen before writes inside a transaction
    issue_id = _next_counter_value(transaction, counter_ref)
    if guard_ref.get(transaction=transaction).exists:
        raise _ReportIdTaken(report_id)

    document = {
        **payload,
        "id": issue_id,
        "report_id": report_id,
        "upvote_count": 0,
        "created_at": now,
        "email_sent_to": [],
        "email_delivered": False,
        "last_reminder_sent_at": None,
    }
    transaction.set(counter_ref, {"value": issue_id})
    transaction.create(guard_ref, {"issue_id": issue_id})
    transaction.set(db.collection(ISSUES).document(str(issue_id)), document)
    return document


def _adjust_upvotes(transaction, issue_ref, delta: int) -> Optional[Dict[str, Any]]:
    snapshot = issue_ref.get(transaction=transaction)
    if not snapshot.exists:
        return None
    data = snapshot.to_dict()
    data["upvote_count"] = max(0, int(data.get("upvote_count", 0)) + delta)
    transaction.update(issue_ref, {"upvote_count": data["upvote_count"]})
    return data


def _add_support(transaction, db, issue_id: int, device_id: str, now: datetime) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    issue_ref = db.collection(ISSUES).document(str(issue_id))
    support_ref = db.collection(SUPPORTS).document(support_document_id(issue_id, device_id))
    counter_ref = db.collection(COUNTERS).document(SUPPORTS)

    issue_snapshot = issue_ref.get(transaction=transaction)
    if not issue_snapshot.exists:
        raise NotFoundError(f"Issue {issue_id} not found")
    if support_ref.get(transaction=transaction).exists:
        raise ConflictError("You have already supported this issue")
    support_id = _next_counter_value(transaction, counter_ref)

    issue = issue_snapshot.to_dict()
    issue["upvote_count"] = int(issue.get("upvote_count", 0)) + 1
    support = {"id": support_id, "issue_id": issue_id, "device_id": device_id, "created_at": now}

    transaction.set(counter_ref, {"value": support_id})
    transaction.create(support_ref, support)
    transaction.update(issue_ref, {"upvote_count": issue["upvote_count"]})
    return support, issue


def _remove_support(transaction, db, issue_id: int, device_id: str) -> Dict[str, Any]:
    issue_ref = db.collection(ISSUES).document(str(issue_id))
    support_ref = db.collection(SUPPORTS).document(support_document_id(issue_id, device_id))

    issue_snapshot = issue_ref.get(transaction=transaction)
    if not issue_snapshot.exists:
        raise NotFoundError(f"Issue {issue_id} not found")
    if not support_ref.get(transaction=transaction).exists:
        raise NotFoundError("No support record found for this issue")

    issue = issue_snapshot.to_dict()
    issue["upvote_count"] = max(0, int(issue.get("upvote_count", 0)) - 1)
    transaction.delete(support_ref)
    transaction.update(issue_ref, {"upvote_count": issue["upvote_count"]})
    return issue


# Transaction bodies are plain functions; these wrappers add begin/commit/retry
_create_issue_txn = firestore.transactional(_create_issue)
_adjust_upvotes_txn = firestore.transactional(_adjust_upvotes)
_add_support_txn = firestore.transactional(_add_support)
_remove_support_txn = firestore.transactional(_remove_support)


class FirestoreIssueRepository(IssueRepository):

    def __init__(
        self,
        db=None,
        report_id_factory: Callable[[], str] = generate_report_id,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db if db is not None else get_db()
        self._report_id_factory = report_id_factory
        self._clock = clock

    def _issue_ref(self, issue_id: int):
        return self.db.collection(ISSUES).document(str(issue_id))

    def create(self, data: Union[IssueCreate, Dict[str, Any]]) -> Issue:
        payload = validate_issue_input(data).model_dump(mode="json")

        for _ in range(MAX_REPORT_ID_ATTEMPTS):
            report_id = self._report_id_factory()
            try:
                document = _create_issue_txn(self.db.transaction(), self.db, payload, report_id, self._clock())
            except _ReportIdTaken:
                logger.warning(f"Report ID collision on {report_id}, regenerating")
                continue
            except google_exceptions.AlreadyExists:
                # Guard document created by a concurrent writer after our read
                logger.warning(f"Report ID {report_id} claimed concurrently, regenerating")
                continue

            issue = _issue_from_document(document)
            logger.info(f"Issue created: id={issue.id} report_id={issue.report_id} type={issue.type}")
            return issue

        raise ConflictError("Could not generate a unique report ID")

    def get_by_id(self, issue_id: int) -> Optional[Issue]:
        snapshot = self._issue_ref(issue_id).get()
        if not snapshot.exists:
            return None
        return _issue_from_document(snapshot.to_dict())

    def list(self) -> List[Issue]:
        query = self.db.collection(ISSUES).order_by("created_at", direction=firestore.Query.DESCENDING)
        return [_issue_from_document(doc.to_dict()) for doc in query.stream()]

    def increment_upvote_count(self, issue_id: int) -> Optional[Issue]:
        data = _adjust_upvotes_txn(self.db.transaction(), self._issue_ref(issue_id), 1)
        return _issue_from_document(data) if data is not None else None

    def decrement_upvote_count(self, issue_id: int) -> Optional[Issue]:
        data = _adjust_upvotes_txn(self.db.transaction(), self._issue_ref(issue_id), -1)
        return _issue_from_document(data) if data is not None else None

    def _update(self, issue_id: int, changes: Dict[str, Any]) -> Optional[Issue]:
        try:
            self._issue_ref(issue_id).update(changes)
        except google_exceptions.NotFound:
            return None
        return self.get_by_id(issue_id)

    def update_status(self, issue_id: int, status: IssueStatus) -> Optional[Issue]:
        return self._update(issue_id, {"status": IssueStatus(status).value})

    def record_email_delivery(self, issue_id: int, recipients: List[str], delivered: bool) -> Optional[Issue]:
        return self._update(issue_id, {"email_sent_to": list(recipients), "email_delivered": delivered})

    def mark_reminder_sent(self, issue_id: int, sent_at: datetime) -> Optional[Issue]:
        return self._update(issue_id, {"last_reminder_sent_at": sent_at})

    def get_support(self, issue_id: int, device_id: str) -> Optional[Support]:
        snapshot = self.db.collection(SUPPORTS).document(support_document_id(issue_id, device_id)).get()
        if not snapshot.exists:
            return None
        return _support_from_document(snapshot.to_dict())

    def add_support(self, issue_id: int, device_id: str) -> Tuple[Support, Issue]:
        try:
            support, issue = _add_support_txn(self.db.transaction(), self.db, issue_id, device_id, self._clock())
        except google_exceptions.AlreadyExists:
            raise ConflictError("You have already supported this issue")

        logger.info(f"Support added: issue={issue_id} device={mask_device_id(device_id)}")
        return _support_from_document(support), _issue_from_document(issue)

    def remove_support(self, issue_id: int, device_id: str) -> Issue:
        issue = _remove_support_txn(self.db.transaction(), self.db, issue_id, device_id)
        logger.info(f"Support removed: issue={issue_id} device={mask_device_id(device_id)}")
        return _issue_from_document(issue)
