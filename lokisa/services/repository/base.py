from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

from pydantic import ValidationError as PydanticValidationError

from lokisa.core.errors import ValidationError
from lokisa.models.issue import Issue, IssueCreate, IssueStatus, Support

logger = logging.getLogger(__name__)

MAX_REPORT_ID_ATTEMPTS = 5


class IssueRepository(ABC):
    """
    Durable store for issues and supports.

    Contract:
    - Issue ids are unique, monotonic integers assigned by the repository.
    - report_id is unique; a colliding id is regenerated, never reused.
    - At most one support exists per (issue_id, device_id). The storage
      layer enforces this, not the caller's pre-check.
    - upvote_count == number of supports for the issue after every
      mutating call. add_support/remove_support change the support record
      and the counter together.
    - Counter updates are atomic read-modify-writes; decrement floors at 0.
    """

    @abstractmethod
    def create(self, data: Union[IssueCreate, Dict[str, Any]]) -> Issue:
        """Persist a new issue. Raises ValidationError on malformed input."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, issue_id: int) -> Optional[Issue]:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> List[Issue]:
        """All issues, most recent first."""
        raise NotImplementedError

    @abstractmethod
    def increment_upvote_count(self, issue_id: int) -> Optional[Issue]:
        raise NotImplementedError

    @abstractmethod
    def decrement_upvote_count(self, issue_id: int) -> Optional[Issue]:
        raise NotImplementedError

    @abstractmethod
    def get_support(self, issue_id: int, device_id: str) -> Optional[Support]:
        raise NotImplementedError

    @abstractmethod
    def add_support(self, issue_id: int, device_id: str) -> Tuple[Support, Issue]:
        """
        Create the support record and increment the counter together.

        Raises NotFoundError if the issue is missing, ConflictError if the
        device already supports it.
        """
        raise NotImplementedError

    @abstractmethod
    def remove_support(self, issue_id: int, device_id: str) -> Issue:
        """
        Delete the support record and decrement the counter together.

        Raises NotFoundError if the issue or the support record is missing.
        """
        raise NotImplementedError

    @abstractmethod
    def update_status(self, issue_id: int, status: IssueStatus) -> Optional[Issue]:
        raise NotImplementedError

    @abstractmethod
    def record_email_delivery(self, issue_id: int, recipients: List[str], delivered: bool) -> Optional[Issue]:
        raise NotImplementedError

    @abstractmethod
    def mark_reminder_sent(self, issue_id: int, sent_at: datetime) -> Optional[Issue]:
        raise NotImplementedError

    def is_supported(self, issue_id: int, device_id: str) -> bool:
        return self.get_support(issue_id, device_id) is not None


def validate_issue_input(data: Union[IssueCreate, Dict[str, Any]]) -> IssueCreate:
    """Coerce raw input to IssueCreate, re-raising pydantic errors as ValidationError."""
    if isinstance(data, IssueCreate):
        return data
    try:
        return IssueCreate.model_validate(data)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid issue data: {fields}") from e
