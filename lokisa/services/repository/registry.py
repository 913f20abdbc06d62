import logging
from typing import Optional

from lokisa.core.settings import settings
from .base import IssueRepository
from .memory import MemoryIssueRepository

logger = logging.getLogger(__name__)

_repository_instance: Optional[IssueRepository] = None


def get_issue_repository() -> IssueRepository:
    """
    Resolve the active issue repository based on settings.

    Rules:
    - USE_MOCK_DB=true: in-process MemoryIssueRepository.
    - Otherwise: FirestoreIssueRepository. Initialization errors propagate;
      there is no silent fallback to memory storage.
    """
    global _repository_instance
    if _repository_instance is not None:
        return _repository_instance

    if settings.USE_MOCK_DB:
        _repository_instance = MemoryIssueRepository()
        logger.info("Issue repository initialized: memory")
        return _repository_instance

    from .firestore_repository import FirestoreIssueRepository

    _repository_instance = FirestoreIssueRepository()
    logger.info("Issue repository initialized: firestore")
    return _repository_instance
