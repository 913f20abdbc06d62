"""
Issue persistence.

One abstract contract with a Firestore implementation for deployments and
an in-process implementation for local development and tests.
"""

from lokisa.services.repository.base import IssueRepository
from lokisa.services.repository.memory import MemoryIssueRepository
from lokisa.services.repository.registry import get_issue_repository

__all__ = [
    "IssueRepository",
    "MemoryIssueRepository",
    "get_issue_repository",
]
