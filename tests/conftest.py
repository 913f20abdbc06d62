import os

# Must be set before lokisa.core.settings is imported
os.environ.setdefault("USE_MOCK_DB", "true")
os.environ.setdefault("EMAIL_PROVIDER", "log")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from lokisa.config.municipalities import MUNICIPALITIES
from lokisa.main import app
from lokisa.models.issue import Issue
from lokisa.services.issue_service import IssueService, get_issue_service
from lokisa.services.municipality_resolver import MunicipalityResolver, get_municipality_resolver
from lokisa.services.notifications import DeliveryResult, EmailNotifier
from lokisa.services.reminder_service import ReminderService, get_reminder_service
from lokisa.services.repository import MemoryIssueRepository, get_issue_repository
from lokisa.services.support_service import SupportCoordinator, get_support_coordinator

OVERSIGHT = "waltstrydom@gmail.com"
FALLBACK = "customercare@tshwane.gov.za"

PRETORIA_CENTRAL = (-25.7479, 28.2293)
SANDTON = (-26.1076, 28.0567)
OR_TAMBO = (-26.1367, 28.2411)
CENTURION = (-25.8601, 28.1878)
OUTSIDE = (-24.0, 29.0)


class RecordingNotifier(EmailNotifier):
    """Notifier double that records every call instead of sending."""

    name = "recording"

    def __init__(self, resolver: MunicipalityResolver):
        self.resolver = resolver
        self.sent = []
        self.fail = False
        self.raise_error = False

    def send(self, issue, kind):
        if self.raise_error:
            raise RuntimeError("mail server unreachable")
        recipients = self.resolver.department_emails(issue.coordinate, issue.type)
        self.sent.append((issue, kind))
        if self.fail:
            return DeliveryResult(success=False, error="rejected", recipients=recipients)
        return DeliveryResult(success=True, recipients=recipients)


class Clock:
    """Settable clock for repositories and services."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock(datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def resolver():
    return MunicipalityResolver(MUNICIPALITIES, oversight_email=OVERSIGHT, fallback_email=FALLBACK)


@pytest.fixture
def repository(clock):
    return MemoryIssueRepository(clock=clock)


@pytest.fixture
def notifier(resolver):
    return RecordingNotifier(resolver)


@pytest.fixture
def coordinator(repository, notifier):
    return SupportCoordinator(repository, notifier)


@pytest.fixture
def issue_service(repository, resolver, notifier):
    return IssueService(repository, resolver, notifier)


@pytest.fixture
def reminder_service(repository, notifier, clock):
    return ReminderService(repository, notifier, age_days=45, interval_days=7, clock=clock)


@pytest.fixture
def issue_data():
    return {
        "type": "streetlight",
        "latitude": PRETORIA_CENTRAL[0],
        "longitude": PRETORIA_CENTRAL[1],
        "address": "Church Square, Pretoria Central",
        "notes": "Dark for a week",
    }


@pytest.fixture
def make_issue(repository, issue_data):
    def _make(**overrides) -> Issue:
        return repository.create({**issue_data, **overrides})
    return _make


@pytest.fixture
def client(repository, resolver, coordinator, issue_service, reminder_service):
    app.dependency_overrides[get_issue_repository] = lambda: repository
    app.dependency_overrides[get_municipality_resolver] = lambda: resolver
    app.dependency_overrides[get_support_coordinator] = lambda: coordinator
    app.dependency_overrides[get_issue_service] = lambda: issue_service
    app.dependency_overrides[get_reminder_service] = lambda: reminder_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
