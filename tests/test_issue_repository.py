import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from lokisa.core.errors import ConflictError, NotFoundError, ValidationError
from lokisa.models.issue import IssueCreate, IssueStatus
from lokisa.services.repository import MemoryIssueRepository
from lokisa.utils.report_ids import REPORT_ID_LENGTH, generate_report_id


class TestCreate:

    def test_assigns_ids_and_defaults(self, repository, issue_data, clock):
        first = repository.create(issue_data)
        second = repository.create(issue_data)

        assert (first.id, second.id) == (1, 2)
        assert first.report_id != second.report_id
        assert len(first.report_id) == 10
        assert first.status == IssueStatus.REPORTED
        assert first.upvote_count == 0
        assert first.created_at == clock.now
        assert first.notes == "Dark for a week"
        assert first.email_sent_to == []
        assert first.last_reminder_sent_at is None

    def test_accepts_model_input(self, repository, issue_data):
        issue = repository.create(IssueCreate(**issue_data))
        assert repository.get_by_id(issue.id) == issue

    def test_keeps_given_status(self, repository, issue_data):
        issue = repository.create({**issue_data, "status": "in_progress"})
        assert issue.status == IssueStatus.IN_PROGRESS

    @pytest.mark.parametrize("overrides", [
        {"latitude": 91},
        {"longitude": -181},
        {"type": "   "},
        {"address": ""},
        {"status": "closed"},
    ])
    def test_rejects_malformed_input(self, repository, issue_data, overrides):
        with pytest.raises(ValidationError):
            repository.create({**issue_data, **overrides})
        assert repository.list() == []

    @pytest.mark.parametrize("field", ["type", "latitude", "longitude", "address"])
    def test_rejects_missing_required_field(self, repository, issue_data, field):
        data = dict(issue_data)
        del data[field]
        with pytest.raises(ValidationError) as exc_info:
            repository.create(data)
        assert field in exc_info.value.message

    def test_regenerates_colliding_report_id(self, issue_data):
        ids = iter(["AAAAAAAAAA", "AAAAAAAAAA", "BBBBBBBBBB"])
        repository = MemoryIssueRepository(report_id_factory=lambda: next(ids))

        first = repository.create(issue_data)
        second = repository.create(issue_data)

        assert first.report_id == "AAAAAAAAAA"
        assert second.report_id == "BBBBBBBBBB"

    def test_gives_up_after_repeated_collisions(self, issue_data):
        repository = MemoryIssueRepository(report_id_factory=lambda: "SAMESAMESA")
        repository.create(issue_data)
        with pytest.raises(ConflictError):
            repository.create(issue_data)


class TestReads:

    def test_get_missing(self, repository):
        assert repository.get_by_id(404) is None

    def test_list_most_recent_first(self, make_issue, clock, repository):
        old = make_issue(address="First street 1")
        clock.advance(hours=1)
        new = make_issue(address="Second street 2")
        clock.advance(hours=1)
        newest = make_issue(address="Third street 3")

        assert [i.id for i in repository.list()] == [newest.id, new.id, old.id]


class TestCounters:

    def test_increment_and_decrement(self, repository, make_issue):
        issue = make_issue()
        assert repository.increment_upvote_count(issue.id).upvote_count == 1
        assert repository.increment_upvote_count(issue.id).upvote_count == 2
        assert repository.decrement_upvote_count(issue.id).upvote_count == 1

    def test_decrement_floors_at_zero(self, repository, make_issue):
        issue = make_issue()
        assert repository.decrement_upvote_count(issue.id).upvote_count == 0
        assert repository.decrement_upvote_count(issue.id).upvote_count == 0

    def test_missing_issue_is_benign(self, repository):
        assert repository.increment_upvote_count(99) is None
        assert repository.decrement_upvote_count(99) is None


class TestSupports:

    def test_add_support_creates_record_and_counts(self, repository, make_issue):
        issue = make_issue()
        support, updated = repository.add_support(issue.id, "device-a")

        assert support.issue_id == issue.id
        assert support.device_id == "device-a"
        assert updated.upvote_count == 1
        assert repository.is_supported(issue.id, "device-a")
        assert not repository.is_supported(issue.id, "device-b")

    def test_duplicate_support_rejected(self, repository, make_issue):
        issue = make_issue()
        repository.add_support(issue.id, "device-a")
        with pytest.raises(ConflictError):
            repository.add_support(issue.id, "device-a")
        assert repository.get_by_id(issue.id).upvote_count == 1

    def test_support_is_per_issue(self, repository, make_issue):
        first, second = make_issue(), make_issue()
        repository.add_support(first.id, "device-a")
        repository.add_support(second.id, "device-a")
        assert repository.get_by_id(first.id).upvote_count == 1
        assert repository.get_by_id(second.id).upvote_count == 1

    def test_add_support_to_missing_issue(self, repository):
        with pytest.raises(NotFoundError):
            repository.add_support(7, "device-a")

    def test_remove_support(self, repository, make_issue):
        issue = make_issue()
        repository.add_support(issue.id, "device-a")
        updated = repository.remove_support(issue.id, "device-a")

        assert updated.upvote_count == 0
        assert repository.get_support(issue.id, "device-a") is None

    def test_remove_missing_support(self, repository, make_issue):
        issue = make_issue()
        with pytest.raises(NotFoundError):
            repository.remove_support(issue.id, "device-a")
        with pytest.raises(NotFoundError):
            repository.remove_support(999, "device-a")

    def test_concurrent_duplicate_supports(self, repository, make_issue):
        issue = make_issue()

        def attempt(_):
            try:
                repository.add_support(issue.id, "same-device")
                return True
            except ConflictError:
                return False

        with ThreadPoolExecutor(max_workers=16) as pool:
            outcomes = list(pool.map(attempt, range(64)))

        assert outcomes.count(True) == 1
        assert repository.get_by_id(issue.id).upvote_count == 1
        assert repository.count_supports(issue.id) == 1

    def test_concurrent_supports_from_many_devices(self, repository, make_issue):
        issue = make_issue()
        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(lambda n: repository.add_support(issue.id, f"device-{n}"), range(50)))
        assert repository.get_by_id(issue.id).upvote_count == 50
        assert repository.count_supports(issue.id) == 50


class TestUpdates:

    def test_update_status(self, repository, make_issue):
        issue = make_issue()
        assert repository.update_status(issue.id, IssueStatus.RESOLVED).status == IssueStatus.RESOLVED
        assert repository.update_status(999, IssueStatus.RESOLVED) is None

    def test_record_email_delivery(self, repository, make_issue):
        issue = make_issue()
        updated = repository.record_email_delivery(issue.id, ["a@x.org", "b@x.org"], True)
        assert updated.email_sent_to == ["a@x.org", "b@x.org"]
        assert updated.email_delivered is True

    def test_mark_reminder_sent(self, repository, make_issue, clock):
        issue = make_issue()
        assert repository.mark_reminder_sent(issue.id, clock.now).last_reminder_sent_at == clock.now


class TestReportIds:

    def test_short_url_safe_and_distinct(self):
        ids = {generate_report_id() for _ in range(200)}
        assert len(ids) == 200
        for report_id in ids:
            assert len(report_id) == REPORT_ID_LENGTH == 10
            assert re.fullmatch(r"[A-Za-z0-9_-]+", report_id)

    def test_default_factory_feeds_create(self, issue_data):
        issue = MemoryIssueRepository().create(issue_data)
        assert re.fullmatch(r"[A-Za-z0-9_-]{10}", issue.report_id)
