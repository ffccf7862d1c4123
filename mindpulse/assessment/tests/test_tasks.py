"""Tests for the retest helper and its periodic task."""
import datetime

import pytest
from django.utils import timezone

from mindpulse.assessment.helpers.retest import children_due_for_retest
from mindpulse.assessment.models import AssessmentReport
from mindpulse.assessment.models import AssessmentSession
from mindpulse.assessment.tasks import log_due_retests_task
from mindpulse.assessment.tests.factories import AssessmentSessionFactory
from mindpulse.assessment.tests.factories import ChildFactory


def _finished(child, days_ago, status=AssessmentSession.Status.COMPLETED, retest_days=28):
    ended = timezone.now() - datetime.timedelta(days=days_ago)
    session = AssessmentSessionFactory(
        child=child,
        status=status,
        started_at=ended - datetime.timedelta(minutes=20),
        ended_at=ended,
    )
    if status == AssessmentSession.Status.COMPLETED:
        AssessmentReport.objects.create(
            session=session,
            plan={"primary_focus": "Working Memory", "strategies": [], "retest_days": retest_days},
        )
    return session


@pytest.mark.django_db
class TestChildrenDueForRetest:
    def test_overdue_child_listed(self, child):
        session = _finished(child, days_ago=30)
        due = children_due_for_retest(timezone.now().date())
        assert [item["child_id"] for item in due] == [child.pk]
        assert due[0]["session_id"] == session.pk
        assert due[0]["days_overdue"] == 2

    def test_recent_session_not_due(self, child):
        _finished(child, days_ago=10)
        assert children_due_for_retest(timezone.now().date()) == []

    def test_latest_completed_session_counts(self, child):
        _finished(child, days_ago=60)
        _finished(child, days_ago=5)
        assert children_due_for_retest(timezone.now().date()) == []

    def test_partial_sessions_ignored(self, child):
        _finished(child, days_ago=60, status=AssessmentSession.Status.PARTIAL)
        assert children_due_for_retest(timezone.now().date()) == []

    def test_child_without_sessions(self):
        ChildFactory()
        assert children_due_for_retest(timezone.now().date()) == []


@pytest.mark.django_db
class TestLogDueRetestsTask:
    def test_returns_count(self, child):
        _finished(child, days_ago=40)
        _finished(ChildFactory(), days_ago=3)
        assert log_due_retests_task.call_local() == 1
