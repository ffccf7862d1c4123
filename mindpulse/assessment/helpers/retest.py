import datetime

from django.db.models import OuterRef
from django.db.models import Subquery


def children_due_for_retest(today: datetime.date) -> list:
    """
    Return the children whose latest completed session is at least its plan's
    ``retest_days`` old on *today*.

    Each item is a dict with child_id, session_id, due_on and days_overdue.
    """
    from mindpulse.assessment.models import AssessmentSession  # local import avoids circular
    from mindpulse.assessment.models import Child

    latest = (
        AssessmentSession.objects.filter(
            child=OuterRef("pk"),
            status=AssessmentSession.Status.COMPLETED,
        )
        .order_by("-ended_at")
        .values("pk")[:1]
    )
    children = Child.objects.annotate(latest_session_id=Subquery(latest)).filter(
        latest_session_id__isnull=False
    )
    sessions = AssessmentSession.objects.select_related("report").in_bulk(
        [child.latest_session_id for child in children]
    )

    due = []
    for child in children:
        session = sessions[child.latest_session_id]
        report = getattr(session, "report", None)
        if report is None or session.ended_at is None:
            continue
        due_on = session.ended_at.date() + datetime.timedelta(days=report.plan.get("retest_days", 0))
        if due_on <= today:
            due.append(
                {
                    "child_id": child.pk,
                    "session_id": session.pk,
                    "due_on": due_on,
                    "days_overdue": (today - due_on).days,
                }
            )
    return due
