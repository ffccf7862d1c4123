"""
Huey background tasks for assessments.

Each function here is a thin wrapper: gather the input, delegate to a helper,
log the result.
"""
import logging

from huey import crontab
from huey.contrib.djhuey import db_periodic_task

logger = logging.getLogger(__name__)


@db_periodic_task(crontab(hour="6", minute="0"))
def log_due_retests_task() -> int:
    """
    Runs daily at 06:00 UTC.
    Logs every child whose intervention plan's retest interval has elapsed.
    """
    from django.utils import timezone

    from mindpulse.assessment.helpers.retest import children_due_for_retest

    today = timezone.now().date()
    due = children_due_for_retest(today)
    for item in due:
        logger.info(
            "Child %s is due for retest (session %s, due %s, %d day(s) overdue)",
            item["child_id"],
            item["session_id"],
            item["due_on"],
            item["days_overdue"],
        )
    logger.info("log_due_retests_task: %d child(ren) due on %s", len(due), today)
    return len(due)
