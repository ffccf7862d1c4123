"""
Django ORM persistence for assessment sessions.

The orchestrator talks to storage only through DjangoAssessmentStore so the
session lifecycle can be exercised against a stub store in tests.
"""
import logging

from django.db import transaction
from django.utils import timezone

from mindpulse.assessment.exceptions import SessionStateError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("asi", "ici", "wme", "pci", "cfi")


class DjangoAssessmentStore:
    def create_session(self, child_id, app_version=None, config_version=None):
        from mindpulse.assessment.models import AssessmentSession  # local import avoids circular

        session = AssessmentSession.objects.create(
            child_id=child_id,
            app_version=app_version or "",
            config_version=config_version or "",
        )
        logger.info("Created session %s for child %s", session.id, child_id)
        return session

    def append_trials(self, session_id, trials) -> int:
        """Batch-insert one game's trial dicts. Returns the number of rows written."""
        from mindpulse.assessment.models import Trial

        rows = [
            Trial(
                session_id=session_id,
                game_id=t["game_id"],
                trial_index=t["trial_index"],
                trial_start_ms=t["trial_start_ms"],
                stimulus_type=t["stimulus_type"],
                rt_ms=t.get("rt_ms"),
                response_code=t.get("response_code"),
                correct=t.get("correct"),
                flags=t.get("flags"),
            )
            for t in trials
        ]
        with transaction.atomic():
            Trial.objects.bulk_create(rows)
        return len(rows)

    def upsert_task_result(self, session_id, game_id, metrics):
        from mindpulse.assessment.models import TaskResult

        task_result, _ = TaskResult.objects.update_or_create(
            session_id=session_id,
            game_id=game_id,
            defaults=dict(metrics),
        )
        return task_result

    def record_game(self, session_id, game_id, trials, metrics):
        """
        Store one played game: its trial batch and its TaskResult, atomically.

        Trials already stored for *game_id* in this session are replaced, so a
        replayed game leaves exactly the rows of the latest play behind.
        """
        from mindpulse.assessment.models import Trial

        with transaction.atomic():
            replaced, _ = Trial.objects.filter(session_id=session_id, game_id=game_id).delete()
            if replaced:
                logger.warning("Replacing %d stored %s trial(s) for session %s", replaced, game_id, session_id)
            self.append_trials(session_id, trials)
            return self.upsert_task_result(session_id, game_id, metrics)

    def finalize(self, session_id, status, report=None, profile_indices=None):
        """
        Close a session in a single transaction.

        Sets status and ended_at, upserts the AssessmentReport with *report* as
        its plan and appends a CognitiveProfile built from *profile_indices*
        (asi, ici, wme, pci, cfi and priority_domain). The report and the
        profile are written together or not at all.

        Raises SessionStateError if the session is already finalized.
        """
        from mindpulse.assessment.models import AssessmentReport
        from mindpulse.assessment.models import AssessmentSession
        from mindpulse.assessment.models import CognitiveProfile

        if status == AssessmentSession.Status.IN_PROGRESS:
            raise ValueError("finalize() needs a terminal status")
        if (report is None) != (profile_indices is None):
            raise ValueError("report and profile_indices must be given together")

        with transaction.atomic():
            session = AssessmentSession.objects.select_for_update().get(pk=session_id)
            if session.is_finalized:
                raise SessionStateError(f"Session {session_id} is already {session.status}")

            session.status = status
            session.ended_at = timezone.now()
            session.save(update_fields=["status", "ended_at"])

            if report is not None:
                AssessmentReport.objects.update_or_create(session=session, defaults={"plan": report})
                CognitiveProfile.objects.create(
                    child_id=session.child_id,
                    session=session,
                    priority_domain=profile_indices["priority_domain"],
                    **{name: profile_indices[name] for name in PROFILE_FIELDS},
                )
        logger.info("Finalized session %s as %s", session_id, status)
        return session

    def load_task_results(self, session_id) -> list:
        from mindpulse.assessment.models import TaskResult

        return list(TaskResult.objects.filter(session_id=session_id).order_by("created_at", "id"))

    def get_child_history(self, child_id, limit=3) -> list:
        """Latest *limit* sessions for a child, newest first, with report and task results."""
        from mindpulse.assessment.models import AssessmentSession

        qs = (
            AssessmentSession.objects.filter(child_id=child_id)
            .select_related("report")
            .prefetch_related("task_results")
            .order_by("-started_at")
        )
        return list(qs[:limit])
