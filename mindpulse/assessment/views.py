import json
import logging

from django.conf import settings
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View

from mindpulse.assessment.exceptions import SessionStateError
from mindpulse.assessment.helpers.orchestrator import SessionOrchestrator
from mindpulse.assessment.helpers.scoring import compute_game_metrics
from mindpulse.assessment.helpers.store import DjangoAssessmentStore
from mindpulse.assessment.models import AssessmentSession
from mindpulse.assessment.models import Child
from mindpulse.assessment.models import Trial
from mindpulse.assessment.registry import GAME_ORDER
from mindpulse.assessment.registry import GAME_REGISTRY

logger = logging.getLogger(__name__)

MIN_GRADE = 3
MAX_GRADE = 10


def _parse_json(request):
    try:
        return json.loads(request.body), None
    except (json.JSONDecodeError, ValueError):
        return None, JsonResponse({"error": "Invalid JSON"}, status=422)


def _owned_session(request, session_id):
    """Return (session, None) or (None, error response) for *session_id*."""
    if not session_id:
        return None, JsonResponse({"error": "session_id is required"}, status=422)
    try:
        session = AssessmentSession.objects.select_related("child").get(id=session_id)
    except (AssessmentSession.DoesNotExist, ValueError):
        return None, JsonResponse({"error": "Session not found"}, status=422)
    if session.child.guardian_id != request.user.pk:
        return None, JsonResponse({"error": "Forbidden"}, status=403)
    if session.is_finalized:
        return None, JsonResponse({"error": f"Session already {session.status}"}, status=409)
    return session, None


def _max_length(model, field_name):
    return model._meta.get_field(field_name).max_length


def _clean_trials(game_id, raw_trials):
    """
    Validate submitted trial dicts and stamp them with *game_id*.

    Raises ValueError describing the first malformed trial.
    """
    if not isinstance(raw_trials, list):
        raise ValueError("trials must be a list")
    stimulus_max = _max_length(Trial, "stimulus_type")
    response_max = _max_length(Trial, "response_code")
    cleaned = []
    seen = set()
    for position, trial in enumerate(raw_trials):
        if not isinstance(trial, dict):
            raise ValueError(f"trial {position} is not an object")
        index = trial.get("trial_index")
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ValueError(f"trial {position}: trial_index must be a non-negative integer")
        if index in seen:
            raise ValueError(f"trial {position}: duplicate trial_index {index}")
        seen.add(index)
        start = trial.get("trial_start_ms")
        if isinstance(start, bool) or not isinstance(start, (int, float)):
            raise ValueError(f"trial {position}: trial_start_ms must be a number")
        stimulus_type = trial.get("stimulus_type")
        if not isinstance(stimulus_type, str) or len(stimulus_type) > stimulus_max:
            raise ValueError(f"trial {position}: stimulus_type must be a string of at most {stimulus_max} characters")
        rt_ms = trial.get("rt_ms")
        if rt_ms is not None and (isinstance(rt_ms, bool) or not isinstance(rt_ms, (int, float))):
            raise ValueError(f"trial {position}: rt_ms must be a number or null")
        response_code = trial.get("response_code")
        if response_code is not None and (not isinstance(response_code, str) or len(response_code) > response_max):
            raise ValueError(
                f"trial {position}: response_code must be null or a string of at most {response_max} characters"
            )
        correct = trial.get("correct")
        if correct is not None and not isinstance(correct, bool):
            raise ValueError(f"trial {position}: correct must be a boolean or null")
        flags = trial.get("flags")
        if flags is not None and not isinstance(flags, dict):
            raise ValueError(f"trial {position}: flags must be an object or null")
        if flags is not None and not isinstance(flags.get("target", []), list):
            raise ValueError(f"trial {position}: flags.target must be a list")
        cleaned.append(
            {
                "game_id": game_id,
                "trial_index": index,
                "trial_start_ms": float(start),
                "stimulus_type": stimulus_type,
                "rt_ms": None if rt_ms is None else float(rt_ms),
                "response_code": response_code,
                "correct": correct,
                "flags": flags,
            }
        )
    return sorted(cleaned, key=lambda t: t["trial_index"])


def _serialize_session(session):
    report = getattr(session, "report", None)
    return {
        "session_id": str(session.id),
        "status": session.status,
        "started_at": session.started_at.isoformat(),
        "ended_at": session.ended_at.isoformat() if session.ended_at else None,
        "plan": report.plan if report is not None else None,
        "task_results": [
            {"game_id": result.game_id, "index_value": result.index_value, **result.metrics()}
            for result in session.task_results.all()
        ],
    }


class ChildCreateView(LoginRequiredMixin, View):
    """
    Registers a child under the logged-in guardian.

    POST body: { grade }   (3..10)
    Returns:   201 { child_id, grade }
    """

    def post(self, request):
        data, error = _parse_json(request)
        if error:
            return error
        grade = data.get("grade")
        if isinstance(grade, bool) or not isinstance(grade, int) or not MIN_GRADE <= grade <= MAX_GRADE:
            return JsonResponse(
                {"error": f"grade must be an integer from {MIN_GRADE} to {MAX_GRADE}"},
                status=422,
            )
        child = Child.objects.create(guardian=request.user, grade=grade)
        return JsonResponse({"child_id": str(child.id), "grade": child.grade}, status=201)


class SessionStartView(LoginRequiredMixin, View):
    """
    Starts an assessment session for one of the guardian's children.

    POST body: { child_id, app_version?, config_version? }
    Returns:   201 { session_id, games: [{game_id, label, instructions, config}] }
    """

    def post(self, request):
        data, error = _parse_json(request)
        if error:
            return error
        child_id = data.get("child_id")
        if not child_id:
            return JsonResponse({"error": "child_id is required"}, status=422)
        try:
            child = Child.objects.get(id=child_id)
        except (Child.DoesNotExist, ValueError):
            return JsonResponse({"error": "Child not found"}, status=422)
        if child.guardian_id != request.user.pk:
            return JsonResponse({"error": "Forbidden"}, status=403)

        for field in ("app_version", "config_version"):
            value = data.get(field)
            limit = _max_length(AssessmentSession, field)
            if value is not None and (not isinstance(value, str) or len(value) > limit):
                return JsonResponse(
                    {"error": f"{field} must be a string of at most {limit} characters"},
                    status=422,
                )

        orchestrator = SessionOrchestrator.begin(
            child,
            app_version=data.get("app_version"),
            config_version=data.get("config_version"),
        )
        games = [
            {
                "game_id": game_id,
                "label": GAME_REGISTRY[game_id]["label"],
                "instructions": GAME_REGISTRY[game_id]["instructions"],
                "config": orchestrator.game_config(game_id),
            }
            for game_id in GAME_ORDER
        ]
        return JsonResponse({"session_id": str(orchestrator.session.id), "games": games}, status=201)


class GameSubmitView(LoginRequiredMixin, View):
    """
    Receives one finished game's trials, recomputes its metrics server-side and
    hands them to the session orchestrator.

    Returns:
        201 {"ok": true, "game_id", "index_name", "index_value", "next_game", "status", "plan"}
        422 on validation failure or a game submitted out of order
        403 session belongs to another guardian
        409 session is already finalized
    """

    REQUIRED_FIELDS = frozenset({"session_id", "game_id", "trials"})

    def post(self, request):
        data, error = _parse_json(request)
        if error:
            return error

        missing = self.REQUIRED_FIELDS - set(data.keys())
        if missing:
            return JsonResponse({"error": f"Missing fields: {', '.join(sorted(missing))}"}, status=422)

        game_id = data["game_id"]
        if game_id not in GAME_REGISTRY:
            return JsonResponse({"error": f"Unknown game_id: '{game_id}'"}, status=422)

        session, error = _owned_session(request, data["session_id"])
        if error:
            return error

        try:
            trials = _clean_trials(game_id, data["trials"])
        except ValueError as exc:
            return JsonResponse({"error": str(exc)}, status=422)

        orchestrator = SessionOrchestrator.resume(session)
        if game_id != orchestrator.next_game_id:
            return JsonResponse(
                {"error": f"Expected {orchestrator.next_game_id}, got {game_id}"},
                status=422,
            )

        raw_metrics = compute_game_metrics(game_id, trials, orchestrator.game_config(game_id))
        try:
            score = orchestrator.on_game_complete(game_id, trials, raw_metrics)
        except SessionStateError as exc:
            return JsonResponse({"error": str(exc)}, status=409)

        session.refresh_from_db()
        return JsonResponse(
            {
                "ok": True,
                "game_id": game_id,
                "index_name": score.index_name,
                "index_value": score.index_value,
                "next_game": orchestrator.next_game_id,
                "status": session.status,
                "plan": orchestrator.plan,
            },
            status=201,
        )


class SessionPartialView(LoginRequiredMixin, View):
    """
    Closes an abandoned session as partial.

    POST body: { session_id }
    Returns:   { ok: true, status: "partial" }
    """

    def post(self, request):
        data, error = _parse_json(request)
        if error:
            return error
        session, error = _owned_session(request, data.get("session_id"))
        if error:
            return error
        try:
            SessionOrchestrator.resume(session).mark_partial()
        except SessionStateError as exc:
            return JsonResponse({"error": str(exc)}, status=409)
        return JsonResponse({"ok": True, "status": AssessmentSession.Status.PARTIAL})


class ChildHistoryView(LoginRequiredMixin, View):
    """Latest sessions for a child, newest first, with plan and task results."""

    def get(self, request, child_id):
        child = get_object_or_404(Child, id=child_id, guardian=request.user)
        try:
            limit = int(request.GET.get("limit", settings.ASSESSMENT_HISTORY_LIMIT))
        except ValueError:
            return JsonResponse({"error": "limit must be an integer"}, status=422)
        if limit < 1:
            return JsonResponse({"error": "limit must be at least 1"}, status=422)
        sessions = DjangoAssessmentStore().get_child_history(child.id, limit=limit)
        return JsonResponse(
            {
                "child_id": str(child.id),
                "grade": child.grade,
                "sessions": [_serialize_session(session) for session in sessions],
            }
        )


child_create_view = ChildCreateView.as_view()
session_start_view = SessionStartView.as_view()
game_submit_view = GameSubmitView.as_view()
session_partial_view = SessionPartialView.as_view()
child_history_view = ChildHistoryView.as_view()
