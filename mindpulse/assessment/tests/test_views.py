import json
from uuid import uuid4

import pytest
from django.urls import reverse

from mindpulse.assessment.models import AssessmentReport
from mindpulse.assessment.models import AssessmentSession
from mindpulse.assessment.models import Child
from mindpulse.assessment.models import CognitiveProfile
from mindpulse.assessment.models import Trial
from mindpulse.assessment.registry import FOCUS_FLOW
from mindpulse.assessment.registry import GAME_ORDER
from mindpulse.assessment.registry import MEMORY_STEPS
from mindpulse.assessment.registry import STOP_AND_GO
from mindpulse.assessment.tests.factories import AssessmentSessionFactory
from mindpulse.assessment.tests.factories import ChildFactory
from mindpulse.assessment.tests.factories import UserFactory
from mindpulse.assessment.tests.factories import make_trials


def _post(client, name, payload):
    return client.post(reverse(name), data=json.dumps(payload), content_type="application/json")


def _payload(session, game_id=FOCUS_FLOW, **overrides):
    trials = make_trials(game_id)
    for trial in trials:
        trial.pop("game_id")
    payload = {"session_id": str(session.id), "game_id": game_id, "trials": trials}
    payload.update(overrides)
    return payload


@pytest.fixture
def logged_in(client, guardian):
    client.force_login(guardian)
    return client


@pytest.fixture
def session(child):
    return AssessmentSessionFactory(child=child)


# ─────────────────────────────────────────────────────────────────────────────
# ChildCreateView
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestChildCreateView:
    def test_login_required(self, client):
        response = _post(client, "assessment:create_child", {"grade": 5})
        assert response.status_code == 302

    def test_creates_child_for_guardian(self, logged_in, guardian):
        response = _post(logged_in, "assessment:create_child", {"grade": 4})
        assert response.status_code == 201
        child = Child.objects.get(id=response.json()["child_id"])
        assert child.guardian == guardian
        assert child.grade == 4

    @pytest.mark.parametrize("grade", [2, 11, "5", None, True])
    def test_rejects_bad_grade(self, logged_in, grade):
        response = _post(logged_in, "assessment:create_child", {"grade": grade})
        assert response.status_code == 422

    def test_invalid_json(self, logged_in):
        response = logged_in.post(
            reverse("assessment:create_child"), data="{not json", content_type="application/json"
        )
        assert response.status_code == 422


# ─────────────────────────────────────────────────────────────────────────────
# SessionStartView
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestSessionStartView:
    def test_starts_session_with_game_configs(self, logged_in, child):
        response = _post(logged_in, "assessment:start_session", {"child_id": str(child.id), "app_version": "2.0"})
        assert response.status_code == 201
        data = response.json()
        session = AssessmentSession.objects.get(id=data["session_id"])
        assert session.app_version == "2.0"
        assert session.config_version == "test"
        assert [g["game_id"] for g in data["games"]] == GAME_ORDER
        memory = next(g for g in data["games"] if g["game_id"] == MEMORY_STEPS)
        assert memory["config"]["grade_cap"] == 5

    def test_other_guardians_child(self, logged_in):
        other = ChildFactory()
        response = _post(logged_in, "assessment:start_session", {"child_id": str(other.id)})
        assert response.status_code == 403

    def test_unknown_child(self, logged_in):
        response = _post(logged_in, "assessment:start_session", {"child_id": str(uuid4())})
        assert response.status_code == 422

    def test_missing_child_id(self, logged_in):
        response = _post(logged_in, "assessment:start_session", {})
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "overrides",
        [{"app_version": "1" * 21}, {"config_version": "v" * 21}, {"app_version": 2}],
    )
    def test_rejects_bad_versions(self, logged_in, child, overrides):
        payload = {"child_id": str(child.id), **overrides}
        response = _post(logged_in, "assessment:start_session", payload)
        assert response.status_code == 422
        assert not AssessmentSession.objects.exists()

    def test_accepts_version_at_limit(self, logged_in, child):
        payload = {"child_id": str(child.id), "app_version": "1" * 20}
        response = _post(logged_in, "assessment:start_session", payload)
        assert response.status_code == 201


# ─────────────────────────────────────────────────────────────────────────────
# GameSubmitView
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestGameSubmitView:
    def test_first_game_accepted(self, logged_in, session):
        response = _post(logged_in, "assessment:submit_game", _payload(session))
        assert response.status_code == 201
        data = response.json()
        assert data["next_game"] == STOP_AND_GO
        assert data["index_name"] == "asi"
        assert 0.0 <= data["index_value"] <= 1.0
        assert data["status"] == AssessmentSession.Status.IN_PROGRESS
        assert Trial.objects.filter(session=session, game_id=FOCUS_FLOW).count() == 10

    def test_full_session_completes(self, logged_in, session):
        for game_id in GAME_ORDER:
            response = _post(logged_in, "assessment:submit_game", _payload(session, game_id))
            assert response.status_code == 201
        data = response.json()
        assert data["next_game"] is None
        assert data["status"] == AssessmentSession.Status.COMPLETED
        assert data["plan"]["retest_days"] == 28
        assert AssessmentReport.objects.filter(session=session).count() == 1
        assert CognitiveProfile.objects.filter(session=session).count() == 1

    def test_out_of_order(self, logged_in, session):
        response = _post(logged_in, "assessment:submit_game", _payload(session, STOP_AND_GO))
        assert response.status_code == 422

    def test_unknown_game(self, logged_in, session):
        response = _post(logged_in, "assessment:submit_game", _payload(session, game_id="G9_Nope"))
        assert response.status_code == 422

    def test_missing_fields(self, logged_in, session):
        response = _post(logged_in, "assessment:submit_game", {"session_id": str(session.id)})
        assert response.status_code == 422
        assert "game_id" in response.json()["error"]

    @pytest.mark.parametrize(
        "trials",
        [
            "not a list",
            [{"trial_index": -1, "trial_start_ms": 0, "stimulus_type": "GO"}],
            [{"trial_index": 0, "trial_start_ms": "soon", "stimulus_type": "GO"}],
            [{"trial_index": 0, "trial_start_ms": 0}],
            [
                {"trial_index": 0, "trial_start_ms": 0, "stimulus_type": "GO"},
                {"trial_index": 0, "trial_start_ms": 1000, "stimulus_type": "GO"},
            ],
        ],
    )
    def test_malformed_trials(self, logged_in, session, trials):
        response = _post(logged_in, "assessment:submit_game", _payload(session, trials=trials))
        assert response.status_code == 422
        assert not Trial.objects.exists()

    @pytest.mark.parametrize(
        "field, value",
        [
            ("flags", "oops"),
            ("flags", ["rule", "COLOR"]),
            ("flags", {"target": 3}),
            ("correct", "yes"),
            ("correct", 1),
            ("response_code", 7),
            ("response_code", "X" * 101),
            ("stimulus_type", "S" * 51),
        ],
    )
    def test_malformed_trial_fields(self, logged_in, session, field, value):
        for game_id in GAME_ORDER[:2]:
            _post(logged_in, "assessment:submit_game", _payload(session, game_id))
        payload = _payload(session, MEMORY_STEPS)
        for trial in payload["trials"]:
            trial[field] = value
        response = _post(logged_in, "assessment:submit_game", payload)
        assert response.status_code == 422
        assert field in response.json()["error"]
        assert not Trial.objects.filter(game_id=MEMORY_STEPS).exists()

    def test_null_optional_fields_accepted(self, logged_in, session):
        payload = _payload(session)
        for trial in payload["trials"]:
            trial.update(flags=None, correct=None, response_code=None)
        response = _post(logged_in, "assessment:submit_game", payload)
        assert response.status_code == 201

    def test_foreign_session(self, client, session):
        client.force_login(UserFactory())
        response = _post(client, "assessment:submit_game", _payload(session))
        assert response.status_code == 403

    def test_finalized_session(self, logged_in, session):
        AssessmentSession.objects.filter(pk=session.pk).update(status=AssessmentSession.Status.PARTIAL)
        response = _post(logged_in, "assessment:submit_game", _payload(session))
        assert response.status_code == 409

    def test_server_recomputes_metrics(self, logged_in, session):
        payload = _payload(session)
        payload["summary"] = {"miss_rate": 0.0}
        _post(logged_in, "assessment:submit_game", payload)
        result = session.task_results.get(game_id=FOCUS_FLOW)
        # 2 misses over the 90 configured GO trials
        assert result.miss_rate == pytest.approx(2 / 90)


# ─────────────────────────────────────────────────────────────────────────────
# SessionPartialView
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestSessionPartialView:
    def test_marks_partial(self, logged_in, session):
        response = _post(logged_in, "assessment:mark_partial", {"session_id": str(session.id)})
        assert response.status_code == 200
        session.refresh_from_db()
        assert session.status == AssessmentSession.Status.PARTIAL

    def test_second_call_conflicts(self, logged_in, session):
        _post(logged_in, "assessment:mark_partial", {"session_id": str(session.id)})
        response = _post(logged_in, "assessment:mark_partial", {"session_id": str(session.id)})
        assert response.status_code == 409

    def test_foreign_session(self, client, session):
        client.force_login(UserFactory())
        response = _post(client, "assessment:mark_partial", {"session_id": str(session.id)})
        assert response.status_code == 403


# ─────────────────────────────────────────────────────────────────────────────
# ChildHistoryView
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.django_db
class TestChildHistoryView:
    def _url(self, child):
        return reverse("assessment:child_history", kwargs={"child_id": child.id})

    def test_default_limit(self, logged_in, child):
        for _ in range(4):
            AssessmentSessionFactory(child=child)
        response = logged_in.get(self._url(child))
        assert response.status_code == 200
        assert len(response.json()["sessions"]) == 3

    def test_limit_param(self, logged_in, child):
        for _ in range(4):
            AssessmentSessionFactory(child=child)
        response = logged_in.get(self._url(child), {"limit": 1})
        assert len(response.json()["sessions"]) == 1

    def test_bad_limit(self, logged_in, child):
        assert logged_in.get(self._url(child), {"limit": "lots"}).status_code == 422
        assert logged_in.get(self._url(child), {"limit": 0}).status_code == 422

    def test_includes_plan_and_results(self, logged_in, child, session):
        for game_id in GAME_ORDER:
            _post(logged_in, "assessment:submit_game", _payload(session, game_id))
        entry = logged_in.get(self._url(child)).json()["sessions"][0]
        assert entry["status"] == AssessmentSession.Status.COMPLETED
        assert entry["plan"]["retest_days"] == 28
        assert len(entry["task_results"]) == 5

    def test_other_guardians_child(self, logged_in):
        response = logged_in.get(self._url(ChildFactory()))
        assert response.status_code == 404
