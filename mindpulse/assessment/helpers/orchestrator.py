"""
Session lifecycle: runs the five games in order and finalizes the session.

  CREATED ──start──► IN_PROGRESS ──game 5──► FINALIZING ──► COMPLETED
                          │                      │
                          │ mark_partial()       └─ failure ─► IN_PROGRESS
                          ▼
                       PARTIAL

Each completed game is persisted before the next one starts: its trial batch
and its TaskResult (metrics plus index) in one transaction. Persistence errors
are logged and re-raised; nothing is retried and the session stays in
progress, so the caller can replay the failed game, resume later or mark the
session partial. A replay replaces whatever trials the game had stored.
"""
import enum
import logging

from django.conf import settings

from mindpulse.assessment.exceptions import SessionStateError
from mindpulse.assessment.games import GAME_CLASSES
from mindpulse.assessment.helpers.indices import priority_domain
from mindpulse.assessment.helpers.prescription import generate_plan
from mindpulse.assessment.helpers.scoring import score_game
from mindpulse.assessment.helpers.store import DjangoAssessmentStore
from mindpulse.assessment.registry import GAME_ORDER
from mindpulse.assessment.registry import GAME_REGISTRY
from mindpulse.assessment.registry import get_game_config

logger = logging.getLogger(__name__)


class OrchestratorState(enum.Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    PARTIAL = "partial"


class SessionOrchestrator:
    def __init__(self, child, store=None):
        self.child = child
        self.store = store or DjangoAssessmentStore()
        self.state = OrchestratorState.CREATED
        self.session = None
        self.indices: dict[str, float] = {}
        self.completed_games: list[str] = []
        self.plan: dict | None = None

    # ─── lifecycle ────────────────────────────────────────────────────────────

    @classmethod
    def begin(cls, child, app_version=None, config_version=None, store=None):
        """Create an orchestrator and start a new session for *child*."""
        orchestrator = cls(child, store=store)
        orchestrator.start(app_version=app_version, config_version=config_version)
        return orchestrator

    def start(self, app_version=None, config_version=None):
        if self.state is not OrchestratorState.CREATED:
            raise SessionStateError(f"Cannot start a session from state {self.state.value}")
        self.session = self.store.create_session(
            self.child.pk,
            app_version=app_version or settings.ASSESSMENT_APP_VERSION,
            config_version=config_version or settings.ASSESSMENT_CONFIG_VERSION,
        )
        self.state = OrchestratorState.IN_PROGRESS
        logger.info("Session %s started for child %s", self.session.pk, self.child.pk)
        return self.session

    @classmethod
    def resume(cls, session, store=None):
        """
        Rebuild an orchestrator for an in-progress *session* from its persisted TaskResults.

        Games are taken as completed in registry order; indices come from the
        stored ``index_value`` of each TaskResult.
        """
        if session.is_finalized:
            raise SessionStateError(f"Session {session.pk} is already {session.status}")
        orchestrator = cls(session.child, store=store)
        orchestrator.session = session
        orchestrator.state = OrchestratorState.IN_PROGRESS

        stored = {result.game_id: result for result in orchestrator.store.load_task_results(session.pk)}
        for game_id in GAME_ORDER:
            result = stored.get(game_id)
            if result is None:
                break
            orchestrator.completed_games.append(game_id)
            orchestrator.indices[GAME_REGISTRY[game_id]["index"]] = result.index_value
        logger.info(
            "Session %s resumed after %d game(s)", session.pk, len(orchestrator.completed_games)
        )
        return orchestrator

    @property
    def next_game_id(self) -> str | None:
        remaining = GAME_ORDER[len(self.completed_games):]
        return remaining[0] if remaining else None

    def game_config(self, game_id: str) -> dict:
        return get_game_config(game_id, grade=self.child.grade)

    def build_game(self, scheduler, game_id=None, **kwargs):
        """
        Construct the state machine for *game_id* (default: the next game).

        Unless an ``on_complete`` callback is passed, the game reports its
        outcome straight back to :meth:`on_game_complete`.
        """
        game_id = game_id or self.next_game_id
        if game_id is None:
            raise SessionStateError("All games have been played")
        kwargs.setdefault("on_complete", self._handle_outcome)
        return GAME_CLASSES[game_id](self.game_config(game_id), scheduler, **kwargs)

    def _handle_outcome(self, outcome):
        self.on_game_complete(outcome.game_id, outcome.trials, outcome.metrics)

    def on_game_complete(self, game_id, trials, raw_metrics):
        """
        Persist and score one finished game; finalize after the last one.

        Returns the GameScore. Raises SessionStateError when the session is not
        in progress or *game_id* is not the next game in order.
        """
        self._require_in_progress()
        expected = self.next_game_id
        if game_id != expected:
            raise SessionStateError(f"Expected {expected}, got {game_id}")

        session_id = self.session.pk
        score = score_game(game_id, trials, raw_metrics, self.game_config(game_id))
        try:
            self.store.record_game(
                session_id,
                game_id,
                trials,
                {**score.task_metrics, "index_value": score.index_value},
            )
        except Exception:
            logger.exception("Failed to persist %s for session %s", game_id, session_id)
            raise

        self.completed_games.append(game_id)
        self.indices[score.index_name] = score.index_value
        logger.info(
            "Session %s: %s scored %s=%.3f", session_id, game_id, score.index_name, score.index_value
        )

        if self.next_game_id is None:
            self.finalize()
        return score

    def finalize(self):
        """Compute the priority domain and plan, then close the session as COMPLETED."""
        self._require_in_progress()
        if self.next_game_id is not None:
            raise SessionStateError(f"Cannot finalize before {self.next_game_id} is played")

        self.state = OrchestratorState.FINALIZING
        domain = priority_domain(self.indices)
        plan = generate_plan(domain)
        try:
            self.store.finalize(
                self.session.pk,
                self.session.Status.COMPLETED,
                report=plan,
                profile_indices={**self.indices, "priority_domain": domain},
            )
        except Exception:
            self.state = OrchestratorState.IN_PROGRESS
            logger.exception("Finalize failed for session %s", self.session.pk)
            raise

        self.plan = plan
        self.state = OrchestratorState.COMPLETED
        logger.info("Session %s completed; priority domain %s", self.session.pk, domain)
        return plan

    def mark_partial(self):
        """Close an abandoned session as PARTIAL. No report or profile is written."""
        self._require_in_progress()
        try:
            self.store.finalize(self.session.pk, self.session.Status.PARTIAL)
        except Exception:
            logger.exception("Could not mark session %s partial", self.session.pk)
            raise
        self.state = OrchestratorState.PARTIAL
        logger.info(
            "Session %s marked partial after %d game(s)", self.session.pk, len(self.completed_games)
        )

    def _require_in_progress(self):
        if self.state is not OrchestratorState.IN_PROGRESS:
            raise SessionStateError(f"Session is {self.state.value}, not in progress")
