"""
Shared trial-cycle machinery for the five assessment games.

A game is an explicit state machine driven by callbacks on a scheduler
(see :mod:`timing`). Stimulus onset, gap end and response timeouts are all
scheduled callbacks; the machine does nothing between them. Responses arrive
through :meth:`GameStateMachine.respond`, normally via an :class:`InputRouter`,
and are accepted only while the current trial's response window is open.

Trials are buffered in a :class:`TrialLog` and emitted once, as a batch, in the
:class:`GameOutcome` produced on reaching ``DONE``.
"""
from __future__ import annotations

import asyncio
import dataclasses
import enum
import logging
import random
from collections.abc import Mapping
from typing import Any, Callable, NamedTuple

from mindpulse.assessment.exceptions import GameConfigError
from mindpulse.assessment.exceptions import GameStateError

logger = logging.getLogger(__name__)


class GameState(enum.Enum):
    NOT_STARTED = "not_started"
    PLAYBACK = "playback"
    STIMULUS_VISIBLE = "stimulus_visible"
    WAITING = "waiting"
    GAP = "gap"
    DONE = "done"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({GameState.DONE, GameState.CANCELLED})


@dataclasses.dataclass(frozen=True)
class TrialRecord:
    game_id: str
    trial_index: int
    trial_start_ms: float
    stimulus_type: str
    rt_ms: float | None = None
    response_code: str | None = None
    correct: bool | None = None
    flags: dict | None = None

    def as_dict(self) -> dict:
        return dataclasses.asdict(self)


class TrialLog:
    """Append-only trial buffer keyed by trial_index; each index is written once."""

    def __init__(self, game_id: str):
        self.game_id = game_id
        self._records: dict[int, TrialRecord] = {}

    def commit(self, trial_index: int, trial_start_ms: float, stimulus_type: str, **fields) -> TrialRecord:
        if trial_index < 0:
            raise ValueError(f"trial_index must be >= 0, got {trial_index}")
        if trial_index in self._records:
            raise ValueError(f"{self.game_id}: trial {trial_index} has already been recorded")
        record = TrialRecord(
            game_id=self.game_id,
            trial_index=trial_index,
            trial_start_ms=trial_start_ms,
            stimulus_type=stimulus_type,
            **fields,
        )
        self._records[trial_index] = record
        return record

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return (self._records[i] for i in sorted(self._records))

    def __contains__(self, trial_index: int) -> bool:
        return trial_index in self._records

    def as_dicts(self) -> list[dict]:
        return [record.as_dict() for record in self]


class GameOutcome(NamedTuple):
    game_id: str
    trials: list[dict]
    metrics: dict


class InputRouter:
    """
    Forwards participant responses to the one game that currently owns input.

    A game acquires the router when it starts and releases it when it finishes or
    is cancelled, so input can never leak from one game into another.
    """

    def __init__(self):
        self._active: GameStateMachine | None = None

    @property
    def active(self) -> GameStateMachine | None:
        return self._active

    def acquire(self, game: GameStateMachine) -> None:
        if self._active is not None and self._active is not game:
            raise GameStateError(
                f"Input is owned by {self._active.game_id}; {game.game_id} cannot start"
            )
        self._active = game

    def release(self, game: GameStateMachine) -> None:
        if self._active is game:
            self._active = None

    def dispatch(self, response_code: Any = None) -> bool:
        """Deliver a response; return True if a game accepted it."""
        if self._active is None:
            logger.debug("Dropped response %r: no game owns input", response_code)
            return False
        return self._active.respond(response_code)


class GameStateMachine:
    """
    Base class for a timed game.

    Subclasses set ``game_id`` and ``required_fields`` and implement
    ``prepare``, ``begin_trial``, ``accepts_response``, ``handle_response`` and
    ``compute_metrics``. Timers must be registered through :meth:`schedule` so
    :meth:`cancel` can clear them.
    """

    game_id: str = ""
    # Config fields that must be present as positive integers.
    required_fields: tuple[str, ...] = ()

    def __init__(
        self,
        config: Mapping,
        scheduler,
        input_router: InputRouter | None = None,
        rng: random.Random | None = None,
        on_complete: Callable[[GameOutcome], None] | None = None,
        listener: Callable[[GameStateMachine], None] | None = None,
    ):
        self.config = self.validate_config(config)
        self.scheduler = scheduler
        self.clock = scheduler.clock
        self.input_router = input_router
        self.rng = rng or random.Random()
        self.on_complete = on_complete
        self.listener = listener
        self.state = GameState.NOT_STARTED
        self.trial_index: int | None = None
        self.trial_log = TrialLog(self.game_id)
        self.outcome: GameOutcome | None = None
        self._pending: set = set()

    # ─── configuration ────────────────────────────────────────────────────────

    @classmethod
    def validate_config(cls, config: Mapping) -> dict:
        if not isinstance(config, Mapping):
            raise GameConfigError(f"{cls.game_id}: config must be a mapping, got {type(config).__name__}")
        missing = [name for name in cls.required_fields if config.get(name) is None]
        if missing:
            raise GameConfigError(f"{cls.game_id}: missing config fields: {', '.join(missing)}")
        cleaned = dict(config)
        for name in cls.required_fields:
            _require_positive_int(cls.game_id, name, cleaned[name])
        cls.check_config(cleaned)
        return cleaned

    @classmethod
    def check_config(cls, config: dict) -> None:
        """Hook for cross-field validation; may fill in derived values."""

    # ─── lifecycle ────────────────────────────────────────────────────────────

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def start(self) -> None:
        if self.state is not GameState.NOT_STARTED:
            raise GameStateError(f"{self.game_id} cannot start from state {self.state.value}")
        if self.input_router is not None:
            self.input_router.acquire(self)
        logger.debug("%s started", self.game_id)
        self.prepare()
        self.begin_trial(0)

    def respond(self, response_code: Any = None) -> bool:
        """Offer a response to the open trial; return True if it was recorded."""
        if self.is_finished or not self.accepts_response(response_code):
            logger.debug(
                "%s ignored response %r in state %s", self.game_id, response_code, self.state.value
            )
            return False
        self.handle_response(response_code)
        return True

    def cancel(self) -> None:
        """Abort the game: clear every pending timer and discard the outcome."""
        if self.is_finished:
            return
        for handle in list(self._pending):
            handle.cancel()
        self._pending.clear()
        self._release_input()
        self.set_state(GameState.CANCELLED)
        logger.info("%s cancelled after %d trial(s)", self.game_id, len(self.trial_log))

    def finish(self) -> None:
        self._release_input()
        trials = self.trial_log.as_dicts()
        self.outcome = GameOutcome(self.game_id, trials, self.compute_metrics(trials))
        self.set_state(GameState.DONE)
        logger.info("%s finished with %d trial(s)", self.game_id, len(trials))
        if self.on_complete is not None:
            self.on_complete(self.outcome)

    # ─── helpers for subclasses ───────────────────────────────────────────────

    def set_state(self, state: GameState) -> None:
        self.state = state
        if self.listener is not None:
            self.listener(self)

    def schedule(self, delay_ms: float, callback, *args):
        """Register a timer owned by this game; it never fires once the game has ended."""
        handle = None

        def fire():
            self._pending.discard(handle)
            if self.is_finished:
                return
            callback(*args)

        handle = self.scheduler.call_later(delay_ms, fire)
        self._pending.add(handle)
        return handle

    def unschedule(self, handle) -> None:
        if handle is None:
            return
        handle.cancel()
        self._pending.discard(handle)

    @property
    def pending_timers(self) -> int:
        return len(self._pending)

    def _release_input(self) -> None:
        if self.input_router is not None:
            self.input_router.release(self)

    # ─── subclass contract ────────────────────────────────────────────────────

    def prepare(self) -> None:
        """Generate the stimulus sequence before the first trial."""

    def begin_trial(self, index: int) -> None:
        raise NotImplementedError

    def accepts_response(self, response_code: Any) -> bool:
        raise NotImplementedError

    def handle_response(self, response_code: Any) -> None:
        raise NotImplementedError

    def compute_metrics(self, trials: list[dict]) -> dict:
        raise NotImplementedError


def _require_positive_int(game_id: str, name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise GameConfigError(f"{game_id}: '{name}' must be a positive integer, got {value!r}")


async def play_until_done(game: GameStateMachine) -> GameOutcome:
    """
    Start *game* on an :class:`~timing.AsyncioScheduler` and wait for its outcome.

    Loop callbacks swallow exceptions, so ``on_complete`` runs wrapped here: an
    error it raises (a failed save, say) is re-raised from this coroutine.
    Cancelling the game raises GameStateError.
    """
    done = asyncio.get_running_loop().create_future()
    on_complete = game.on_complete
    listener = game.listener

    def deliver(outcome: GameOutcome) -> None:
        if done.done():
            return
        try:
            if on_complete is not None:
                on_complete(outcome)
        except Exception as exc:
            done.set_exception(exc)
        else:
            done.set_result(outcome)

    def watch(machine: GameStateMachine) -> None:
        if listener is not None:
            listener(machine)
        if machine.state is GameState.CANCELLED and not done.done():
            done.set_exception(GameStateError(f"{machine.game_id} was cancelled"))

    game.on_complete = deliver
    game.listener = watch
    game.start()
    return await done
