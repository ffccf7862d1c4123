"""
MemorySteps (G3): spatial span.

For each of ``sequences`` rounds a tile pattern is played back (each tile lit
for ``show_ms`` then dark for ``flash_gap_ms``) and the child then taps the
tiles back. Every tap is checked against the target as a prefix match: the
first wrong tap ends the round as incorrect straight away, and matching the
whole pattern ends it as correct. Pattern length starts at 2, grows by one
every three rounds and never exceeds ``grade_cap``.
"""
from __future__ import annotations

from mindpulse.assessment.exceptions import GameConfigError
from mindpulse.assessment.games.base import GameState
from mindpulse.assessment.games.base import GameStateMachine
from mindpulse.assessment.helpers.metrics.memory_steps import compute_memory_steps_summary
from mindpulse.assessment.registry import MEMORY_STEPS

MIN_LENGTH = 2


def sequence_length(index: int, grade_cap: int) -> int:
    """Target pattern length for the round at *index* (0-based)."""
    return min(MIN_LENGTH + index // 3, grade_cap)


def classify_taps(target, taps) -> bool | None:
    """
    Check *taps* against *target* as a prefix.

    Returns False as soon as any tap differs, True once the full target has been
    matched, and None while the taps so far are a correct but incomplete prefix.
    """
    for position, tile in enumerate(taps):
        if position >= len(target) or tile != target[position]:
            return False
    if len(taps) == len(target):
        return True
    return None


class MemoryStepsGame(GameStateMachine):
    game_id = MEMORY_STEPS
    required_fields = (
        "sequences",
        "grade_cap",
        "tile_count",
        "lead_in_ms",
        "show_ms",
        "flash_gap_ms",
        "feedback_ms",
    )

    @classmethod
    def check_config(cls, config):
        if config["grade_cap"] < MIN_LENGTH:
            raise GameConfigError(f"{cls.game_id}: grade_cap must be at least {MIN_LENGTH}")
        if config["tile_count"] < 2:
            raise GameConfigError(f"{cls.game_id}: tile_count must be at least 2")
        max_input_ms = config.get("max_input_ms")
        if max_input_ms is not None and (
            isinstance(max_input_ms, bool) or not isinstance(max_input_ms, int) or max_input_ms <= 0
        ):
            raise GameConfigError(f"{cls.game_id}: 'max_input_ms' must be a positive integer or None")

    def prepare(self):
        self.current_pattern = []
        self.active_tile = None
        self.taps = []
        self.input_opened_ms = None
        self.last_step_ms = None
        self._input_timer = None

    def begin_trial(self, index):
        if index >= self.config["sequences"]:
            self.finish()
            return
        self.trial_index = index
        length = sequence_length(index, self.config["grade_cap"])
        self.current_pattern = [self.rng.randrange(self.config["tile_count"]) for _ in range(length)]
        self.taps = []
        self.active_tile = None
        self.set_state(GameState.PLAYBACK)
        self.schedule(self.config["lead_in_ms"], self.flash_step, 0)

    def flash_step(self, step):
        if step >= len(self.current_pattern):
            self.open_input()
            return
        self.active_tile = self.current_pattern[step]
        self.set_state(GameState.PLAYBACK)
        self.schedule(self.config["show_ms"], self.clear_step, step)

    def clear_step(self, step):
        self.active_tile = None
        self.set_state(GameState.PLAYBACK)
        self.schedule(self.config["flash_gap_ms"], self.flash_step, step + 1)

    def open_input(self):
        self.input_opened_ms = self.last_step_ms = self.clock.now()
        self.set_state(GameState.WAITING)
        if self.config.get("max_input_ms"):
            self._input_timer = self.schedule(self.config["max_input_ms"], self.input_timeout)

    def accepts_response(self, response_code):
        return (
            self.state is GameState.WAITING
            and isinstance(response_code, int)
            and not isinstance(response_code, bool)
            and 0 <= response_code < self.config["tile_count"]
        )

    def handle_response(self, tile):
        rt_ms = self.clock.elapsed_since(self.last_step_ms)
        self.last_step_ms = self.clock.now()
        self.taps.append(tile)
        verdict = classify_taps(self.current_pattern, self.taps)
        if verdict is not None:
            self.close_round(correct=verdict, rt_ms=rt_ms)

    def input_timeout(self):
        self._input_timer = None
        self.close_round(correct=False, rt_ms=None)

    def close_round(self, correct, rt_ms):
        self.unschedule(self._input_timer)
        self._input_timer = None
        self.trial_log.commit(
            self.trial_index,
            self.input_opened_ms,
            f"length_{len(self.current_pattern)}",
            rt_ms=rt_ms,
            response_code="-".join(str(tile) for tile in self.taps) or None,
            correct=correct,
            flags={"target": list(self.current_pattern), "taps": list(self.taps)},
        )
        self.set_state(GameState.GAP)
        self.schedule(self.config["feedback_ms"], self.begin_trial, self.trial_index + 1)

    def compute_metrics(self, trials):
        return compute_memory_steps_summary(trials, sequences=self.config["sequences"])
