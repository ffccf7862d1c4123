"""
SwitchSmart (G5): rule switching.

Trials run in blocks of ``trials_per_block``; the sorting rule flips between
COLOR and SHAPE at every block boundary after the first. Each stimulus is one
of four colour/shape combinations and stays up for ``cycle_ms - gap_ms`` unless
answered sooner; a blank gap of ``gap_ms`` follows either way.

  COLOR rule: BLUE → LEFT,   RED → RIGHT
  SHAPE rule: CIRCLE → LEFT, SQUARE → RIGHT
"""
from __future__ import annotations

from mindpulse.assessment.exceptions import GameConfigError
from mindpulse.assessment.games.base import GameState
from mindpulse.assessment.games.base import GameStateMachine
from mindpulse.assessment.helpers.metrics.switch_smart import compute_switch_smart_summary
from mindpulse.assessment.registry import SWITCH_SMART

COLOR = "COLOR"
SHAPE = "SHAPE"
LEFT = "LEFT"
RIGHT = "RIGHT"

STIMULI = (
    ("BLUE", "CIRCLE"),
    ("BLUE", "SQUARE"),
    ("RED", "CIRCLE"),
    ("RED", "SQUARE"),
)

_RULE_MAP = {
    COLOR: {"BLUE": LEFT, "RED": RIGHT},
    SHAPE: {"CIRCLE": LEFT, "SQUARE": RIGHT},
}


def correct_response(rule: str, stimulus: tuple[str, str]) -> str:
    """Return the side ("LEFT"/"RIGHT") that is correct for *stimulus* under *rule*."""
    color, shape = stimulus
    return _RULE_MAP[rule][color if rule == COLOR else shape]


def is_correct_response(rule: str, stimulus: tuple[str, str], choice: str) -> bool:
    return choice == correct_response(rule, stimulus)


def is_switch_trial(index: int, trials_per_block: int) -> bool:
    return index > 0 and index % trials_per_block == 0


class SwitchSmartGame(GameStateMachine):
    game_id = SWITCH_SMART
    required_fields = ("trials", "cycle_ms", "gap_ms", "blocks", "trials_per_block")

    @classmethod
    def check_config(cls, config):
        if config["blocks"] * config["trials_per_block"] != config["trials"]:
            raise GameConfigError(
                f"{cls.game_id}: blocks x trials_per_block must equal trials "
                f"({config['blocks']} x {config['trials_per_block']} != {config['trials']})"
            )
        if config["gap_ms"] >= config["cycle_ms"]:
            raise GameConfigError(f"{cls.game_id}: gap_ms must be shorter than cycle_ms")

    def prepare(self):
        self.rule = COLOR
        self.stimulus = None
        self.is_switch = False
        self.onset_ms = None
        self._window = None

    def begin_trial(self, index):
        if index >= self.config["trials"]:
            self.finish()
            return
        self.trial_index = index
        self.is_switch = is_switch_trial(index, self.config["trials_per_block"])
        if self.is_switch:
            self.rule = SHAPE if self.rule == COLOR else COLOR
        self.stimulus = self.rng.choice(STIMULI)
        self.onset_ms = self.clock.now()
        self.set_state(GameState.STIMULUS_VISIBLE)
        self._window = self.schedule(
            self.config["cycle_ms"] - self.config["gap_ms"], self.close_trial, None, None
        )

    def accepts_response(self, response_code):
        return self.state is GameState.STIMULUS_VISIBLE and response_code in (LEFT, RIGHT)

    def handle_response(self, choice):
        rt_ms = self.clock.elapsed_since(self.onset_ms)
        self.unschedule(self._window)
        self.close_trial(choice, rt_ms)

    def close_trial(self, choice, rt_ms):
        self._window = None
        self.trial_log.commit(
            self.trial_index,
            self.onset_ms,
            "_".join(self.stimulus),
            rt_ms=rt_ms,
            response_code=choice,
            correct=choice is not None and is_correct_response(self.rule, self.stimulus, choice),
            flags={"rule": self.rule, "is_switch": self.is_switch},
        )
        self.stimulus = None
        self.set_state(GameState.GAP)
        self.schedule(self.config["gap_ms"], self.begin_trial, self.trial_index + 1)

    def compute_metrics(self, trials):
        return compute_switch_smart_summary(trials, total_trials=self.config["trials"])
