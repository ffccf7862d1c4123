"""
Fixed-cycle GO/NOGO games: FocusFlow (G1) and StopAndGo (G2).

Each trial shows a GO or NOGO stimulus for ``stimulus_ms`` followed by a blank
gap of ``gap_ms``. Responses count only while the stimulus is visible and only
the first one per trial is kept. A trial is closed when its stimulus disappears.
"""
from __future__ import annotations

from mindpulse.assessment.exceptions import GameConfigError
from mindpulse.assessment.games.base import GameState
from mindpulse.assessment.games.base import GameStateMachine
from mindpulse.assessment.helpers.metrics.go_nogo import GO
from mindpulse.assessment.helpers.metrics.go_nogo import NOGO
from mindpulse.assessment.helpers.metrics.go_nogo import compute_focus_flow_summary
from mindpulse.assessment.helpers.metrics.go_nogo import compute_stop_and_go_summary
from mindpulse.assessment.registry import FOCUS_FLOW
from mindpulse.assessment.registry import STOP_AND_GO

TAP = "TAP"


class GoNoGoGame(GameStateMachine):
    required_fields = ("trials", "stimulus_ms", "gap_ms", "go_count", "no_go_count")

    @classmethod
    def check_config(cls, config):
        if config["go_count"] + config["no_go_count"] != config["trials"]:
            raise GameConfigError(
                f"{cls.game_id}: go_count + no_go_count must equal trials "
                f"({config['go_count']} + {config['no_go_count']} != {config['trials']})"
            )
        cycle_ms = config["stimulus_ms"] + config["gap_ms"]
        if config.get("cycle_ms") is None:
            config["cycle_ms"] = cycle_ms
        elif config["cycle_ms"] != cycle_ms:
            raise GameConfigError(
                f"{cls.game_id}: cycle_ms ({config['cycle_ms']}) must equal "
                f"stimulus_ms + gap_ms ({cycle_ms})"
            )

    def prepare(self):
        sequence = [GO] * self.config["go_count"] + [NOGO] * self.config["no_go_count"]
        self.rng.shuffle(sequence)
        self.sequence = sequence
        self.stimulus = None
        self.onset_ms = None
        self.rt_ms = None
        self.response_code = None

    def begin_trial(self, index):
        if index >= self.config["trials"]:
            self.stimulus = None
            self.finish()
            return
        self.trial_index = index
        self.stimulus = self.sequence[index]
        self.rt_ms = None
        self.response_code = None
        self.onset_ms = self.clock.now()
        self.set_state(GameState.STIMULUS_VISIBLE)
        self.schedule(self.config["stimulus_ms"], self.end_stimulus)

    def accepts_response(self, response_code):
        return self.state is GameState.STIMULUS_VISIBLE and self.rt_ms is None

    def handle_response(self, response_code):
        self.rt_ms = self.clock.elapsed_since(self.onset_ms)
        self.response_code = response_code or TAP

    def end_stimulus(self):
        responded = self.rt_ms is not None
        self.trial_log.commit(
            self.trial_index,
            self.onset_ms,
            self.stimulus,
            rt_ms=self.rt_ms,
            response_code=self.response_code,
            correct=responded if self.stimulus == GO else not responded,
        )
        self.stimulus = None
        self.set_state(GameState.GAP)
        self.schedule(self.config["gap_ms"], self.begin_trial, self.trial_index + 1)


class FocusFlowGame(GoNoGoGame):
    """G1: sustained attention: 120 trials, 90 GO / 30 NOGO."""

    game_id = FOCUS_FLOW

    def compute_metrics(self, trials):
        return compute_focus_flow_summary(
            trials, go_count=self.config["go_count"], no_go_count=self.config["no_go_count"]
        )


class StopAndGoGame(GoNoGoGame):
    """G2: impulse control: 100 trials, 70 GO / 30 NOGO; only commissions are scored."""

    game_id = STOP_AND_GO

    def compute_metrics(self, trials):
        return compute_stop_and_go_summary(trials, no_go_count=self.config["no_go_count"])
