"""
SteadySpeed (G4): response-driven simple reaction time.

Each trial waits ``gap_ms`` with a blank screen, then shows the stimulus and
opens a response window of ``max_wait_ms``. A response records the RT and the
next trial starts at once; a timeout records a miss and moves on.
"""
from __future__ import annotations

from mindpulse.assessment.games.base import GameState
from mindpulse.assessment.games.base import GameStateMachine
from mindpulse.assessment.helpers.metrics.steady_speed import compute_steady_speed_summary
from mindpulse.assessment.registry import STEADY_SPEED

STIMULUS = "SIMPLE_RT"
TAP = "TAP"


class SteadySpeedGame(GameStateMachine):
    game_id = STEADY_SPEED
    required_fields = ("trials", "gap_ms", "max_wait_ms")

    def prepare(self):
        self.onset_ms = None
        self._timeout = None

    def begin_trial(self, index):
        if index >= self.config["trials"]:
            self.finish()
            return
        self.trial_index = index
        self.onset_ms = None
        self.set_state(GameState.GAP)
        self.schedule(self.config["gap_ms"], self.show_stimulus)

    def show_stimulus(self):
        self.onset_ms = self.clock.now()
        self.set_state(GameState.STIMULUS_VISIBLE)
        self._timeout = self.schedule(self.config["max_wait_ms"], self.response_timeout)

    def accepts_response(self, response_code):
        return self.state is GameState.STIMULUS_VISIBLE

    def handle_response(self, response_code):
        rt_ms = self.clock.elapsed_since(self.onset_ms)
        self.unschedule(self._timeout)
        self._timeout = None
        self.trial_log.commit(
            self.trial_index,
            self.onset_ms,
            STIMULUS,
            rt_ms=rt_ms,
            response_code=response_code or TAP,
            correct=True,
        )
        self.begin_trial(self.trial_index + 1)

    def response_timeout(self):
        self._timeout = None
        self.trial_log.commit(self.trial_index, self.onset_ms, STIMULUS, correct=False)
        self.begin_trial(self.trial_index + 1)

    def compute_metrics(self, trials):
        return compute_steady_speed_summary(trials)
