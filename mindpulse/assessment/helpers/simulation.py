"""
Synthetic participant for demos and QA.

SyntheticResponder is attached to a game as its state listener. Whenever a
response window opens it schedules the participant's answer on the game's own
scheduler, so a whole session can be played on virtual time in milliseconds.
"""
import logging
import random

from mindpulse.assessment.games.base import GameState
from mindpulse.assessment.games.base import InputRouter
from mindpulse.assessment.games.switch_smart import LEFT
from mindpulse.assessment.games.switch_smart import RIGHT
from mindpulse.assessment.games.switch_smart import correct_response
from mindpulse.assessment.games.timing import VirtualScheduler
from mindpulse.assessment.helpers.metrics.go_nogo import GO
from mindpulse.assessment.registry import FOCUS_FLOW
from mindpulse.assessment.registry import MEMORY_STEPS
from mindpulse.assessment.registry import STEADY_SPEED
from mindpulse.assessment.registry import STOP_AND_GO
from mindpulse.assessment.registry import SWITCH_SMART

logger = logging.getLogger(__name__)


class SyntheticResponder:
    """
    A plausible but imperfect child.

    *hit_rate* is the chance of answering a GO or SteadySpeed stimulus,
    *commission_rate* the chance of tapping on NOGO, *accuracy* the chance of a
    correct SwitchSmart choice or MemorySteps tap. RTs are Gaussian around
    *mean_rt_ms* and are slower by *switch_cost_ms* on switch trials.
    """

    def __init__(
        self,
        rng=None,
        hit_rate=0.9,
        commission_rate=0.2,
        accuracy=0.9,
        mean_rt_ms=420.0,
        rt_sd_ms=70.0,
        switch_cost_ms=80.0,
    ):
        self.rng = rng or random.Random()
        self.hit_rate = hit_rate
        self.commission_rate = commission_rate
        self.accuracy = accuracy
        self.mean_rt_ms = mean_rt_ms
        self.rt_sd_ms = rt_sd_ms
        self.switch_cost_ms = switch_cost_ms

    def __call__(self, game):
        if game.game_id in (FOCUS_FLOW, STOP_AND_GO):
            if game.state is GameState.STIMULUS_VISIBLE:
                self._go_nogo(game)
        elif game.game_id == STEADY_SPEED:
            if game.state is GameState.STIMULUS_VISIBLE:
                self._steady_speed(game)
        elif game.game_id == SWITCH_SMART:
            if game.state is GameState.STIMULUS_VISIBLE:
                self._switch_smart(game)
        elif game.game_id == MEMORY_STEPS:
            if game.state is GameState.WAITING:
                self._memory_steps(game)

    def draw_rt(self, ceiling_ms, extra_ms=0.0):
        rt = self.rng.gauss(self.mean_rt_ms + extra_ms, self.rt_sd_ms)
        return max(160.0, min(rt, ceiling_ms - 1))

    def _answer(self, game, delay_ms, response_code):
        game.scheduler.call_later(delay_ms, game.input_router.dispatch, response_code)

    def _go_nogo(self, game):
        chance = self.hit_rate if game.stimulus == GO else self.commission_rate
        if self.rng.random() < chance:
            self._answer(game, self.draw_rt(game.config["stimulus_ms"]), "TAP")

    def _steady_speed(self, game):
        if self.rng.random() < self.hit_rate:
            self._answer(game, self.draw_rt(game.config["max_wait_ms"]), "TAP")

    def _switch_smart(self, game):
        window = game.config["cycle_ms"] - game.config["gap_ms"]
        if self.rng.random() >= self.hit_rate:
            return
        choice = correct_response(game.rule, game.stimulus)
        if self.rng.random() >= self.accuracy:
            choice = RIGHT if choice == LEFT else LEFT
        extra = self.switch_cost_ms if game.is_switch else 0.0
        self._answer(game, self.draw_rt(window, extra), choice)

    def _memory_steps(self, game):
        delay = 0.0
        for tile in game.current_pattern:
            delay += self.draw_rt(2000.0)
            if self.rng.random() >= self.accuracy:
                wrong = (tile + 1 + self.rng.randrange(game.config["tile_count"] - 1)) % game.config["tile_count"]
                self._answer(game, delay, wrong)
                return
            self._answer(game, delay, tile)


def play_session(orchestrator, seed=None, responder=None):
    """
    Play every remaining game of *orchestrator*'s session on virtual time.

    Each game gets its own VirtualScheduler and InputRouter. Games report back to
    the orchestrator on completion, so the session is finalized after the last one.
    """
    rng = random.Random(seed)
    responder = responder or SyntheticResponder(rng=random.Random(rng.random()))
    while orchestrator.next_game_id is not None:
        scheduler = VirtualScheduler()
        game = orchestrator.build_game(
            scheduler,
            input_router=InputRouter(),
            rng=random.Random(rng.random()),
            listener=responder,
        )
        game.start()
        scheduler.run_until_idle()
        logger.debug("%s played in %.0f ms of virtual time", game.game_id, scheduler.clock.now())
    return orchestrator
