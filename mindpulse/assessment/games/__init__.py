from mindpulse.assessment.games.go_nogo import FocusFlowGame
from mindpulse.assessment.games.go_nogo import StopAndGoGame
from mindpulse.assessment.games.memory_steps import MemoryStepsGame
from mindpulse.assessment.games.steady_speed import SteadySpeedGame
from mindpulse.assessment.games.switch_smart import SwitchSmartGame

GAME_CLASSES = {
    game.game_id: game
    for game in (FocusFlowGame, StopAndGoGame, MemoryStepsGame, SteadySpeedGame, SwitchSmartGame)
}
