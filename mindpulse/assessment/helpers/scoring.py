"""
Per-game scoring: raw metrics + spectral features → TaskResult metrics and index.

Pure functions; the orchestrator persists what they return.
"""
from __future__ import annotations

from typing import NamedTuple

from mindpulse.assessment.helpers.indices import compute_asi
from mindpulse.assessment.helpers.indices import compute_cfi
from mindpulse.assessment.helpers.indices import compute_ici
from mindpulse.assessment.helpers.indices import compute_pci
from mindpulse.assessment.helpers.indices import compute_wme
from mindpulse.assessment.helpers.metrics.go_nogo import compute_focus_flow_summary
from mindpulse.assessment.helpers.metrics.go_nogo import compute_stop_and_go_summary
from mindpulse.assessment.helpers.metrics.memory_steps import compute_memory_steps_summary
from mindpulse.assessment.helpers.metrics.steady_speed import compute_steady_speed_summary
from mindpulse.assessment.helpers.metrics.switch_smart import compute_switch_smart_summary
from mindpulse.assessment.helpers.signal import spectral_features
from mindpulse.assessment.registry import FOCUS_FLOW
from mindpulse.assessment.registry import MEMORY_STEPS
from mindpulse.assessment.registry import STEADY_SPEED
from mindpulse.assessment.registry import STOP_AND_GO
from mindpulse.assessment.registry import SWITCH_SMART

# SteadySpeed has no fixed cycle; its sampling interval is approximated as
# gap_ms + mean RT, falling back to this RT when no response was made.
DEFAULT_STEADY_SPEED_RT_MS = 300


class GameScore(NamedTuple):
    game_id: str
    index_name: str
    index_value: float
    task_metrics: dict


# Maps game_id → server-side raw metric compute function
_METRIC_COMPUTERS = {
    FOCUS_FLOW: lambda trials, config: compute_focus_flow_summary(
        trials, go_count=config.get("go_count"), no_go_count=config.get("no_go_count")
    ),
    STOP_AND_GO: lambda trials, config: compute_stop_and_go_summary(
        trials, no_go_count=config.get("no_go_count")
    ),
    MEMORY_STEPS: lambda trials, config: compute_memory_steps_summary(
        trials, sequences=config.get("sequences")
    ),
    STEADY_SPEED: lambda trials, config: compute_steady_speed_summary(trials),
    SWITCH_SMART: lambda trials, config: compute_switch_smart_summary(
        trials, total_trials=config.get("trials")
    ),
}


def compute_game_metrics(game_id: str, trials: list, config: dict) -> dict:
    """Recompute a game's raw metrics from its trial dicts. Raises KeyError for unknown games."""
    return _METRIC_COMPUTERS[game_id](trials, config)


def _rts(trials):
    return [t.get("rt_ms") for t in trials]


def _score_focus_flow(trials, raw_metrics, config):
    features = spectral_features(_rts(trials), config["cycle_ms"])
    index = compute_asi(raw_metrics["miss_rate"], features["r_l"], features["r_m"])
    metrics = {
        "miss_rate": raw_metrics["miss_rate"],
        "commission_rate": raw_metrics["commission_rate"],
        **features,
    }
    return "asi", index, metrics


def _score_stop_and_go(trials, raw_metrics, config):
    features = spectral_features(_rts(trials), config["cycle_ms"])
    index = compute_ici(raw_metrics["commission_rate"], features["r_h"])
    return "ici", index, {"commission_rate": raw_metrics["commission_rate"], **features}


def _score_memory_steps(trials, raw_metrics, config):
    return "wme", compute_wme(raw_metrics["accuracy"]), {"accuracy": raw_metrics["accuracy"]}


def _score_steady_speed(trials, raw_metrics, config):
    cycle_ms = config["gap_ms"] + (raw_metrics.get("mean_rt") or DEFAULT_STEADY_SPEED_RT_MS)
    features = spectral_features(_rts(trials), cycle_ms)
    return "pci", compute_pci(raw_metrics["cv"], features["r_h"]), features


def _score_switch_smart(trials, raw_metrics, config):
    features = spectral_features(_rts(trials), config["cycle_ms"])
    metrics = {
        "switch_cost_ms": raw_metrics["switch_cost_ms"],
        "accuracy": raw_metrics["accuracy"],
        **features,
    }
    return "cfi", compute_cfi(raw_metrics["switch_cost_ms"]), metrics


_SCORERS = {
    FOCUS_FLOW: _score_focus_flow,
    STOP_AND_GO: _score_stop_and_go,
    MEMORY_STEPS: _score_memory_steps,
    STEADY_SPEED: _score_steady_speed,
    SWITCH_SMART: _score_switch_smart,
}


def score_game(game_id: str, trials: list, raw_metrics: dict, config: dict) -> GameScore:
    """
    Score one completed game.

    Runs the RT pipeline on the trials' ``rt_ms`` values for every game except
    MemorySteps, then applies that game's index formula.

    Returns a GameScore whose ``task_metrics`` holds the TaskResult fields the
    game reports (a subset of r_l, r_m, r_h, fpeak, slope, miss_rate,
    commission_rate, accuracy, switch_cost_ms).
    """
    index_name, index_value, task_metrics = _SCORERS[game_id](trials, raw_metrics, config)
    return GameScore(game_id, index_name, index_value, task_metrics)
