"""Unit tests for server-side game metric computation functions."""
import pytest

from mindpulse.assessment.helpers.metrics.go_nogo import compute_focus_flow_summary
from mindpulse.assessment.helpers.metrics.go_nogo import compute_stop_and_go_summary
from mindpulse.assessment.helpers.metrics.memory_steps import compute_memory_steps_summary
from mindpulse.assessment.helpers.metrics.steady_speed import compute_steady_speed_summary
from mindpulse.assessment.helpers.metrics.switch_smart import compute_switch_smart_summary


def _go(rt_ms=None):
    return {"stimulus_type": "GO", "rt_ms": rt_ms}


def _nogo(rt_ms=None):
    return {"stimulus_type": "NOGO", "rt_ms": rt_ms}


# ─────────────────────────────────────────────────────────────────────────────
# FocusFlow / StopAndGo
# ─────────────────────────────────────────────────────────────────────────────

class TestComputeFocusFlowSummary:
    def test_rates_over_configured_counts(self):
        trials = [_go(300), _go(None), _go(350), _nogo(None), _nogo(280)]
        result = compute_focus_flow_summary(trials, go_count=3, no_go_count=2)
        assert result["miss_rate"] == pytest.approx(1 / 3)
        assert result["commission_rate"] == pytest.approx(0.5)
        assert result["misses"] == 1
        assert result["commissions"] == 1

    def test_counts_default_to_trials(self):
        result = compute_focus_flow_summary([_go(None), _go(400), _nogo(None), _nogo(None)])
        assert result["miss_rate"] == pytest.approx(0.5)
        assert result["commission_rate"] == 0.0

    def test_empty_trials(self):
        result = compute_focus_flow_summary([])
        assert result["miss_rate"] == 0.0
        assert result["commission_rate"] == 0.0


class TestComputeStopAndGoSummary:
    def test_only_commissions_reported(self):
        result = compute_stop_and_go_summary([_go(None), _nogo(300), _nogo(None), _nogo(310)], no_go_count=3)
        assert result == {"commission_rate": pytest.approx(2 / 3), "commissions": 2}


# ─────────────────────────────────────────────────────────────────────────────
# MemorySteps
# ─────────────────────────────────────────────────────────────────────────────

class TestComputeMemoryStepsSummary:
    def _trial(self, correct, target):
        return {"correct": correct, "flags": {"target": target, "taps": []}}

    def test_accuracy_over_sequences(self):
        trials = [self._trial(True, [1, 2]), self._trial(False, [1, 2]), self._trial(True, [3, 4, 5])]
        result = compute_memory_steps_summary(trials, sequences=4)
        assert result["accuracy"] == pytest.approx(0.5)
        assert result["correct_sequences"] == 2
        assert result["longest_correct"] == 3

    def test_empty_trials(self):
        result = compute_memory_steps_summary([])
        assert result["accuracy"] == 0.0
        assert result["longest_correct"] == 0


# ─────────────────────────────────────────────────────────────────────────────
# SteadySpeed
# ─────────────────────────────────────────────────────────────────────────────

class TestComputeSteadySpeedSummary:
    def test_mean_and_cv(self):
        result = compute_steady_speed_summary([{"rt_ms": 200}, {"rt_ms": 400}, {"rt_ms": None}])
        assert result["mean_rt"] == pytest.approx(300.0)
        assert result["cv"] == pytest.approx(100.0 / 300.0)
        assert result["valid_trial_count"] == 2

    def test_single_rt_has_zero_cv(self):
        result = compute_steady_speed_summary([{"rt_ms": 250}])
        assert result["cv"] == 0.0

    def test_no_responses(self):
        result = compute_steady_speed_summary([{"rt_ms": None}, {"rt_ms": None}])
        assert result["mean_rt"] == 0.0
        assert result["cv"] == 0.0


# ─────────────────────────────────────────────────────────────────────────────
# SwitchSmart
# ─────────────────────────────────────────────────────────────────────────────

class TestComputeSwitchSmartSummary:
    def _trial(self, rt_ms, is_switch, correct=True):
        return {"rt_ms": rt_ms, "correct": correct, "flags": {"rule": "COLOR", "is_switch": is_switch}}

    def test_switch_cost(self):
        trials = [
            self._trial(600, True),
            self._trial(400, False),
            self._trial(500, False),
            self._trial(None, False, correct=False),
        ]
        result = compute_switch_smart_summary(trials)
        assert result["switch_cost_ms"] == pytest.approx(150.0)
        assert result["accuracy"] == pytest.approx(0.75)

    def test_omissions_count_against_accuracy(self):
        trials = [self._trial(None, False, correct=False)] * 3 + [self._trial(400, False)]
        assert compute_switch_smart_summary(trials, total_trials=4)["accuracy"] == pytest.approx(0.25)

    def test_switch_cost_can_be_negative(self):
        trials = [self._trial(300, True), self._trial(500, False)]
        assert compute_switch_smart_summary(trials)["switch_cost_ms"] == pytest.approx(-200.0)

    def test_no_switch_rts(self):
        trials = [self._trial(None, True, correct=False), self._trial(500, False)]
        assert compute_switch_smart_summary(trials)["switch_cost_ms"] == pytest.approx(-500.0)
