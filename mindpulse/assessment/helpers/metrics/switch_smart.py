"""Summary metric computation for the SwitchSmart task-switching game."""
import statistics


def compute_switch_smart_summary(trials, total_trials=None):
    """
    Compute SwitchSmart summary metrics from a list of trial dicts.

    Each trial dict is expected to have:
      correct (bool)        — whether the response matched the active rule
      rt_ms (float | None)  — response time in ms, None for an omission
      flags (dict)          — {"rule": "COLOR" | "SHAPE", "is_switch": bool}

    Returns dict with:
      accuracy        — correct trials / total_trials
      switch_cost_ms  — mean RT on switch trials minus mean RT on the rest,
                        valid RTs only; an empty group counts as 0 (may be negative)
      switch_mean_rt, repeat_mean_rt
    """
    if total_trials is None:
        total_trials = len(trials)

    switch_rts = []
    repeat_rts = []
    for t in trials:
        if t.get("rt_ms") is None:
            continue
        if (t.get("flags") or {}).get("is_switch", False):
            switch_rts.append(t["rt_ms"])
        else:
            repeat_rts.append(t["rt_ms"])

    switch_mean = statistics.fmean(switch_rts) if switch_rts else 0.0
    repeat_mean = statistics.fmean(repeat_rts) if repeat_rts else 0.0
    correct = sum(1 for t in trials if t.get("correct", False))

    return {
        "accuracy": correct / (total_trials or 1),
        "switch_cost_ms": switch_mean - repeat_mean,
        "switch_mean_rt": switch_mean,
        "repeat_mean_rt": repeat_mean,
    }
