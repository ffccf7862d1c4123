"""Summary metric computation for the GO/NOGO games (FocusFlow and StopAndGo)."""

GO = "GO"
NOGO = "NOGO"


def _count_errors(trials):
    misses = sum(
        1 for t in trials
        if t.get("stimulus_type") == GO and t.get("rt_ms") is None
    )
    commissions = sum(
        1 for t in trials
        if t.get("stimulus_type") == NOGO and t.get("rt_ms") is not None
    )
    return misses, commissions


def compute_focus_flow_summary(trials, go_count=None, no_go_count=None):
    """
    Compute FocusFlow summary metrics from a list of trial dicts.

    Each trial dict is expected to have:
      stimulus_type (str)   — "GO" or "NOGO"
      rt_ms (float | None)  — response time in ms, None when no response was made

    Rates are taken over the configured GO/NOGO counts; when a count is not given
    it is taken from the trials themselves.

    Returns dict with:
      miss_rate        — GO trials without a response / go_count
      commission_rate  — NOGO trials with a response / no_go_count
      misses, commissions
    """
    misses, commissions = _count_errors(trials)
    if go_count is None:
        go_count = sum(1 for t in trials if t.get("stimulus_type") == GO)
    if no_go_count is None:
        no_go_count = sum(1 for t in trials if t.get("stimulus_type") == NOGO)
    return {
        "miss_rate": misses / (go_count or 1),
        "commission_rate": commissions / (no_go_count or 1),
        "misses": misses,
        "commissions": commissions,
    }


def compute_stop_and_go_summary(trials, no_go_count=None):
    """
    Compute StopAndGo summary metrics. Only commission errors are scored.

    Returns dict with:
      commission_rate  — NOGO trials with a response / no_go_count
      commissions
    """
    _, commissions = _count_errors(trials)
    if no_go_count is None:
        no_go_count = sum(1 for t in trials if t.get("stimulus_type") == NOGO)
    return {
        "commission_rate": commissions / (no_go_count or 1),
        "commissions": commissions,
    }
