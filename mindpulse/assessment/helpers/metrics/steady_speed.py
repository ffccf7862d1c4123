"""Summary metric computation for the SteadySpeed simple reaction time task."""
import statistics


def compute_steady_speed_summary(trials):
    """
    Compute SteadySpeed summary metrics from a list of trial dicts.

    Each trial dict is expected to have:
      rt_ms (float | None)  — response time in ms, None for a timeout

    Returns dict with:
      mean_rt            — mean of valid RTs (0.0 when there are none)
      cv                 — population SD / mean_rt; 0.0 with fewer than 2 valid RTs or a zero mean
      valid_trial_count  — number of trials with a response
    """
    valid_rts = [t["rt_ms"] for t in trials if t.get("rt_ms") is not None]
    mean_rt = statistics.fmean(valid_rts) if valid_rts else 0.0

    cv = 0.0
    if len(valid_rts) > 1 and mean_rt > 0:
        cv = statistics.pstdev(valid_rts, mu=mean_rt) / mean_rt

    return {
        "mean_rt": mean_rt,
        "cv": cv,
        "valid_trial_count": len(valid_rts),
    }
