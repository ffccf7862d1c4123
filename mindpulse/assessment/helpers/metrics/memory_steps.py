"""Summary metric computation for the MemorySteps span task."""


def compute_memory_steps_summary(trials, sequences=None):
    """
    Compute MemorySteps summary metrics.

    Each trial dict is one sequence and is expected to have:
      correct (bool)  — True if the whole sequence was reproduced in order

    Args:
        trials: list of trial dicts
        sequences: number of sequences presented; defaults to len(trials)

    Returns dict with:
      accuracy           — correct sequences / sequences
      correct_sequences  — count of correctly reproduced sequences
      longest_correct    — length of the longest correct sequence (0 if none)
    """
    if sequences is None:
        sequences = len(trials)
    correct = [t for t in trials if t.get("correct", False)]
    lengths = [len((t.get("flags") or {}).get("target", [])) for t in correct]
    return {
        "accuracy": len(correct) / sequences if sequences else 0.0,
        "correct_sequences": len(correct),
        "longest_correct": max(lengths, default=0),
    }
