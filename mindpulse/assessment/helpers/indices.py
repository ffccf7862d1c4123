"""
Cognitive index formulas.

Each index maps one game's raw metrics (and, where used, spectral features)
onto [0, 1], where higher is better. Inputs outside their expected range are
accepted; the clamp keeps every index inside [0, 1].
"""

INDEX_NAMES = ("asi", "ici", "wme", "pci", "cfi")

# Fixed enumeration order; it also breaks ties in priority_domain.
DOMAIN_LABELS = {
    "asi": "Sustained Attention",
    "ici": "Impulse Control",
    "wme": "Working Memory",
    "pci": "Processing Speed",
    "cfi": "Cognitive Flexibility",
}

SWITCH_COST_CEILING_MS = 400.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def compute_asi(miss_rate: float, r_l: float, r_m: float) -> float:
    """Attention Stability Index (FocusFlow)."""
    return clamp(1.0 - (miss_rate * 0.5 + r_l * 0.3 + r_m * 0.2))


def compute_ici(commission_rate: float, r_h: float) -> float:
    """Impulse Control Index (StopAndGo)."""
    return clamp(1.0 - (commission_rate * 0.6 + r_h * 0.4))


def compute_wme(accuracy: float) -> float:
    """Working Memory Efficiency (MemorySteps)."""
    return clamp(accuracy)


def compute_pci(cv: float, r_h: float) -> float:
    """Processing Consistency Index (SteadySpeed)."""
    return clamp(1.0 - (cv * 0.5 + r_h * 0.5))


def compute_cfi(switch_cost_ms: float) -> float:
    """Cognitive Flexibility Index (SwitchSmart)."""
    return clamp(1.0 - switch_cost_ms / SWITCH_COST_CEILING_MS)


def priority_domain(indices: dict) -> str:
    """
    Return the label of the lowest-scoring domain.

    *indices* maps each of asi/ici/wme/pci/cfi to its value. Ties go to the
    domain that comes first in asi, ici, wme, pci, cfi order.
    """
    ranked = sorted(
        ((DOMAIN_LABELS[name], indices[name]) for name in INDEX_NAMES),
        key=lambda pair: pair[1],
    )
    return ranked[0][0]
