"""
Rule-based, non-diagnostic classroom strategies for the priority domain.

The plan is a fixed lookup: no scores beyond the priority domain are consulted
and there is no randomness.
"""

RETEST_DAYS = 28

_FLEXIBILITY = [
    "Provide a concrete 5-minute warning before major transitions.",
    "Use 'First/Then' boards to map out changes in schedule.",
    "Explicitly teach multiple ways to solve a problem to build adaptable thinking.",
]

STRATEGIES: dict[str, list[str]] = {
    "Sustained Attention": [
        "Break large tasks into 15-minute intervals with required physical movement between.",
        "Use visual timers to make the passage of time concrete during independent work.",
        "Provide immediate, high-frequency feedback during challenging tasks.",
    ],
    "Impulse Control": [
        "Implement 'Stop-Think-Act' verbalization before answering in class.",
        "Provide a quiet fidget tool to channel physical restlessness during prolonged listening.",
        "Seat near instruction to reduce visual and auditory distractions.",
    ],
    "Working Memory": [
        "Provide multi-step instructions one step at a time, checking for understanding after each.",
        "Use visual checklists for daily routines and complex assignments.",
        "Allow use of a 'memory buddy' or reference card for key formulas and rules.",
    ],
    "Processing Speed": [
        "Reduce volume of repetitive work; prioritize mastery over completion speed.",
        "Provide extended time for complex reading or writing tasks.",
        "Allow verbal responses or audio recordings in place of extensive written work.",
    ],
    "Cognitive Flexibility": _FLEXIBILITY,
}


def generate_plan(priority_domain: str) -> dict:
    """
    Return the intervention plan for *priority_domain*.

    Returns dict with:
      primary_focus  — the priority domain as given
      strategies     — three strategies (Cognitive Flexibility list for unknown domains)
      retest_days    — always 28
    """
    return {
        "primary_focus": priority_domain,
        "strategies": list(STRATEGIES.get(priority_domain, _FLEXIBILITY)),
        "retest_days": RETEST_DAYS,
    }
