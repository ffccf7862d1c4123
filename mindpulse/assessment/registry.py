# Registry of the five games in the assessment battery, in play order.
# Each entry holds display metadata plus the default timing configuration handed
# to the game's state machine. Per-game overrides come from
# settings.ASSESSMENT_GAME_OVERRIDES so timings can be tuned without code changes.

from django.conf import settings

FOCUS_FLOW = "G1_FocusFlow"
STOP_AND_GO = "G2_StopAndGo"
MEMORY_STEPS = "G3_MemorySteps"
STEADY_SPEED = "G4_SteadySpeed"
SWITCH_SMART = "G5_SwitchSmart"

GAME_REGISTRY: dict[str, dict] = {
    FOCUS_FLOW: {
        "label": "Focus Flow",
        "index": "asi",
        "instructions": (
            "Tap as fast as you can when you see the blue circle. "
            "Do not tap when you see the red cross."
        ),
        "config": {
            "trials": 120,
            "cycle_ms": 1000,
            "stimulus_ms": 600,
            "gap_ms": 400,
            "go_count": 90,
            "no_go_count": 30,
        },
    },
    STOP_AND_GO: {
        "label": "Stop and Go",
        "index": "ici",
        "instructions": (
            "Tap when you see GO. Hold still when you see STOP."
        ),
        "config": {
            "trials": 100,
            "cycle_ms": 1000,
            "stimulus_ms": 500,
            "gap_ms": 500,
            "go_count": 70,
            "no_go_count": 30,
        },
    },
    MEMORY_STEPS: {
        "label": "Memory Steps",
        "index": "wme",
        "instructions": (
            "Watch the tiles light up in a pattern. "
            "When they stop, tap the tiles in the exact same order."
        ),
        "config": {
            "sequences": 15,
            "tile_count": 9,
            "lead_in_ms": 1000,
            "show_ms": 700,
            "flash_gap_ms": 300,
            "feedback_ms": 1000,
        },
    },
    STEADY_SPEED: {
        "label": "Steady Speed",
        "index": "pci",
        "instructions": (
            "Tap exactly when the star appears. Keep a steady, even rhythm."
        ),
        "config": {
            "trials": 100,
            "gap_ms": 300,
            "max_wait_ms": 2000,
        },
    },
    SWITCH_SMART: {
        "label": "Switch Smart",
        "index": "cfi",
        "instructions": (
            "Sort each shape left or right. The rule at the top switches between "
            "COLOR (blue left, red right) and SHAPE (circle left, square right)."
        ),
        "config": {
            "trials": 120,
            "cycle_ms": 1000,
            "gap_ms": 200,
            "blocks": 6,
            "trials_per_block": 20,
        },
    },
}

GAME_ORDER: list[str] = list(GAME_REGISTRY)


def grade_cap_for_grade(grade: int) -> int:
    """Return the longest MemorySteps sequence offered to a child in *grade*."""
    if grade <= 4:
        return 4
    if grade <= 6:
        return 5
    if grade <= 8:
        return 6
    return 7


def get_game_config(game_id: str, grade: int | None = None) -> dict:
    """
    Return the effective configuration for *game_id*.

    Registry defaults are overlaid with settings.ASSESSMENT_GAME_OVERRIDES[game_id].
    MemorySteps additionally receives the grade-derived ``grade_cap`` when *grade*
    is given.

    Raises KeyError for an unknown game id.
    """
    config = dict(GAME_REGISTRY[game_id]["config"])
    overrides = getattr(settings, "ASSESSMENT_GAME_OVERRIDES", {}) or {}
    config.update(overrides.get(game_id, {}))
    if game_id == MEMORY_STEPS and grade is not None:
        config.setdefault("grade_cap", grade_cap_for_grade(grade))
    return config
