"""
Configuration constants for the progression engine.

All adjustable parameters are centralized here for easy tuning.
Values can be overridden per install through rules.yaml (see
core/engine/config_loader.py) and per programme through its rules.
"""

from typing import Final

# =============================================================================
# DISPLAY ROUNDING
# =============================================================================

DISPLAY_ROUNDING_UNIT: Final[float] = 0.25  # Every stored/displayed weight is a multiple of this

# =============================================================================
# WEIGHT CALCULATION RULES (defaults when a programme leaves them unset)
# =============================================================================

DEFAULT_TRAINING_MAX_PERCENTAGE: Final[float] = 1.0
DEFAULT_ROUNDING_INCREMENT: Final[float] = 2.5  # Smallest plate jump, kg
DEFAULT_MINIMUM_BAR_WEIGHT: Final[float] = 20.0  # Empty barbell, kg

# =============================================================================
# STRUCTURE PARSER
# =============================================================================

DEFAULT_REPS_RANGE: Final[str] = "8-12"
DEFAULT_RANGE_MIN: Final[int] = 8
DEFAULT_RANGE_MAX: Final[int] = 12
DEFAULT_PER_SET_REPS: Final[int] = 5

# =============================================================================
# AI-SUGGESTED WEIGHTS
# =============================================================================

# Source tags that mean "the generator guessed" rather than "the generator knew"
GENERIC_WEIGHT_SOURCES: Final[frozenset[str]] = frozenset({"average_estimate", ""})

# =============================================================================
# PROGRESSION (Section 4.3)
# =============================================================================

LOWER_BODY_INCREMENT: Final[float] = 5.0  # kg per successful session
UPPER_BODY_INCREMENT: Final[float] = 2.5
DELOAD_FAILURE_THRESHOLD: Final[int] = 2  # Consecutive failed sessions before deload
DELOAD_FRACTION: Final[float] = 0.10  # Weight reduction on deload
ALLOWED_MISSED_REPS: Final[int] = 0

MIN_DELOAD_THRESHOLD: Final[int] = 2
MAX_DELOAD_THRESHOLD: Final[int] = 3

# =============================================================================
# ESTIMATED 1RM (Section 4.5)
# =============================================================================

BRZYCKI_NUMERATOR: Final[float] = 36.0
BRZYCKI_DENOMINATOR: Final[float] = 37.0
MAX_REPS_FOR_ESTIMATE: Final[int] = 36  # Brzycki denominator hits zero at 37

MIN_RPE_FOR_CONFIDENCE: Final[float] = 6.0
CONFIDENCE_REP_CAP: Final[int] = 15

# =============================================================================
# GENERIC FALLBACK: percentage of 1RM by goal and rep-range midpoint
# Each row: (max_avg_reps, pct_1rm); the last row catches everything above.
# =============================================================================

PERCENT_OF_MAX_BY_GOAL: Final[dict[str, list[tuple[float, float]]]] = {
    "STRENGTH": [(3, 85.0), (5, 80.0), (8, 75.0), (float("inf"), 70.0)],
    "HYPERTROPHY": [(6, 75.0), (10, 70.0), (15, 65.0), (float("inf"), 60.0)],
    "ENDURANCE": [(12, 65.0), (20, 55.0), (float("inf"), 50.0)],
    "GENERAL": [(5, 75.0), (10, 70.0), (15, 65.0), (float("inf"), 60.0)],
}

# =============================================================================
# GENERIC FALLBACK: seed weight (kg) by movement category, no known max
# =============================================================================

SEED_WEIGHTS: Final[dict[str, list[tuple[float, float]]]] = {
    "heavy_compound": [(5, 70.0), (10, 60.0), (float("inf"), 50.0)],
    "medium_compound": [(5, 50.0), (10, 40.0), (float("inf"), 35.0)],
    "light_compound": [(5, 35.0), (10, 30.0), (float("inf"), 25.0)],
    "isolation": [(8, 25.0), (15, 20.0), (float("inf"), 15.0)],
    "bodyweight": [(float("inf"), 0.0)],
    "unknown": [(float("inf"), 45.0)],
}


def lookup_banded(table: list[tuple[float, float]], value: float) -> float:
    """
    Return the value of the first band whose upper bound covers *value*.

    Args:
        table: Ascending list of (upper_bound, result) rows
        value: Value to classify

    Returns:
        Result of the matching band (last row if none match)
    """
    for upper, result in table:
        if value <= upper:
            return result
    return table[-1][1]
