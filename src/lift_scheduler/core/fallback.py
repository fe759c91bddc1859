"""
Generic weight estimate for slots with nothing better to go on.

Used as the last step of weight prescription and to seed the first
session of a last-workout programme.

  known max : weight = max × pct(goal, avg_reps) / 100
  no max    : weight = seed(category, avg_reps)
"""

from .config import PERCENT_OF_MAX_BY_GOAL, SEED_WEIGHTS, lookup_banded
from .movements import categorize_exercise
from .weights import round_weight


def percent_of_max_for_reps(avg_reps: float, goal: str = "GENERAL") -> float:
    """
    Working percentage of 1RM for a rep-range midpoint and training goal.

    Args:
        avg_reps: Midpoint of the slot's rep range
        goal: STRENGTH | HYPERTROPHY | ENDURANCE | GENERAL (unknown → GENERAL)

    Returns:
        Percentage of 1RM, e.g. 75.0
    """
    table = PERCENT_OF_MAX_BY_GOAL.get(goal, PERCENT_OF_MAX_BY_GOAL["GENERAL"])
    return lookup_banded(table, avg_reps)


def seed_weight(exercise_name: str, avg_reps: float) -> float:
    """Fixed starting weight by movement category when no max is known."""
    table = SEED_WEIGHTS[categorize_exercise(exercise_name)]
    return lookup_banded(table, avg_reps)


def generic_weight(
    exercise_name: str,
    avg_reps: float,
    goal: str = "GENERAL",
    known_max: float | None = None,
) -> float:
    """
    Estimate a working weight from rep range, goal and (optionally) a known max.

    Returns:
        Weight rounded to the display unit
    """
    if known_max is not None and known_max > 0:
        return round_weight(known_max * percent_of_max_for_reps(avg_reps, goal) / 100.0)
    return round_weight(seed_weight(exercise_name, avg_reps))
