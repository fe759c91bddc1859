"""
Session-to-session progression for last-workout programmes.

Decides the next working weight for one exercise from its performance
history (oldest first, most recent last) and the programme's rules:

  no history                    → REPEAT a seeded weight (generic fallback)
  last session successful       → INCREASE by the exercise increment
  failure streak ≥ threshold    → DELOAD by the deload fraction
  otherwise                     → REPEAT the last weight

The failure streak is recounted from history on every call: consecutive
failed sessions counting back from the most recent one, stopping at a
success and at (and including) the most recent deload session, so a
deload resets the streak.

Nothing here writes; callers persist the sessions that follow.
"""

import logging
from collections.abc import Sequence

from .config import (
    ALLOWED_MISSED_REPS,
    DEFAULT_MINIMUM_BAR_WEIGHT,
    DELOAD_FAILURE_THRESHOLD,
    DELOAD_FRACTION,
    MAX_DELOAD_THRESHOLD,
    MIN_DELOAD_THRESHOLD,
)
from .engine.config_loader import engine_setting
from .fallback import generic_weight
from .models import PerformanceRecord, Programme, ProgressionDecision
from .movements import default_increment
from .weights import format_weight, round_weight

logger = logging.getLogger(__name__)


def deload_threshold(programme: Programme | None) -> int:
    """Consecutive failures before a deload, clamped to 2–3."""
    rules = programme.progression_rules if programme else None
    value = rules.deload_threshold if rules and rules.deload_threshold is not None else None
    if value is None:
        value = int(engine_setting("progression", "deload_threshold", DELOAD_FAILURE_THRESHOLD))
    return max(MIN_DELOAD_THRESHOLD, min(MAX_DELOAD_THRESHOLD, value))


def deload_fraction(programme: Programme | None) -> float:
    """Fraction taken off the working weight on deload."""
    rules = programme.progression_rules if programme else None
    if rules and rules.deload_fraction is not None:
        return rules.deload_fraction
    return float(engine_setting("progression", "deload_fraction", DELOAD_FRACTION))


def allowed_missed_reps(programme: Programme | None) -> int:
    """Total reps a session may fall short and still count as a success."""
    rules = programme.progression_rules if programme else None
    if rules and rules.allowed_missed_reps is not None:
        return rules.allowed_missed_reps
    return int(engine_setting("progression", "allowed_missed_reps", ALLOWED_MISSED_REPS))


def minimum_weight(programme: Programme | None) -> float:
    """Floor for any progression result (the empty bar by default)."""
    rules = programme.weight_calculation_rules if programme else None
    if rules and rules.minimum_bar_weight is not None:
        return rules.minimum_bar_weight
    return float(engine_setting("prescription", "minimum_bar_weight", DEFAULT_MINIMUM_BAR_WEIGHT))


def failure_streak(history: Sequence[PerformanceRecord], allowed_missed: int = 0) -> int:
    """
    Count consecutive failed sessions ending at the most recent one.

    Args:
        history: Performance records, most recent last
        allowed_missed: Missed-rep allowance per session

    Returns:
        Number of trailing failures since the last success or deload
    """
    streak = 0
    for record in reversed(history):
        if record.was_successful(allowed_missed):
            break
        streak += 1
        if record.is_deload:
            break
    return streak


def _pre_deload_weight(history: Sequence[PerformanceRecord]) -> float | None:
    """Weight of the most recent non-deload session before the trailing deload run."""
    for record in reversed(history):
        if not record.is_deload:
            return record.weight
    return None


def compute_progression(
    exercise_name: str,
    programme: Programme | None,
    history: Sequence[PerformanceRecord],
    known_max: float | None = None,
    rep_range: tuple[int, int] | None = None,
) -> ProgressionDecision:
    """
    Decide next-session weight for an exercise.

    Args:
        exercise_name: Exercise the history belongs to
        programme: Programme whose rules apply (None = engine defaults)
        history: Performance records for this exercise, most recent last
        known_max: Trainee's 1RM estimate, used only to seed an empty history
        rep_range: Slot rep range, used only to seed an empty history

    Returns:
        ProgressionDecision with the weight already rounded for display
    """
    if not history:
        low, high = rep_range if rep_range else (5, 5)
        goal = programme.goal if programme else "GENERAL"
        seeded = generic_weight(exercise_name, (low + high) / 2, goal, known_max)
        reason = (
            f"No history - starting from {format_weight(known_max)} 1RM estimate"
            if known_max
            else "No history - starting from a default weight"
        )
        return ProgressionDecision(weight=seeded, action="REPEAT", reason=reason)

    last = history[-1]
    allowance = allowed_missed_reps(programme)
    floor_weight = minimum_weight(programme)

    if last.was_successful(allowance):
        increment = default_increment(
            exercise_name,
            programme.progression_rules.increment_rules
            if programme and programme.progression_rules
            else None,
        )
        new_weight = last.weight + increment
        reason = f"Last session successful - adding {format_weight(increment)}"

        if last.is_deload:
            ceiling = _pre_deload_weight(history)
            if ceiling is not None and new_weight > ceiling:
                new_weight = ceiling
                reason = "Recovering from deload - back to pre-deload weight"

        return ProgressionDecision(
            weight=round_weight(new_weight),
            action="INCREASE",
            reason=reason,
            previous_weight=last.weight,
        )

    streak = failure_streak(history, allowance)
    threshold = deload_threshold(programme)

    if streak >= threshold:
        fraction = deload_fraction(programme)
        new_weight = max(floor_weight, last.weight * (1 - fraction))
        logger.info(
            "Deload for %s: %s -> %s after %d failed sessions",
            exercise_name, format_weight(last.weight), format_weight(new_weight), streak,
        )
        return ProgressionDecision(
            weight=round_weight(new_weight),
            action="DELOAD",
            reason=f"{streak} consecutive failed sessions - deloading {fraction:.0%}",
            is_deload=True,
            previous_weight=last.weight,
            failure_streak=streak,
        )

    return ProgressionDecision(
        weight=round_weight(last.weight),
        action="REPEAT",
        reason=f"Missed target reps ({streak}/{threshold} before deload) - repeating weight",
        previous_weight=last.weight,
        failure_streak=streak,
    )
