"""
Weight prescription for one set of a template exercise slot.

Decision order, first match wins:

  1. 1RM basis          TM = max × tm_pct; w = floor_inc(TM × intensity/100),
                        clamped to the minimum bar weight
  2. Last-workout basis delegate to the progression engine
  3. Suggested weight   generator weight with a specific source tag
  4. Explicit weight    the template lists a weight for this set
  5. Generic fallback   %1RM table (known max) or seed weight by movement

The result always passes through round_weight().  Missing optional inputs
never raise; they just make a step not apply.
"""

import logging
from collections.abc import Sequence

from .config import (
    DEFAULT_MINIMUM_BAR_WEIGHT,
    DEFAULT_ROUNDING_INCREMENT,
    DEFAULT_TRAINING_MAX_PERCENTAGE,
    GENERIC_WEIGHT_SOURCES,
)
from .engine.config_loader import engine_setting
from .fallback import generic_weight
from .models import ExerciseStructure, PerformanceRecord, Programme, WeightCalculationRules
from .progression import compute_progression
from .reps import rep_midpoint
from .weights import floor_to_increment, round_weight

logger = logging.getLogger(__name__)


def training_max(known_max: float, rules: WeightCalculationRules) -> float:
    """TM = 1RM × training_max_percentage (1.0 when unset)."""
    pct = rules.training_max_percentage
    return known_max * (pct if pct is not None else DEFAULT_TRAINING_MAX_PERCENTAGE)


def one_rep_max_weight(known_max: float, intensity: float, rules: WeightCalculationRules) -> float:
    """
    Percentage-of-training-max weight.

    raw = TM × intensity / 100, floored to the rounding increment and
    clamped to the minimum bar weight.

    Example: max 102, TM 100%, intensity 100, increment 2.5 → 100 (not 102.5).
    """
    increment = rules.rounding_increment
    if increment is None:
        increment = float(engine_setting("prescription", "rounding_increment", DEFAULT_ROUNDING_INCREMENT))
    minimum = rules.minimum_bar_weight
    if minimum is None:
        minimum = float(engine_setting("prescription", "minimum_bar_weight", DEFAULT_MINIMUM_BAR_WEIGHT))

    raw = training_max(known_max, rules) * intensity / 100.0
    return max(floor_to_increment(raw, increment), minimum)


def has_specific_suggestion(slot: ExerciseStructure) -> bool:
    """True when the generator suggested a positive weight from real context."""
    return (
        slot.suggested_weight is not None
        and slot.suggested_weight > 0
        and slot.weight_source is not None
        and slot.weight_source.strip().lower() not in GENERIC_WEIGHT_SOURCES
    )


def prescribe(
    slot: ExerciseStructure,
    set_index: int,
    target_reps: int,
    intensity: float | None = None,
    programme: Programme | None = None,
    known_max: float | None = None,
    history: Sequence[PerformanceRecord] | None = None,
) -> float:
    """
    Target weight for one set of a slot.

    Args:
        slot: Template exercise slot
        set_index: 0-based set index
        target_reps: Target reps for this set
        intensity: Percentage of training max (already wave-adjusted)
        programme: Programme whose rules apply
        known_max: Trainee's current 1RM estimate for this exercise
        history: Performance records for this exercise, most recent last

    Returns:
        Weight in kg, rounded to the display unit
    """
    rules = programme.weight_calculation_rules if programme else None

    if (
        rules is not None
        and rules.basis == "ONE_REP_MAX"
        and intensity is not None
        and known_max is not None
        and known_max > 0
    ):
        weight = one_rep_max_weight(known_max, intensity, rules)
        logger.debug(
            "%s set %d: %s%% of TM from 1RM %.2f -> %.2f",
            slot.name, set_index + 1, intensity, known_max, weight,
        )
        return round_weight(weight)

    if rules is not None and rules.basis == "LAST_WORKOUT":
        decision = compute_progression(
            slot.name,
            programme,
            history or [],
            known_max=known_max,
            rep_range=slot.reps.rep_range(),
        )
        logger.debug("%s: progression %s -> %.2f (%s)", slot.name, decision.action, decision.weight, decision.reason)
        return round_weight(decision.weight)

    if has_specific_suggestion(slot):
        logger.debug("%s: suggested weight %.2f (%s)", slot.name, slot.suggested_weight, slot.weight_source)
        return round_weight(slot.suggested_weight)  # type: ignore[arg-type]

    explicit = slot.explicit_weight(set_index)
    if explicit is not None:
        logger.debug("%s set %d: template weight %.2f", slot.name, set_index + 1, explicit)
        return round_weight(explicit)

    goal = programme.goal if programme else "GENERAL"
    logger.debug("%s set %d x %d: generic %s estimate", slot.name, set_index + 1, target_reps, goal)
    return generic_weight(slot.name, rep_midpoint(slot.reps), goal, known_max)
