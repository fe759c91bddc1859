"""
Personal-record detection and estimated 1RM.

  Brzycki 1993 (J Phys Educ Recreat Dance 64(1):88-90):
    1RM = weight × 36 / (37 − reps)        reps in [1, 36]
    A single is its own 1RM.  At 37 reps the denominator is zero, so
    anything ≥ 37 reps is outside the formula's domain and rejected.

  Classification of one completed set against the prior bests:
    WEIGHT_PR         — weight > best weight ever lifted
    ESTIMATED_1RM_PR  — estimated 1RM > best estimated 1RM
    A set can be neither, either, or both.  With no prior best, the first
    valid set is a record.

  Trainee max ratchet:
    A cached 1RM estimate only moves up.  A single best-effort set can
    never lower it.
"""

from __future__ import annotations

import logging
from datetime import date

from .config import (
    BRZYCKI_DENOMINATOR,
    BRZYCKI_NUMERATOR,
    CONFIDENCE_REP_CAP,
    MAX_REPS_FOR_ESTIMATE,
    MIN_RPE_FOR_CONFIDENCE,
)
from .models import CompletedSet, PersonalRecord, TraineeMax
from .weights import format_weight, round_weight

logger = logging.getLogger(__name__)


class OutOfDomainError(ValueError):
    """Raised when a numeric input lies outside a formula's valid domain."""

    pass


# ---------------------------------------------------------------------------
# Estimation
# ---------------------------------------------------------------------------

def estimated_one_rep_max(weight: float, reps: int) -> float:
    """
    Brzycki estimated 1RM (unrounded).

    Args:
        weight: Weight lifted in kg
        reps: Reps completed, 1–36

    Returns:
        Estimated 1RM in kg

    Raises:
        OutOfDomainError: If reps < 1 or reps ≥ 37, or weight is negative
    """
    if weight < 0:
        raise OutOfDomainError(f"weight must be non-negative, got {weight}")
    if reps < 1 or reps > MAX_REPS_FOR_ESTIMATE:
        raise OutOfDomainError(
            f"reps must be between 1 and {MAX_REPS_FOR_ESTIMATE} for a 1RM estimate, got {reps}"
        )
    if reps == 1:
        return weight
    return weight * BRZYCKI_NUMERATOR / (BRZYCKI_DENOMINATOR - reps)


def percent_of_one_rep_max(reps: int) -> float:
    """
    Fraction of 1RM that a set to failure of *reps* represents.

    (37 − reps) / 36: 1.0 for a single, falling as reps rise.
    """
    if reps < 1 or reps > MAX_REPS_FOR_ESTIMATE:
        raise OutOfDomainError(f"reps must be between 1 and {MAX_REPS_FOR_ESTIMATE}, got {reps}")
    return (BRZYCKI_DENOMINATOR - reps) / BRZYCKI_NUMERATOR


def estimate_confidence(reps: int, rpe: float | None, percent_of_max: float) -> float:
    """
    Confidence (0–1) in a 1RM estimate.

    Weighted blend: low reps (50%), high RPE (30%), heavy relative load (20%).
    """
    if reps <= 0:
        return 0.0
    capped = min(reps, CONFIDENCE_REP_CAP)
    rep_score = (CONFIDENCE_REP_CAP + 1 - capped) / CONFIDENCE_REP_CAP
    if rpe is not None and rpe >= MIN_RPE_FOR_CONFIDENCE:
        rpe_score = (rpe - 5.0) / 5.0
    else:
        rpe_score = 0.3
    load_score = max(0.0, min(1.0, percent_of_max))
    return round(rep_score * 0.5 + rpe_score * 0.3 + load_score * 0.2, 3)


def build_context(weight: float, reps: int, rpe: float | None = None) -> str:
    """'100 kg × 5 @ RPE 8'."""
    rpe_str = f" @ RPE {rpe:g}" if rpe is not None else ""
    return f"{format_weight(weight)} × {reps}{rpe_str}"


# ---------------------------------------------------------------------------
# Record detection
# ---------------------------------------------------------------------------

def _improvement(new: float, previous: float | None) -> float | None:
    if previous is None or previous <= 0:
        return None
    return round((new - previous) / previous * 100, 2)


def detect_records(
    completed_set: CompletedSet,
    exercise_id: str,
    prior_best_weight: float | None,
    prior_best_estimated_1rm: float | None,
    record_date: str | None = None,
) -> list[PersonalRecord]:
    """
    Classify a completed set as zero, one or two personal records.

    Args:
        completed_set: The logged set
        exercise_id: Exercise the set belongs to
        prior_best_weight: Heaviest weight previously lifted (None = no history)
        prior_best_estimated_1rm: Best previous estimated 1RM (None = no history)
        record_date: ISO date to stamp on any record (default: today)

    Returns:
        New PersonalRecord objects (weight PR first)

    Raises:
        OutOfDomainError: If the set's reps are ≥ 37
    """
    if not completed_set.completed or completed_set.reps <= 0 or completed_set.weight <= 0:
        logger.debug("Skipping record check for %s: set not completed or empty", exercise_id)
        return []

    record_date = record_date or date.today().isoformat()
    weight = round_weight(completed_set.weight)
    reps = completed_set.reps
    e1rm = round_weight(estimated_one_rep_max(weight, reps))

    records: list[PersonalRecord] = []

    if prior_best_weight is None or weight > prior_best_weight:
        records.append(
            PersonalRecord(
                exercise_id=exercise_id,
                weight=weight,
                reps=reps,
                estimated_1rm=e1rm,
                record_date=record_date,
                record_type="WEIGHT_PR",
                previous_best=prior_best_weight,
                improvement_percentage=_improvement(weight, prior_best_weight),
            )
        )

    if prior_best_estimated_1rm is None or e1rm > prior_best_estimated_1rm:
        records.append(
            PersonalRecord(
                exercise_id=exercise_id,
                weight=weight,
                reps=reps,
                estimated_1rm=e1rm,
                record_date=record_date,
                record_type="ESTIMATED_1RM_PR",
                previous_best=prior_best_estimated_1rm,
                improvement_percentage=_improvement(e1rm, prior_best_estimated_1rm),
            )
        )

    for record in records:
        logger.info(
            "%s for %s: %s × %d (e1RM %s)",
            record.record_type, exercise_id, format_weight(weight), reps, format_weight(e1rm),
        )
    return records


def ratchet_max(
    current: TraineeMax | None,
    record: PersonalRecord,
    rpe: float | None = None,
) -> TraineeMax | None:
    """
    Raise a trainee's cached 1RM from an estimated-1RM record.

    Args:
        current: Stored max for the exercise (None = none stored)
        record: An ESTIMATED_1RM_PR record
        rpe: RPE of the set that produced the record, if logged

    Returns:
        The new TraineeMax if it strictly exceeds the stored one, else None
    """
    if record.record_type != "ESTIMATED_1RM_PR":
        return None
    if current is not None and record.estimated_1rm <= current.one_rm_estimate:
        return None

    percent_of_max = (
        record.weight / current.one_rm_estimate
        if current is not None and current.one_rm_estimate > 0
        else 1.0
    )
    return TraineeMax(
        exercise_id=record.exercise_id,
        one_rm_estimate=record.estimated_1rm,
        date=record.record_date,
        confidence=estimate_confidence(record.reps, rpe, percent_of_max),
        context=build_context(record.weight, record.reps, rpe),
    )
