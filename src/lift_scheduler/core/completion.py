"""
Workout-completion evaluation: personal records and 1RM updates.

Sets are checked in logging order.  Bests are carried forward within the
workout, so a second heavier set of the same exercise is compared against
the first.  Raised trainee maxes come back as an explicit list of
OneRMUpdate events for the caller to persist and announce.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .models import CompletedSet, PerformanceRecord, PersonalRecord, TraineeMax
from .records import OutOfDomainError, detect_records, ratchet_max
from .weights import round_weight

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OneRMUpdate:
    """A trainee max that went up during a workout."""

    exercise_id: str
    previous: float | None
    new_max: TraineeMax


@dataclass
class SetEvaluation:
    """Records and max updates produced by one workout's sets."""

    records: list[PersonalRecord] = field(default_factory=list)
    max_updates: list[OneRMUpdate] = field(default_factory=list)


def evaluate_sets(
    sets: Sequence[tuple[str, CompletedSet]],
    record_date: str,
    prior_best_weights: Mapping[str, float] | None = None,
    prior_best_estimated_1rms: Mapping[str, float] | None = None,
    maxes: Mapping[str, TraineeMax] | None = None,
) -> SetEvaluation:
    """
    Detect records for a workout's sets and ratchet trainee maxes.

    Args:
        sets: (exercise_id, CompletedSet) pairs in logging order
        record_date: ISO date of the workout
        prior_best_weights: Best weight per exercise before this workout
        prior_best_estimated_1rms: Best estimated 1RM per exercise before this workout
        maxes: Stored trainee maxes per exercise

    Returns:
        SetEvaluation with new records and at most one update per exercise
    """
    best_weight = dict(prior_best_weights or {})
    best_e1rm = dict(prior_best_estimated_1rms or {})
    current_max = dict(maxes or {})
    updates: dict[str, OneRMUpdate] = {}
    result = SetEvaluation()

    for exercise_id, completed_set in sets:
        try:
            found = detect_records(
                completed_set,
                exercise_id,
                best_weight.get(exercise_id),
                best_e1rm.get(exercise_id),
                record_date,
            )
        except OutOfDomainError as e:
            logger.warning("No record check for %s: %s", exercise_id, e)
            continue

        for record in found:
            result.records.append(record)
            if record.record_type == "WEIGHT_PR":
                best_weight[exercise_id] = record.weight
                continue

            best_e1rm[exercise_id] = record.estimated_1rm
            stored = current_max.get(exercise_id)
            raised = ratchet_max(stored, record, completed_set.rpe)
            if raised is None:
                continue
            current_max[exercise_id] = raised
            previous = updates[exercise_id].previous if exercise_id in updates else (
                stored.one_rm_estimate if stored else None
            )
            updates[exercise_id] = OneRMUpdate(exercise_id=exercise_id, previous=previous, new_max=raised)

    result.max_updates = list(updates.values())
    return result


def build_performance_record(
    exercise_name: str,
    date: str,
    sets: Sequence[CompletedSet],
    target_reps: Sequence[int] | None = None,
    is_deload: bool = False,
) -> PerformanceRecord:
    """
    Summarise one exercise's logged sets as a PerformanceRecord.

    The session weight is the heaviest completed set.  Without planned
    targets, a completed set counts as on target and a set marked not
    completed as one rep short.

    Args:
        exercise_name: Exercise performed
        date: ISO date of the session
        sets: Logged sets in order
        target_reps: Planned reps per set, if the workout was generated
        is_deload: Whether the session was prescribed as a deload
    """
    done = [s for s in sets if s.completed]
    weight = max((s.weight for s in done), default=max((s.weight for s in sets), default=0.0))
    achieved = [s.reps for s in sets]
    if target_reps is None:
        target_reps = [s.reps if s.completed else s.reps + 1 for s in sets]
    return PerformanceRecord(
        exercise_name=exercise_name,
        date=date,
        weight=round_weight(weight),
        target_reps=list(target_reps),
        achieved_reps=achieved,
        is_deload=is_deload,
    )
