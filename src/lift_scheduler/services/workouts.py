"""
Store-backed workout operations: import, generate next, complete.

complete_workout() is the single "workout completed" entry point:

  1. append one PerformanceRecord per exercise to the history log
  2. detect personal records and ratchet trainee maxes
  3. advance programme progress

Steps 1 and 2 raise on store errors; step 3 never does.
"""

import logging
from collections import defaultdict
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.completion import OneRMUpdate, build_performance_record, evaluate_sets
from ..core.generation import GeneratedWorkout, generate_workout
from ..core.models import CompletedSet, PerformanceRecord, PersonalRecord, Programme, ProgrammeProgress, TraineeMax
from ..io.programme_store import ProgrammeStore, StoreError
from ..io.serializers import ValidationError, dict_to_programme, dict_to_programme_workout
from ..io.structure_parser import parse_programme_workouts
from .progress_tracker import advance_progress, scheduled_workouts

logger = logging.getLogger(__name__)


@dataclass
class WorkoutCompletion:
    """Everything a completed workout changed."""

    performance: list[PerformanceRecord] = field(default_factory=list)
    records: list[PersonalRecord] = field(default_factory=list)
    max_updates: list[OneRMUpdate] = field(default_factory=list)
    progress: ProgrammeProgress | None = None


def import_programme(store: ProgrammeStore, document: dict[str, Any], overwrite: bool = False) -> Programme:
    """
    Store a programme from an import document.

    The document holds the programme fields plus a ``workouts`` list; each
    workout carries ``week_number``, ``day_number``, ``name`` and either a
    ``structure`` object or a raw ``structure_json`` string.  Workouts are
    stored in (week, day) order.  Structures are kept as given: ones that
    don't parse are reported now and skipped at generation time.

    Raises:
        ValidationError: If the document is invalid
        StoreError: If the programme exists (and not overwrite) or can't be written
    """
    if not isinstance(document, dict):
        raise ValidationError("Programme document must be a JSON object")

    data = {k: v for k, v in document.items() if k != "workouts"}
    data.update(status="NOT_STARTED", is_active=False, started_at=None, completed_at=None)
    programme = dict_to_programme(data)

    workouts = [dict_to_programme_workout(w) for w in document.get("workouts", [])]
    workouts.sort(key=lambda w: (w.week_number, w.day_number))

    if store.has_programme(programme.id) and not overwrite:
        raise StoreError(f"Programme {programme.id} already exists")

    unparseable = len(workouts) - len(parse_programme_workouts(workouts))
    if unparseable:
        logger.warning("Programme %s: %d workout(s) could not be parsed", programme.id, unparseable)

    store.save_programme(programme, workouts)
    logger.info("Imported programme %s with %d workouts", programme.id, len(workouts))
    return programme


def known_maxes(store: ProgrammeStore) -> dict[str, float]:
    """Trainee 1RM estimates keyed by exercise id."""
    return {exercise_id: m.one_rm_estimate for exercise_id, m in store.load_maxes().items()}


def history_by_exercise(store: ProgrammeStore) -> dict[str, list[PerformanceRecord]]:
    """Performance history grouped by lower-cased exercise name, oldest first."""
    grouped: dict[str, list[PerformanceRecord]] = defaultdict(list)
    for record in store.load_performance():
        grouped[record.exercise_name.strip().lower()].append(record)
    return dict(grouped)


def next_workout(
    store: ProgrammeStore,
    programme_id: str,
    known_exercises: Collection[str] | None = None,
) -> GeneratedWorkout | None:
    """
    Generate the programme's next workout.

    The next workout is the scheduled (parseable) workout at the position
    given by the number of completed workouts, the same one progress
    points at.

    Returns:
        GeneratedWorkout, or None if the programme is complete or has no
        remaining parseable workouts
    """
    programme = store.load_programme(programme_id)
    if programme.status == "COMPLETED":
        return None

    scheduled = scheduled_workouts(store, programme_id)
    progress = store.load_progress(programme_id)
    done = progress.completed_workouts if progress else 0
    if done >= len(scheduled):
        return None

    workout, structure = scheduled[done]
    return generate_workout(
        structure,
        programme,
        workout.week_number,
        day_number=workout.day_number,
        known_maxes=known_maxes(store),
        history_by_exercise=history_by_exercise(store),
        known_exercises=known_exercises,
    )


def complete_workout(
    store: ProgrammeStore,
    programme_id: str,
    sets: Sequence[tuple[str, CompletedSet]],
    now: datetime | None = None,
    workout: GeneratedWorkout | None = None,
) -> WorkoutCompletion:
    """
    Log a finished workout and apply its consequences.

    Args:
        store: Programme store
        programme_id: Programme the workout belongs to
        sets: (exercise name, logged set) pairs in logging order
        now: Completion time (default: now)
        workout: The generated workout that was performed, for planned
            targets and deload flags

    Returns:
        WorkoutCompletion with history written, records, 1RM updates and progress

    Raises:
        StoreError: If history, records or maxes cannot be written
    """
    now = now or datetime.now()
    date = now.date().isoformat()

    planned: Mapping[str, Any] = {}
    if workout is not None:
        planned = {e.name.lower(): e for e in workout.exercises}

    by_exercise: dict[str, list[CompletedSet]] = defaultdict(list)
    for name, completed_set in sets:
        by_exercise[name].append(completed_set)

    performance = []
    for name, logged in by_exercise.items():
        exercise = planned.get(name.lower())
        targets = None
        if exercise is not None:
            targets = [s.target_reps for s in exercise.sets]
        performance.append(
            build_performance_record(
                name,
                date,
                logged,
                target_reps=targets,
                is_deload=exercise.is_deload if exercise is not None else False,
            )
        )
    store.append_performance(performance)

    best_weights: dict[str, float] = {}
    best_e1rms: dict[str, float] = {}
    maxes: dict[str, TraineeMax] = {}
    for name in by_exercise:
        stored = store.get_max(name)
        if stored is not None:
            maxes[name] = stored
        weight = store.best_weight(name)
        if weight is not None:
            best_weights[name] = weight
        e1rm = store.best_estimated_1rm(name)
        if e1rm is not None:
            best_e1rms[name] = e1rm

    evaluation = evaluate_sets(
        sets,
        date,
        prior_best_weights=best_weights,
        prior_best_estimated_1rms=best_e1rms,
        maxes=maxes,
    )
    store.append_records(evaluation.records)
    for update in evaluation.max_updates:
        store.save_max(update.new_max)
        logger.info(
            "1RM for %s raised to %.2f (was %s)",
            update.exercise_id, update.new_max.one_rm_estimate, update.previous,
        )

    return WorkoutCompletion(
        performance=performance,
        records=evaluation.records,
        max_updates=evaluation.max_updates,
        progress=advance_progress(store, programme_id, now),
    )
