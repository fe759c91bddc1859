"""
Turn a parsed template workout into concrete sets.

For every slot and set:  reps scheme → wave overlay → prescription.

Slots without a usable exercise (blank name, a name outside the supplied
exercise catalogue, or zero sets) are left out and reported in
``GeneratedWorkout.skipped``; no placeholder set is produced for them.
"""

import logging
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field

from .models import ExerciseStructure, PerformanceRecord, Programme, ProgressionDecision, WorkoutStructure
from .movements import lookup_known_max
from .prescription import prescribe
from .progression import compute_progression
from .wave import wave_intensity

logger = logging.getLogger(__name__)


@dataclass
class PrescribedSet:
    """One concrete set to perform."""

    set_number: int  # 1-based
    target_reps: int
    weight: float
    intensity: int | None = None


@dataclass
class GeneratedExercise:
    """A slot resolved to concrete sets."""

    name: str
    reps_label: str
    sets: list[PrescribedSet] = field(default_factory=list)
    note: str | None = None
    decision: ProgressionDecision | None = None

    @property
    def is_deload(self) -> bool:
        return self.decision is not None and self.decision.is_deload


@dataclass
class GeneratedWorkout:
    """A workout ready to perform."""

    week_number: int
    day_number: int
    name: str
    exercises: list[GeneratedExercise] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    estimated_duration: int | None = None


def _skip_reason(slot: ExerciseStructure, known: set[str] | None) -> str | None:
    if not slot.name:
        return "no exercise name"
    if known is not None and slot.name.lower() not in known:
        return "unknown exercise"
    if slot.sets <= 0:
        return "no sets"
    return None


def generate_exercise(
    slot: ExerciseStructure,
    programme: Programme | None,
    week_number: int,
    known_max: float | None = None,
    history: Sequence[PerformanceRecord] | None = None,
) -> GeneratedExercise:
    """
    Resolve every set of one slot.

    Args:
        slot: Template exercise slot
        programme: Programme whose rules apply
        week_number: Actual 1-based programme week (drives the wave overlay)
        known_max: Trainee's 1RM estimate for the exercise
        history: The exercise's performance records, most recent last

    Returns:
        GeneratedExercise with one PrescribedSet per template set
    """
    rules = programme.progression_rules if programme else None
    history = list(history or [])

    decision = None
    if programme is not None and programme.basis == "LAST_WORKOUT":
        decision = compute_progression(
            slot.name, programme, history, known_max=known_max, rep_range=slot.reps.rep_range()
        )

    exercise = GeneratedExercise(name=slot.name, reps_label=slot.reps.label(), note=slot.note, decision=decision)
    for i in range(slot.sets):
        target_reps = slot.reps.reps_for_set(i)
        intensity = wave_intensity(rules, week_number, i, slot.static_intensity(i))
        weight = prescribe(
            slot,
            i,
            target_reps,
            intensity=intensity,
            programme=programme,
            known_max=known_max,
            history=history,
        )
        exercise.sets.append(PrescribedSet(set_number=i + 1, target_reps=target_reps, weight=weight, intensity=intensity))
    return exercise


def generate_workout(
    structure: WorkoutStructure,
    programme: Programme | None,
    week_number: int,
    day_number: int | None = None,
    known_maxes: Mapping[str, float] | None = None,
    history_by_exercise: Mapping[str, Sequence[PerformanceRecord]] | None = None,
    known_exercises: Collection[str] | None = None,
) -> GeneratedWorkout:
    """
    Resolve a whole template workout.

    Args:
        structure: Parsed template workout
        programme: Programme whose rules apply
        week_number: Actual 1-based programme week
        day_number: Programme day (defaults to the structure's day)
        known_maxes: Trainee maxes by exercise name or headline alias
        history_by_exercise: Performance history keyed by lower-cased exercise name
        known_exercises: Exercise catalogue; slots outside it are skipped (None = accept all)

    Returns:
        GeneratedWorkout
    """
    known = {name.lower() for name in known_exercises} if known_exercises is not None else None
    maxes = dict(known_maxes or {})
    histories = history_by_exercise or {}

    workout = GeneratedWorkout(
        week_number=week_number,
        day_number=day_number if day_number is not None else structure.day,
        name=structure.name,
        estimated_duration=structure.estimated_duration,
    )

    for slot in structure.exercises:
        reason = _skip_reason(slot, known)
        if reason is not None:
            label = slot.name or "(unnamed)"
            logger.warning("Skipping %s in %s: %s", label, structure.name, reason)
            workout.skipped.append(label)
            continue

        workout.exercises.append(
            generate_exercise(
                slot,
                programme,
                week_number,
                known_max=lookup_known_max(slot.name, maxes),
                history=histories.get(slot.name.lower(), []),
            )
        )

    return workout
