"""
Workout-structure JSON decoding.

Stored workouts carry their template as a raw JSON string:

    {"day": 1, "name": "Day A", "estimatedDuration": 45,
     "exercises": [{"name": "Squat", "sets": 3,
                    "reps": {"type": "range", "min": 5, "max": 5},
                    "intensity": [75, 80, 85]}]}

Decoding is a two-stage pipeline:

    parse → (on failure) apply REPAIRS → reparse → (on failure) ParseError

``reps`` is polymorphic and discriminated by shape into the RepsScheme
variants of core.reps.  Keys are accepted in camelCase (wire format) or
snake_case.
"""

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from ..core.config import DEFAULT_REPS_RANGE
from ..core.models import ExerciseStructure, ProgrammeWorkout, WorkoutStructure
from ..core.reps import PerSet, Range, RangeString, RepsScheme, Single

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """
    Raised when a workout structure cannot be decoded, even after repair.

    ``first_error`` is the failure on the raw text; ``repair_error`` is the
    failure after repairs were applied (None if no repair changed the text).
    """

    def __init__(self, message: str, first_error: Exception | None = None, repair_error: Exception | None = None):
        super().__init__(message)
        self.first_error = first_error
        self.repair_error = repair_error


@dataclass(frozen=True)
class Repair:
    """A known malformation and its textual fix."""

    name: str
    pattern: re.Pattern
    replacement: str

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


# Generators sometimes emit an empty reps value: "reps":, or "reps": ,
REPAIRS: tuple[Repair, ...] = (
    Repair(
        name="empty_reps",
        pattern=re.compile(r'"reps"\s*:\s*,'),
        replacement=f'"reps":"{DEFAULT_REPS_RANGE}",',
    ),
)


def _field(data: dict[str, Any], camel: str, snake: str | None = None, default: Any = None) -> Any:
    """Read a key in wire (camelCase) or Python (snake_case) spelling."""
    if camel in data:
        return data[camel]
    if snake is not None and snake in data:
        return data[snake]
    return default


def parse_reps(value: Any) -> RepsScheme:
    """
    Discriminate a raw ``reps`` value into a RepsScheme variant.

    Args:
        value: Decoded JSON value of the reps field

    Returns:
        Single, Range, RangeString or PerSet

    Raises:
        ValueError: If the value has an unsupported shape
    """
    if value is None:
        return RangeString(DEFAULT_REPS_RANGE)

    if isinstance(value, bool):
        raise ValueError(f"reps cannot be a boolean: {value!r}")

    if isinstance(value, int):
        return Single(value)

    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"reps must be whole numbers, got {value}")
        return Single(int(value))

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return Single(int(text))
        return RangeString(text or DEFAULT_REPS_RANGE)

    if isinstance(value, list):
        return PerSet(tuple(str(v).strip() for v in value))

    if isinstance(value, dict):
        kind = str(value.get("type", "")).strip().lower()
        if kind == "single":
            return Single(int(value["value"]))
        if kind == "range":
            return Range(int(value["min"]), int(value["max"]))
        if kind in ("perset", "per_set"):
            return PerSet(tuple(str(v).strip() for v in value.get("values", [])))
        if "min" in value and "max" in value:
            return Range(int(value["min"]), int(value["max"]))
        if "value" in value:
            return Single(int(value["value"]))

    raise ValueError(f"Unsupported reps value: {value!r}")


def _float_list(values: Any, name: str) -> list[float] | None:
    if values is None:
        return None
    if not isinstance(values, list):
        raise ValueError(f"{name} must be a list, got {type(values).__name__}")
    return [float(v) for v in values]


def dict_to_exercise_structure(data: dict[str, Any]) -> ExerciseStructure:
    """
    Build an ExerciseStructure from one decoded exercise object.

    A missing name becomes "" so generation can skip the slot instead of
    rejecting the whole workout.
    """
    intensity = _float_list(data.get("intensity"), "intensity")
    suggested = _field(data, "suggestedWeight", "suggested_weight")
    return ExerciseStructure(
        name=str(data.get("name") or "").strip(),
        sets=int(data.get("sets", 0)),
        reps=parse_reps(data.get("reps")),
        intensity=[int(round(p)) for p in intensity] if intensity is not None else None,
        weights=_float_list(data.get("weights"), "weights"),
        note=data.get("note"),
        suggested_weight=float(suggested) if suggested is not None else None,
        weight_source=_field(data, "weightSource", "weight_source"),
        category=data.get("category"),
        progression=data.get("progression") or "linear",
    )


def dict_to_workout_structure(data: dict[str, Any]) -> WorkoutStructure:
    """Build a WorkoutStructure from a decoded workout object."""
    if not isinstance(data, dict):
        raise ValueError(f"workout structure must be an object, got {type(data).__name__}")
    exercises = data.get("exercises") or []
    if not isinstance(exercises, list):
        raise ValueError("exercises must be a list")
    duration = _field(data, "estimatedDuration", "estimated_duration")
    return WorkoutStructure(
        day=int(data.get("day", 1)),
        name=str(data.get("name", "")),
        exercises=[dict_to_exercise_structure(e) for e in exercises],
        estimated_duration=int(duration) if duration is not None else None,
    )


def _decode(text: str) -> WorkoutStructure:
    return dict_to_workout_structure(json.loads(text))


def parse_workout_structure(text: str) -> WorkoutStructure:
    """
    Decode a workout-structure JSON string, repairing known malformations.

    Args:
        text: Raw structure JSON

    Returns:
        WorkoutStructure

    Raises:
        ParseError: If the text fails to decode both before and after repair
    """
    try:
        return _decode(text)
    except (ValueError, KeyError, TypeError) as first:
        first_error: Exception = first

    repaired = text
    applied = []
    for repair in REPAIRS:
        patched = repair.apply(repaired)
        if patched != repaired:
            applied.append(repair.name)
            repaired = patched

    if not applied:
        raise ParseError(
            f"Invalid workout structure: {first_error}",
            first_error=first_error,
        ) from first_error

    try:
        structure = _decode(repaired)
    except (ValueError, KeyError, TypeError) as second:
        raise ParseError(
            f"Invalid workout structure: {first_error}; after repair ({', '.join(applied)}): {second}",
            first_error=first_error,
            repair_error=second,
        ) from second

    logger.debug("Workout structure decoded after repair: %s", ", ".join(applied))
    return structure


def parse_programme_workouts(
    workouts: Iterable[ProgrammeWorkout],
) -> list[tuple[ProgrammeWorkout, WorkoutStructure]]:
    """
    Decode every stored workout of a programme, skipping unparseable ones.

    Args:
        workouts: Stored workouts in template order

    Returns:
        (workout, structure) pairs for each workout that decoded
    """
    parsed: list[tuple[ProgrammeWorkout, WorkoutStructure]] = []
    for workout in workouts:
        try:
            parsed.append((workout, parse_workout_structure(workout.structure_json)))
        except ParseError as e:
            logger.warning(
                "Skipping week %d day %d (%s): %s",
                workout.week_number, workout.day_number, workout.name, e,
            )
    return parsed
