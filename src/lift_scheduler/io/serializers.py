"""
JSON serialization for programme and training data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.models import (
    PROGRAMME_GOALS,
    PROGRAMME_STATUSES,
    PROGRESSION_TYPES,
    WEIGHT_BASES,
    CompletedSet,
    PerformanceRecord,
    PersonalRecord,
    Programme,
    ProgrammeProgress,
    ProgrammeWorkout,
    ProgressionRules,
    TraineeMax,
    WeightCalculationRules,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    """
    Validate that a value is one of a fixed set of strings.

    Raises:
        ValidationError: If value is not one of *choices*
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value}. Must be one of {choices}")
    return value


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Args:
        value: Value to validate
        name: Name for error message

    Returns:
        The value if valid

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def _optional_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def _optional_int(value: Any) -> int | None:
    return int(value) if value is not None else None


# =============================================================================
# Programme
# =============================================================================


def weight_rules_to_dict(rules: WeightCalculationRules) -> dict[str, Any]:
    """Convert WeightCalculationRules to JSON-compatible dict."""
    return {
        "basis": rules.basis,
        "training_max_percentage": rules.training_max_percentage,
        "rounding_increment": rules.rounding_increment,
        "minimum_bar_weight": rules.minimum_bar_weight,
    }


def dict_to_weight_rules(data: dict[str, Any]) -> WeightCalculationRules:
    """
    Convert dict to WeightCalculationRules.

    Missing numeric fields stay None so the engine defaults apply.

    Raises:
        ValidationError: If data is invalid
    """
    validate_choice(data.get("basis", "ONE_REP_MAX"), WEIGHT_BASES, "basis")
    for key in ("training_max_percentage", "rounding_increment", "minimum_bar_weight"):
        if data.get(key) is not None:
            validate_non_negative(data[key], key)

    return WeightCalculationRules(
        basis=data.get("basis", "ONE_REP_MAX"),
        training_max_percentage=_optional_float(data.get("training_max_percentage")),
        rounding_increment=_optional_float(data.get("rounding_increment")),
        minimum_bar_weight=_optional_float(data.get("minimum_bar_weight")),
    )


def progression_rules_to_dict(rules: ProgressionRules) -> dict[str, Any]:
    """Convert ProgressionRules to JSON-compatible dict, omitting unset fields."""
    d: dict[str, Any] = {"type": rules.type}
    if rules.weekly_percentages is not None:
        d["weekly_percentages"] = [list(row) for row in rules.weekly_percentages]
    if rules.cycle_length is not None:
        d["cycle_length"] = rules.cycle_length
    if rules.increment_rules:
        d["increment_rules"] = dict(rules.increment_rules)
    for key in ("deload_threshold", "deload_fraction", "allowed_missed_reps"):
        value = getattr(rules, key)
        if value is not None:
            d[key] = value
    return d


def dict_to_progression_rules(data: dict[str, Any]) -> ProgressionRules:
    """
    Convert dict to ProgressionRules.

    Raises:
        ValidationError: If data is invalid
    """
    validate_choice(data.get("type", "LINEAR"), PROGRESSION_TYPES, "progression type")

    weekly = data.get("weekly_percentages")
    if weekly is not None:
        if not isinstance(weekly, list) or not all(isinstance(row, list) for row in weekly):
            raise ValidationError("weekly_percentages must be a list of lists")
        weekly = [[float(p) for p in row] for row in weekly]

    fraction = _optional_float(data.get("deload_fraction"))
    if fraction is not None and not 0 <= fraction < 1:
        raise ValidationError(f"deload_fraction must be in [0, 1), got {fraction}")

    return ProgressionRules(
        type=data.get("type", "LINEAR"),
        weekly_percentages=weekly,
        cycle_length=_optional_int(data.get("cycle_length")),
        increment_rules={k: float(v) for k, v in (data.get("increment_rules") or {}).items()},
        deload_threshold=_optional_int(data.get("deload_threshold")),
        deload_fraction=fraction,
        allowed_missed_reps=_optional_int(data.get("allowed_missed_reps")),
    )


def programme_to_dict(programme: Programme) -> dict[str, Any]:
    """Convert Programme to JSON-compatible dict."""
    d: dict[str, Any] = {
        "id": programme.id,
        "name": programme.name,
        "duration_weeks": programme.duration_weeks,
        "is_custom": programme.is_custom,
        "is_active": programme.is_active,
        "status": programme.status,
        "goal": programme.goal,
        "started_at": programme.started_at,
        "completed_at": programme.completed_at,
    }
    if programme.weight_calculation_rules is not None:
        d["weight_calculation_rules"] = weight_rules_to_dict(programme.weight_calculation_rules)
    if programme.progression_rules is not None:
        d["progression_rules"] = progression_rules_to_dict(programme.progression_rules)
    return d


def dict_to_programme(data: dict[str, Any]) -> Programme:
    """
    Convert dict to Programme.

    Raises:
        ValidationError: If data is invalid or internally inconsistent
    """
    if not data.get("id") or not data.get("name"):
        raise ValidationError("Programme requires a non-empty id and name")
    validate_non_negative(data.get("duration_weeks", 0), "duration_weeks")
    validate_choice(data.get("status", "NOT_STARTED"), PROGRAMME_STATUSES, "status")
    validate_choice(data.get("goal", "GENERAL"), PROGRAMME_GOALS, "goal")

    weight_rules = data.get("weight_calculation_rules")
    progression_rules = data.get("progression_rules")

    try:
        return Programme(
            id=str(data["id"]),
            name=str(data["name"]),
            duration_weeks=int(data.get("duration_weeks", 0)),
            is_custom=bool(data.get("is_custom", False)),
            is_active=bool(data.get("is_active", False)),
            status=data.get("status", "NOT_STARTED"),
            goal=data.get("goal", "GENERAL"),
            weight_calculation_rules=dict_to_weight_rules(weight_rules) if weight_rules else None,
            progression_rules=dict_to_progression_rules(progression_rules) if progression_rules else None,
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
        )
    except ValueError as e:
        raise ValidationError(f"Invalid programme {data.get('id')}: {e}") from e


def programme_workout_to_dict(workout: ProgrammeWorkout) -> dict[str, Any]:
    """Convert ProgrammeWorkout to JSON-compatible dict (structure kept raw)."""
    return {
        "week_number": workout.week_number,
        "day_number": workout.day_number,
        "name": workout.name,
        "structure_json": workout.structure_json,
    }


def dict_to_programme_workout(data: dict[str, Any]) -> ProgrammeWorkout:
    """
    Convert dict to ProgrammeWorkout.

    The structure may be given as ``structure_json`` (raw string, kept
    verbatim even if malformed) or ``structure`` (an object, re-encoded).

    Raises:
        ValidationError: If data is invalid
    """
    validate_positive(data.get("week_number", 0), "week_number")
    validate_positive(data.get("day_number", 0), "day_number")

    if "structure_json" in data:
        raw = data["structure_json"]
        if not isinstance(raw, str):
            raise ValidationError("structure_json must be a string")
    elif "structure" in data:
        raw = json.dumps(data["structure"])
    else:
        raise ValidationError("Workout requires structure_json or structure")

    return ProgrammeWorkout(
        week_number=int(data["week_number"]),
        day_number=int(data["day_number"]),
        name=str(data.get("name", "")),
        structure_json=raw,
    )


def progress_to_dict(progress: ProgrammeProgress) -> dict[str, Any]:
    """Convert ProgrammeProgress to JSON-compatible dict."""
    return {
        "programme_id": progress.programme_id,
        "current_week": progress.current_week,
        "current_day": progress.current_day,
        "completed_workouts": progress.completed_workouts,
        "total_workouts": progress.total_workouts,
        "adherence_percentage": progress.adherence_percentage,
        "last_workout_date": progress.last_workout_date,
    }


def dict_to_progress(data: dict[str, Any]) -> ProgrammeProgress:
    """
    Convert dict to ProgrammeProgress.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        return ProgrammeProgress(
            programme_id=str(data["programme_id"]),
            current_week=int(data.get("current_week", 1)),
            current_day=int(data.get("current_day", 1)),
            completed_workouts=int(data.get("completed_workouts", 0)),
            total_workouts=int(data.get("total_workouts", 0)),
            adherence_percentage=float(data.get("adherence_percentage", 0.0)),
            last_workout_date=data.get("last_workout_date"),
        )
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Invalid programme progress: {e}") from e


# =============================================================================
# History and records
# =============================================================================


def performance_record_to_dict(record: PerformanceRecord) -> dict[str, Any]:
    """Convert PerformanceRecord to JSON-compatible dict."""
    d: dict[str, Any] = {
        "exercise_name": record.exercise_name,
        "date": record.date,
        "weight": record.weight,
        "target_reps": list(record.target_reps),
        "achieved_reps": list(record.achieved_reps),
    }
    if record.is_deload:
        d["is_deload"] = True
    return d


def dict_to_performance_record(data: dict[str, Any]) -> PerformanceRecord:
    """
    Convert dict to PerformanceRecord.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(data["date"])
    validate_non_negative(data.get("weight", 0), "weight")
    target = [int(r) for r in data.get("target_reps", [])]
    achieved = [int(r) for r in data.get("achieved_reps", [])]
    for r in target + achieved:
        validate_non_negative(r, "reps")

    return PerformanceRecord(
        exercise_name=str(data["exercise_name"]),
        date=data["date"],
        weight=float(data["weight"]),
        target_reps=target,
        achieved_reps=achieved,
        is_deload=bool(data.get("is_deload", False)),
    )


def personal_record_to_dict(record: PersonalRecord) -> dict[str, Any]:
    """Convert PersonalRecord to JSON-compatible dict."""
    return {
        "exercise_id": record.exercise_id,
        "weight": record.weight,
        "reps": record.reps,
        "estimated_1rm": record.estimated_1rm,
        "record_date": record.record_date,
        "record_type": record.record_type,
        "previous_best": record.previous_best,
        "improvement_percentage": record.improvement_percentage,
    }


def dict_to_personal_record(data: dict[str, Any]) -> PersonalRecord:
    """
    Convert dict to PersonalRecord.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(data["record_date"])
    validate_choice(data.get("record_type"), ("WEIGHT_PR", "ESTIMATED_1RM_PR"), "record_type")
    validate_non_negative(data.get("weight", 0), "weight")

    return PersonalRecord(
        exercise_id=str(data["exercise_id"]),
        weight=float(data["weight"]),
        reps=int(data["reps"]),
        estimated_1rm=float(data["estimated_1rm"]),
        record_date=data["record_date"],
        record_type=data["record_type"],
        previous_best=_optional_float(data.get("previous_best")),
        improvement_percentage=_optional_float(data.get("improvement_percentage")),
    )


def trainee_max_to_dict(trainee_max: TraineeMax) -> dict[str, Any]:
    """Convert TraineeMax to JSON-compatible dict."""
    return {
        "exercise_id": trainee_max.exercise_id,
        "one_rm_estimate": trainee_max.one_rm_estimate,
        "date": trainee_max.date,
        "confidence": trainee_max.confidence,
        "context": trainee_max.context,
    }


def dict_to_trainee_max(data: dict[str, Any]) -> TraineeMax:
    """
    Convert dict to TraineeMax.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(data["date"])
    validate_non_negative(data.get("one_rm_estimate", 0), "one_rm_estimate")
    return TraineeMax(
        exercise_id=str(data["exercise_id"]),
        one_rm_estimate=float(data["one_rm_estimate"]),
        date=data["date"],
        confidence=float(data.get("confidence", 0.0)),
        context=str(data.get("context", "")),
    )


def to_json_line(data: dict[str, Any]) -> str:
    """Serialize a dict to a single compact JSON line (no trailing newline)."""
    return json.dumps(data, separators=(",", ":"))


# =============================================================================
# CLI set strings
# =============================================================================


def parse_sets_string(sets_str: str) -> list[CompletedSet]:
    """
    Parse a logged-sets string.

    Comma-separated groups, each one of:
        WxR         e.g. "100x5"       one set of R reps at W kg
        WxRxN       e.g. "100x5x3"     N sets of R reps at W kg
        ...@RPE     e.g. "100x5@8"     RPE applies to every set of the group

    A trailing "!" marks the group as not completed (e.g. "100x3!").

    Args:
        sets_str: Sets string to parse

    Returns:
        List of CompletedSet in order

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    sets: list[CompletedSet] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if not part:
            continue
        m = re.fullmatch(
            r"(\d+(?:\.\d+)?)\s*[xX×]\s*(\d+)(?:\s*[xX×]\s*(\d+))?(?:\s*@\s*(\d+(?:\.\d+)?))?\s*(!)?",
            part,
        )
        if not m:
            raise ValidationError(
                f"Invalid set format: '{part}'.\n"
                f"Use: weightxreps (e.g. 100x5), weightxrepsxsets (e.g. 100x5x3),\n"
                f"     optionally with @RPE (e.g. 100x5@8)."
            )

        weight = float(m.group(1))
        reps = int(m.group(2))
        count = int(m.group(3)) if m.group(3) else 1
        rpe = float(m.group(4)) if m.group(4) else None
        completed = m.group(5) is None

        if count < 1:
            raise ValidationError(f"Set count must be at least 1: '{part}'")
        if rpe is not None and rpe > 10:
            raise ValidationError(f"RPE must be between 0 and 10: {rpe}")

        sets.extend(CompletedSet(weight=weight, reps=reps, rpe=rpe, completed=completed) for _ in range(count))

    if not sets:
        raise ValidationError("No valid sets found in sets string")

    return sets


def parse_exercise_entry(entry: str) -> tuple[str, list[CompletedSet]]:
    """
    Parse one logged exercise: "Name: sets".

    Example:
        "Bench Press: 80x5x3, 80x4@9" → ("Bench Press", [4 sets])

    Raises:
        ValidationError: If the entry has no name or an invalid sets string
    """
    name, sep, sets_str = entry.partition(":")
    name = name.strip()
    if not sep or not name:
        raise ValidationError(f"Invalid exercise entry: '{entry}'. Use 'Name: 100x5x3'.")
    return name, parse_sets_string(sets_str)
