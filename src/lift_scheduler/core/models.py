"""
Data models for lift-scheduler.

All core dataclasses representing programme templates, training history,
records and programme progress.  Enumerations are plain string literals so
they serialise to JSON unchanged.
"""

from dataclasses import dataclass, field
from typing import Literal

from .config import (
    DEFAULT_MINIMUM_BAR_WEIGHT,
    DEFAULT_ROUNDING_INCREMENT,
    DEFAULT_TRAINING_MAX_PERCENTAGE,
)
from .reps import RepsScheme

WeightBasis = Literal["ONE_REP_MAX", "LAST_WORKOUT"]
ProgressionType = Literal["LINEAR", "WAVE"]
ProgrammeStatus = Literal["NOT_STARTED", "IN_PROGRESS", "COMPLETED"]
ProgrammeGoal = Literal["STRENGTH", "HYPERTROPHY", "ENDURANCE", "GENERAL"]
ProgressionAction = Literal["INCREASE", "REPEAT", "DELOAD"]
RecordType = Literal["WEIGHT_PR", "ESTIMATED_1RM_PR"]

WEIGHT_BASES: tuple[str, ...] = ("ONE_REP_MAX", "LAST_WORKOUT")
PROGRESSION_TYPES: tuple[str, ...] = ("LINEAR", "WAVE")
PROGRAMME_STATUSES: tuple[str, ...] = ("NOT_STARTED", "IN_PROGRESS", "COMPLETED")
PROGRAMME_GOALS: tuple[str, ...] = ("STRENGTH", "HYPERTROPHY", "ENDURANCE", "GENERAL")


# =============================================================================
# Programme template
# =============================================================================


@dataclass
class ExerciseStructure:
    """
    One exercise slot in a template workout.

    ``intensity`` holds per-set percentages of training max (e.g. [65, 75, 85]);
    ``weights`` holds explicit per-set weights written by the programme author.
    ``suggested_weight``/``weight_source`` come from the programme generator.
    """

    name: str
    sets: int
    reps: RepsScheme
    intensity: list[int] | None = None
    weights: list[float] | None = None
    note: str | None = None
    suggested_weight: float | None = None
    weight_source: str | None = None
    category: str | None = None
    progression: str = "linear"

    def __post_init__(self) -> None:
        """Validate slot data."""
        if self.sets < 0:
            raise ValueError("sets must be non-negative")
        if self.intensity is not None and any(p < 0 for p in self.intensity):
            raise ValueError("intensity percentages must be non-negative")
        if self.weights is not None and any(w < 0 for w in self.weights):
            raise ValueError("weights must be non-negative")

    def static_intensity(self, set_index: int) -> int | None:
        """Template intensity for a set; a short list reuses its first value."""
        if not self.intensity:
            return None
        if set_index < len(self.intensity):
            return self.intensity[set_index]
        return self.intensity[0]

    def explicit_weight(self, set_index: int) -> float | None:
        """Author-specified weight for a set, if the template has one."""
        if not self.weights or set_index >= len(self.weights):
            return None
        return self.weights[set_index]


@dataclass
class WorkoutStructure:
    """A template workout: one training day of a programme week."""

    day: int
    name: str
    exercises: list[ExerciseStructure] = field(default_factory=list)
    estimated_duration: int | None = None


@dataclass
class ProgrammeWorkout:
    """
    A stored workout of a programme, in template order.

    ``structure_json`` is kept raw: it is parsed lazily (and repaired if
    needed) by io.structure_parser when the workout is generated.
    """

    week_number: int
    day_number: int
    name: str
    structure_json: str


@dataclass
class WeightCalculationRules:
    """How a programme turns a template slot into a weight."""

    basis: WeightBasis = "ONE_REP_MAX"
    training_max_percentage: float | None = DEFAULT_TRAINING_MAX_PERCENTAGE
    rounding_increment: float | None = DEFAULT_ROUNDING_INCREMENT
    minimum_bar_weight: float | None = DEFAULT_MINIMUM_BAR_WEIGHT

    def __post_init__(self) -> None:
        if self.basis not in WEIGHT_BASES:
            raise ValueError(f"Invalid basis: {self.basis}")


@dataclass
class ProgressionRules:
    """
    How working weights move across sessions and weeks.

    ``weekly_percentages`` is indexed [cycle_week][set] and holds fractions
    of training max (0.65 = 65%).  Unset numeric rules fall back to the
    engine defaults in rules.yaml / config.py.
    """

    type: ProgressionType = "LINEAR"
    weekly_percentages: list[list[float]] | None = None
    cycle_length: int | None = None
    increment_rules: dict[str, float] = field(default_factory=dict)
    deload_threshold: int | None = None
    deload_fraction: float | None = None
    allowed_missed_reps: int | None = None

    def __post_init__(self) -> None:
        if self.type not in PROGRESSION_TYPES:
            raise ValueError(f"Invalid progression type: {self.type}")
        if self.deload_fraction is not None and not 0 <= self.deload_fraction < 1:
            raise ValueError("deload_fraction must be in [0, 1)")


@dataclass
class Programme:
    """A multi-week training programme."""

    id: str
    name: str
    duration_weeks: int
    is_custom: bool = False
    is_active: bool = False
    status: ProgrammeStatus = "NOT_STARTED"
    goal: ProgrammeGoal = "GENERAL"
    weight_calculation_rules: WeightCalculationRules | None = None
    progression_rules: ProgressionRules | None = None
    started_at: str | None = None
    completed_at: str | None = None

    def __post_init__(self) -> None:
        """Validate programme state consistency."""
        if self.status not in PROGRAMME_STATUSES:
            raise ValueError(f"Invalid status: {self.status}")
        if self.goal not in PROGRAMME_GOALS:
            raise ValueError(f"Invalid goal: {self.goal}")
        if self.duration_weeks < 0:
            raise ValueError("duration_weeks must be non-negative")
        if self.status == "COMPLETED" and self.is_active:
            raise ValueError("A COMPLETED programme cannot be active")
        if (self.status == "COMPLETED") != (self.completed_at is not None):
            raise ValueError(
                f"status={self.status} but completed_at={self.completed_at}: "
                "COMPLETED programmes must have completed_at set, others must not"
            )

    @property
    def basis(self) -> str | None:
        """Weight basis, or None when the programme has no calculation rules."""
        return self.weight_calculation_rules.basis if self.weight_calculation_rules else None


@dataclass
class ProgrammeProgress:
    """
    Where a trainee is within a programme.

    Invariant: completed_workouts <= total_workouts.
    """

    programme_id: str
    current_week: int = 1
    current_day: int = 1
    completed_workouts: int = 0
    total_workouts: int = 0
    adherence_percentage: float = 0.0
    last_workout_date: str | None = None

    def __post_init__(self) -> None:
        if self.completed_workouts < 0 or self.total_workouts < 0:
            raise ValueError("workout counts must be non-negative")
        if self.completed_workouts > self.total_workouts:
            raise ValueError(
                f"completed_workouts ({self.completed_workouts}) exceeds "
                f"total_workouts ({self.total_workouts})"
            )


# =============================================================================
# Training history and records
# =============================================================================


@dataclass
class CompletedSet:
    """A set as logged by the trainee."""

    weight: float
    reps: int
    rpe: float | None = None
    completed: bool = True

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.rpe is not None and not 0 <= self.rpe <= 10:
            raise ValueError("rpe must be between 0 and 10")


@dataclass
class PerformanceRecord:
    """
    One exercise's outcome in one session.

    ``target_reps``/``achieved_reps`` are per set, in set order.
    """

    exercise_name: str
    date: str  # ISO format: YYYY-MM-DD
    weight: float
    target_reps: list[int] = field(default_factory=list)
    achieved_reps: list[int] = field(default_factory=list)
    is_deload: bool = False

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if any(r < 0 for r in self.target_reps + self.achieved_reps):
            raise ValueError("reps must be non-negative")

    @property
    def missed_reps(self) -> int:
        """Total reps short of target, summed over sets (missing sets count in full)."""
        missed = 0
        for i, target in enumerate(self.target_reps):
            achieved = self.achieved_reps[i] if i < len(self.achieved_reps) else 0
            missed += max(0, target - achieved)
        return missed

    def was_successful(self, allowed_missed_reps: int = 0) -> bool:
        """True when every planned set was done and no more than the allowance was missed."""
        if len(self.achieved_reps) < len(self.target_reps):
            return False
        return self.missed_reps <= allowed_missed_reps


@dataclass(frozen=True)
class PersonalRecord:
    """A newly achieved best.  Created once, never mutated."""

    exercise_id: str
    weight: float
    reps: int
    estimated_1rm: float
    record_date: str
    record_type: RecordType
    previous_best: float | None = None
    improvement_percentage: float | None = None


@dataclass
class TraineeMax:
    """Cached 1RM estimate for one exercise.  Only ever raised."""

    exercise_id: str
    one_rm_estimate: float
    date: str
    confidence: float = 0.0
    context: str = ""


@dataclass
class ProgressionDecision:
    """Next-session weight for one exercise and why."""

    weight: float
    action: ProgressionAction
    reason: str
    is_deload: bool = False
    previous_weight: float | None = None
    failure_streak: int = 0
