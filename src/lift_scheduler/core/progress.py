"""
Programme-progress state machine.

    NOT_STARTED ──first workout──▶ IN_PROGRESS ──last workout──▶ COMPLETED

Each "workout completed" event:

  1. increments completed_workouts
  2. moves current_week/current_day to the next workout in template order
  3. if there is no next workout and the programme is custom, re-checks
     total_workouts against the workouts actually stored; an undercount is
     corrected instead of completing early
  4. completes the programme once completed ≥ total (total > 0): status,
     completed_at and is_active change together
  5. recomputes adherence = completed / total × 100 (0 when total is 0)

COMPLETED is terminal: further events return the state unchanged.

These functions are pure.  services.progress_tracker persists the result.
"""

from dataclasses import dataclass, replace
from datetime import datetime

from .models import Programme, ProgrammeProgress, ProgrammeWorkout


@dataclass
class ProgressTransition:
    """Result of applying one workout-completed event."""

    programme: Programme
    progress: ProgrammeProgress
    completed_now: bool = False
    total_corrected: bool = False


def adherence_percentage(completed: int, total: int) -> float:
    """completed / total × 100, rounded to 0.1; 0 when total is 0."""
    if total <= 0:
        return 0.0
    return round(completed / total * 100, 1)


def initial_progress(programme: Programme, workouts: list[ProgrammeWorkout]) -> ProgrammeProgress:
    """
    Fresh progress for a programme, pointing at its first workout.

    Args:
        programme: Programme being started
        workouts: Stored workouts in template order

    Returns:
        ProgrammeProgress with zero completed workouts
    """
    first = workouts[0] if workouts else None
    return ProgrammeProgress(
        programme_id=programme.id,
        current_week=first.week_number if first else 1,
        current_day=first.day_number if first else 1,
        completed_workouts=0,
        total_workouts=len(workouts),
    )


def advance(
    programme: Programme,
    progress: ProgrammeProgress,
    workouts: list[ProgrammeWorkout],
    now: datetime,
) -> ProgressTransition:
    """
    Apply one workout-completed event.

    Args:
        programme: Current programme state
        progress: Current progress state
        workouts: Stored workouts in template order
        now: Time of the event

    Returns:
        ProgressTransition with the new programme and progress
    """
    if programme.status == "COMPLETED":
        return ProgressTransition(programme=programme, progress=progress)

    if programme.status == "NOT_STARTED":
        programme = replace(
            programme,
            status="IN_PROGRESS",
            started_at=programme.started_at or now.isoformat(timespec="seconds"),
        )

    completed = progress.completed_workouts + 1
    total = progress.total_workouts
    week, day = progress.current_week, progress.current_day
    corrected = False

    next_workout = workouts[completed] if completed < total and completed < len(workouts) else None

    if next_workout is None and programme.is_custom and len(workouts) > total:
        total = len(workouts)
        corrected = True
        if completed < total:
            next_workout = workouts[completed]

    if next_workout is not None:
        week, day = next_workout.week_number, next_workout.day_number

    completed_now = total > 0 and completed >= total
    if completed_now:
        programme = replace(
            programme,
            status="COMPLETED",
            completed_at=now.isoformat(timespec="seconds"),
            is_active=False,
        )

    completed = min(completed, total)
    return ProgressTransition(
        programme=programme,
        progress=replace(
            progress,
            current_week=week,
            current_day=day,
            completed_workouts=completed,
            total_workouts=total,
            adherence_percentage=adherence_percentage(completed, total),
            last_workout_date=now.date().isoformat(),
        ),
        completed_now=completed_now,
        total_corrected=corrected,
    )
