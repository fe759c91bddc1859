"""
Store-backed operations: programme import and activation, workout
generation and completion, and persisted progress.
"""

from .progress_tracker import activate_programme, advance_progress
from .workouts import WorkoutCompletion, complete_workout, import_programme, next_workout

__all__ = [
    "WorkoutCompletion",
    "activate_programme",
    "advance_progress",
    "complete_workout",
    "import_programme",
    "next_workout",
]
