"""
Persisted programme progress.

Loads a programme's state from the store, applies the core.progress state
machine and writes the result back in a single document write.

Concurrency: one writer per programme is assumed.  There is no lock or
version token on the stored progress, so two completions of the same
programme racing from different processes can lose an increment.

Write failures here are logged and swallowed: the workout that triggered
the update has already been saved by the caller.

Only workouts whose structure parses are scheduled.  An unparseable workout
is left out of the schedule: it is not served and does not count towards
total_workouts.
"""

import logging
from dataclasses import replace
from datetime import datetime

from ..core.models import ProgrammeProgress, ProgrammeWorkout, WorkoutStructure
from ..core.progress import advance, initial_progress
from ..io.programme_store import ProgrammeStore, StoreError
from ..io.serializers import ValidationError
from ..io.structure_parser import parse_programme_workouts

logger = logging.getLogger(__name__)


def scheduled_workouts(store: ProgrammeStore, programme_id: str) -> list[tuple[ProgrammeWorkout, WorkoutStructure]]:
    """A programme's parseable workouts in template order, with their structures."""
    return parse_programme_workouts(store.load_workouts(programme_id))


def activate_programme(store: ProgrammeStore, programme_id: str) -> ProgrammeProgress:
    """
    Make a programme the active one, creating its progress record.

    Any other active programme is deactivated.  Existing progress is kept.

    Args:
        store: Programme store
        programme_id: Programme to activate

    Returns:
        The programme's progress

    Raises:
        StoreError: If the programme cannot be read or written
        ValueError: If the programme is already completed
    """
    programme = store.load_programme(programme_id)
    if programme.status == "COMPLETED":
        raise ValueError(f"Programme {programme_id} is already completed")

    for other in store.list_programmes():
        if other.id != programme_id and other.is_active:
            store.update_programme(replace(other, is_active=False))
            logger.info("Deactivated programme %s", other.id)

    progress = store.load_progress(programme_id)
    if progress is None:
        progress = initial_progress(programme, [w for w, _ in scheduled_workouts(store, programme_id)])

    store.save_programme_state(replace(programme, is_active=True), progress)
    logger.info("Activated programme %s (%d workouts)", programme_id, progress.total_workouts)
    return progress


def advance_progress(
    store: ProgrammeStore,
    programme_id: str,
    now: datetime | None = None,
) -> ProgrammeProgress | None:
    """
    Record one completed workout against a programme's progress.

    Args:
        store: Programme store
        programme_id: Programme the workout belongs to
        now: Event time (default: now)

    Returns:
        The updated progress; the last stored progress if the write failed;
        None if the programme could not be read at all
    """
    now = now or datetime.now()

    try:
        programme = store.load_programme(programme_id)
        workouts = [w for w, _ in scheduled_workouts(store, programme_id)]
        progress = store.load_progress(programme_id) or initial_progress(programme, workouts)
    except (StoreError, ValidationError, OSError):
        logger.exception("Could not load progress for programme %s", programme_id)
        return None

    if programme.status == "COMPLETED":
        logger.debug("Programme %s already completed; progress unchanged", programme_id)
        return progress

    transition = advance(programme, progress, workouts, now)

    try:
        store.save_programme_state(transition.programme, transition.progress)
    except (StoreError, OSError):
        logger.exception("Could not save progress for programme %s", programme_id)
        return progress

    if transition.total_corrected:
        logger.info(
            "Programme %s: total workouts corrected to %d",
            programme_id, transition.progress.total_workouts,
        )
    if transition.completed_now:
        logger.info("Programme %s completed", programme_id)
    return transition.progress
