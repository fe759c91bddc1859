"""Workout commands: next-workout, log-workout."""

import json
from dataclasses import asdict
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.weights import format_weight
from ...io.programme_store import StoreError
from ...io.serializers import ValidationError, parse_exercise_entry, validate_date
from ...services.workouts import complete_workout, next_workout
from .. import views
from ..app import DataDirOption, JsonOption, ProgrammeOption, app, require_store, resolve_programme


@app.command("next-workout")
def next_workout_cmd(
    programme_id: ProgrammeOption = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the next workout with a prescribed weight for every set.
    """
    store = require_store(data_dir)
    programme = resolve_programme(store, programme_id)

    try:
        workout = next_workout(store, programme.id)
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if workout is None:
        if programme.status == "COMPLETED":
            views.print_success(f"{programme.name} is complete.")
        else:
            views.print_warning("No remaining workouts could be read for this programme.")
        return

    if json_out:
        print(json.dumps(asdict(workout), indent=2))
        return

    views.console.print()
    views.print_workout(workout)
    views.console.print()


@app.command("log-workout")
def log_workout(
    entries: Annotated[
        Optional[list[str]],
        typer.Option(
            "--exercise", "-e",
            help="Logged exercise, repeatable: 'Squat: 100x5x3' or 'Bench Press: 80x5@8, 80x4!'",
        ),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: today)"),
    ] = None,
    programme_id: ProgrammeOption = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log a completed workout of the programme.

    Sets are WEIGHTxREPS or WEIGHTxREPSxSETS, with optional @RPE; a trailing
    '!' marks a set that was not completed:

      lift-scheduler log-workout -e "Squat: 100x5x3" -e "Bench Press: 80x5@8, 80x4!"
    """
    store = require_store(data_dir)
    programme = resolve_programme(store, programme_id)

    if programme.status == "COMPLETED":
        views.print_error(f"{programme.name} is already complete.")
        raise typer.Exit(1)

    if not entries:
        views.print_error("Give at least one --exercise entry.")
        raise typer.Exit(1)

    try:
        sets = []
        for entry in entries:
            name, logged = parse_exercise_entry(entry)
            sets.extend((name, s) for s in logged)
        when = datetime.strptime(validate_date(date), "%Y-%m-%d") if date else datetime.now()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        planned = next_workout(store, programme.id)
    except (StoreError, ValidationError):
        planned = None

    try:
        result = complete_workout(store, programme.id, sets, now=when, workout=planned)
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "records": [asdict(r) for r in result.records],
            "max_updates": [asdict(u) for u in result.max_updates],
            "progress": asdict(result.progress) if result.progress else None,
        }, indent=2))
        return

    for record in result.performance:
        reps = "/".join(str(r) for r in record.achieved_reps)
        views.console.print(f"Logged {record.exercise_name}: {format_weight(record.weight)} × {reps}")
    views.print_completion(result.records, result.max_updates)

    if result.progress is None:
        views.print_warning("Workout saved, but programme progress could not be updated.")
        return
    views.print_success(
        f"Progress: {result.progress.completed_workouts}/{result.progress.total_workouts} "
        f"({result.progress.adherence_percentage:.1f}%)"
    )
    if result.progress.total_workouts and result.progress.completed_workouts >= result.progress.total_workouts:
        views.print_success(f"{programme.name} complete!")
