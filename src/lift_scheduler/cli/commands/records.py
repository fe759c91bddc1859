"""Record commands: records, maxes, set-max, e1rm."""

import json
from dataclasses import asdict
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.models import TraineeMax
from ...core.records import OutOfDomainError, estimated_one_rep_max
from ...core.weights import format_weight, round_weight
from ...io.programme_store import StoreError
from ...io.serializers import ValidationError, validate_date
from .. import views
from ..app import DataDirOption, JsonOption, app, require_store


@app.command()
def records(
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only this exercise"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show personal records.
    """
    store = require_store(data_dir)
    try:
        found = store.load_records(exercise)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([asdict(r) for r in found], indent=2))
        return

    views.print_records(found)


@app.command()
def maxes(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show stored 1RM estimates.
    """
    store = require_store(data_dir)
    try:
        stored = sorted(store.load_maxes().values(), key=lambda m: m.exercise_id.lower())
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([asdict(m) for m in stored], indent=2))
        return

    if not stored:
        views.console.print("[yellow]No maxes stored yet. Use 'set-max' or log some workouts.[/yellow]")
        return
    views.console.print(views.format_maxes_table(stored))


@app.command("set-max")
def set_max(
    exercise: Annotated[str, typer.Argument(help="Exercise name or alias (squat, bench, deadlift, ohp)")],
    weight: Annotated[float, typer.Argument(help="1RM in kg")],
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Date of the max (YYYY-MM-DD, default: today)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Set a 1RM directly, e.g. after a tested single.

    Unlike maxes raised by logged workouts, this may lower a stored value.
    """
    store = require_store(data_dir)
    if weight <= 0:
        views.print_error("Weight must be positive")
        raise typer.Exit(1)
    try:
        when = validate_date(date) if date else datetime.now().strftime("%Y-%m-%d")
        store.save_max(
            TraineeMax(
                exercise_id=exercise,
                one_rm_estimate=round_weight(weight),
                date=when,
                confidence=1.0,
                context="entered manually",
            )
        )
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"1RM for {exercise} set to {format_weight(weight)}")


@app.command("e1rm")
def e1rm(
    weight: Annotated[float, typer.Argument(help="Weight lifted in kg")],
    reps: Annotated[int, typer.Argument(help="Reps completed (1-36)")],
    json_out: JsonOption = False,
) -> None:
    """
    Estimate a 1RM from one set (Brzycki) and show matching rep maxes.
    """
    try:
        estimate = round_weight(estimated_one_rep_max(weight, reps))
    except OutOfDomainError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({"weight": weight, "reps": reps, "estimated_1rm": estimate}, indent=2))
        return

    views.console.print()
    views.console.print(f"[bold cyan]Estimated 1RM:[/bold cyan] {format_weight(estimate)}")
    views.console.print(f"  from {format_weight(weight)} × {reps}  (Brzycki: w × 36 / (37 − r))")
    views.console.print()
    views.print_percentage_table(estimate)
