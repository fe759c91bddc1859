"""Programme commands: init, import-programme, add-workout, activate, list, status, delete-programme."""

import json
from pathlib import Path
from typing import Annotated

import typer

from ...core.models import ProgrammeWorkout
from ...io.programme_store import StoreError
from ...io.serializers import ValidationError, progress_to_dict
from ...io.structure_parser import ParseError, parse_workout_structure
from ...services.progress_tracker import activate_programme
from ...services.workouts import import_programme
from .. import views
from ..app import DataDirOption, JsonOption, ProgrammeOption, app, get_store, require_store, resolve_programme


def _read_json_file(path: Path) -> dict:
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        views.print_error(f"Cannot read {path}: {e}")
        raise typer.Exit(1)


@app.command()
def init(data_dir: DataDirOption = None) -> None:
    """
    Create the data directory.
    """
    store = get_store(data_dir)
    store.init()
    views.print_success(f"Initialised {store.data_dir}")


@app.command("import-programme")
def import_programme_cmd(
    path: Annotated[Path, typer.Argument(help="Programme JSON file")],
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Replace a programme with the same id"),
    ] = False,
    activate: Annotated[
        bool,
        typer.Option("--activate", "-a", help="Make it the active programme"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Import a programme and its workouts from a JSON file.
    """
    store = require_store(data_dir)
    document = _read_json_file(path)

    try:
        programme = import_programme(store, document, overwrite=overwrite)
    except (ValidationError, StoreError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    count = store.count_workouts(programme.id)
    views.print_success(f"Imported {programme.name} ({programme.id}): {count} workouts")

    if activate:
        activate_programme(store, programme.id)
        views.print_success(f"{programme.id} is now active")


@app.command("add-workout")
def add_workout(
    programme_id: Annotated[str, typer.Argument(help="Custom programme id")],
    structure: Annotated[Path, typer.Option("--structure", "-s", help="Workout structure JSON file")],
    week: Annotated[int, typer.Option("--week", "-w", help="Programme week (1-based)")],
    day: Annotated[int, typer.Option("--day", "-d", help="Day within the week (1-based)")],
    name: Annotated[str, typer.Option("--name", "-n", help="Workout name")] = "",
    data_dir: DataDirOption = None,
) -> None:
    """
    Append a workout to a custom programme.
    """
    store = require_store(data_dir)
    programme = resolve_programme(store, programme_id)
    if not programme.is_custom:
        views.print_error(f"{programme.id} is not a custom programme")
        raise typer.Exit(1)
    if week < 1 or day < 1:
        views.print_error("Week and day must be positive")
        raise typer.Exit(1)

    if not structure.exists():
        views.print_error(f"Structure file not found: {structure}")
        raise typer.Exit(1)
    raw = structure.read_text()
    try:
        parsed = parse_workout_structure(raw)
    except ParseError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.append_workout(
        programme.id,
        ProgrammeWorkout(week_number=week, day_number=day, name=name or parsed.name, structure_json=raw),
    )
    views.print_success(f"Added week {week} day {day} to {programme.id}")


@app.command()
def activate(
    programme_id: Annotated[str, typer.Argument(help="Programme id")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Make a programme the active one.
    """
    store = require_store(data_dir)
    try:
        progress = activate_programme(store, programme_id)
    except (StoreError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Activated {programme_id}: week {progress.current_week} day {progress.current_day} is next"
    )


@app.command("list")
def list_programmes(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List stored programmes.
    """
    store = require_store(data_dir)
    try:
        programmes = store.list_programmes()
        progress = {p.id: store.load_progress(p.id) for p in programmes}
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([
            {
                "id": p.id,
                "name": p.name,
                "status": p.status,
                "is_active": p.is_active,
                "progress": progress_to_dict(progress[p.id]) if progress[p.id] else None,
            }
            for p in programmes
        ], indent=2))
        return

    if not programmes:
        views.console.print("[yellow]No programmes yet. Use 'import-programme'.[/yellow]")
        return
    views.console.print(views.format_programmes_table(programmes, progress))


@app.command()
def status(
    programme_id: ProgrammeOption = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show a programme's progress.
    """
    store = require_store(data_dir)
    programme = resolve_programme(store, programme_id)
    progress = store.load_progress(programme.id)

    if json_out:
        print(json.dumps({
            "id": programme.id,
            "status": programme.status,
            "is_active": programme.is_active,
            "completed_at": programme.completed_at,
            "progress": progress_to_dict(progress) if progress else None,
        }, indent=2))
        return

    views.console.print()
    views.console.print(views.format_progress_display(programme, progress))
    views.console.print()


@app.command("delete-programme")
def delete_programme(
    programme_id: Annotated[str, typer.Argument(help="Programme id")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a programme with its workouts and progress.

    Logged history, records and maxes are kept.
    """
    store = require_store(data_dir)
    programme = resolve_programme(store, programme_id)
    views.console.print(f"Programme to delete: [bold]{programme.name}[/bold] ({programme.id}, {programme.status})")

    if not force and not views.confirm_action("Delete this programme?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete_programme(programme.id)
    except StoreError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted {programme.id}")
