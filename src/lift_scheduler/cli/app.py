"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.models import Programme
from ..io.programme_store import ProgrammeStore, StoreError, get_default_data_dir
from ..io.serializers import ValidationError
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Data directory (default: ~/.lift-scheduler)"),
]

# Shared --programme option type: defaults to the active programme
ProgrammeOption = Annotated[
    Optional[str],
    typer.Option("--programme", "-P", help="Programme id (default: the active programme)"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="lift-scheduler",
    help="Strength-training programme runner: weight prescription, progression and PR tracking.",
    no_args_is_help=True,
)


def get_store(data_dir: Path | None) -> ProgrammeStore:
    """Get programme store from path or default location."""
    return ProgrammeStore(data_dir if data_dir is not None else get_default_data_dir())


def require_store(data_dir: Path | None) -> ProgrammeStore:
    """Get an initialised store or exit with a hint."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"Data directory not initialised: {store.data_dir}")
        views.print_info("Run 'init' first.")
        raise typer.Exit(1)
    return store


def resolve_programme(store: ProgrammeStore, programme_id: str | None) -> Programme:
    """Load the named programme, or the active one; exit with a message if none."""
    try:
        if programme_id is not None:
            return store.load_programme(programme_id)
        programme = store.active_programme()
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if programme is None:
        views.print_error("No active programme.")
        views.print_info("Run 'activate <programme-id>' or pass --programme.")
        raise typer.Exit(1)
    return programme
