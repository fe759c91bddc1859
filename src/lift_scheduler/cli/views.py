"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of programmes, workouts and records.
"""

from rich.console import Console
from rich.table import Table

from ..core.completion import OneRMUpdate
from ..core.generation import GeneratedWorkout
from ..core.models import PersonalRecord, Programme, ProgrammeProgress, TraineeMax
from ..core.records import percent_of_one_rep_max
from ..core.weights import format_weight, round_weight

console = Console()


_STATUS_STYLE = {
    "NOT_STARTED": "dim",
    "IN_PROGRESS": "yellow",
    "COMPLETED": "green",
}


def format_programmes_table(
    programmes: list[Programme],
    progress: dict[str, ProgrammeProgress | None],
) -> Table:
    """
    Create a Rich table listing stored programmes.

    Args:
        programmes: Programmes to display
        progress: Progress per programme id (None = never activated)

    Returns:
        Rich Table object
    """
    table = Table(title="Programmes")

    table.add_column("", width=1)
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Weeks", justify="right")
    table.add_column("Basis", style="magenta")
    table.add_column("Status")
    table.add_column("Done", justify="right")

    for programme in programmes:
        p = progress.get(programme.id)
        style = _STATUS_STYLE.get(programme.status, "")
        table.add_row(
            "*" if programme.is_active else "",
            programme.id,
            programme.name,
            str(programme.duration_weeks),
            programme.basis or "-",
            f"[{style}]{programme.status}[/{style}]",
            f"{p.completed_workouts}/{p.total_workouts}" if p else "-",
        )

    return table


def format_progress_display(programme: Programme, progress: ProgrammeProgress | None) -> str:
    """
    Format programme progress as text block.

    Args:
        programme: Programme to describe
        progress: Its progress (None = never activated)

    Returns:
        Formatted string
    """
    lines = [
        f"[bold cyan]{programme.name}[/bold cyan] ({programme.id})",
        f"  Status:      {programme.status}{' (active)' if programme.is_active else ''}",
    ]
    if progress is None:
        lines.append("  Not activated yet.")
        return "\n".join(lines)

    lines += [
        f"  Workouts:    {progress.completed_workouts}/{progress.total_workouts}",
        f"  Adherence:   {progress.adherence_percentage:.1f}%",
    ]
    if programme.status != "COMPLETED":
        lines.append(f"  Next:        week {progress.current_week}, day {progress.current_day}")
    if progress.last_workout_date:
        lines.append(f"  Last:        {progress.last_workout_date}")
    if programme.completed_at:
        lines.append(f"  Completed:   {programme.completed_at}")
    return "\n".join(lines)


def format_workout_table(workout: GeneratedWorkout) -> Table:
    """
    Create a Rich table with every prescribed set of a workout.

    Args:
        workout: Generated workout

    Returns:
        Rich Table object
    """
    title = f"Week {workout.week_number} Day {workout.day_number}: {workout.name}"
    table = Table(title=title)

    table.add_column("Exercise", style="cyan")
    table.add_column("Set", justify="right", style="dim")
    table.add_column("Reps", justify="right")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("%TM", justify="right")
    table.add_column("Notes")

    for exercise in workout.exercises:
        for s in exercise.sets:
            first = s.set_number == 1
            notes = ""
            if first:
                parts = []
                if exercise.decision is not None:
                    parts.append(exercise.decision.reason)
                if exercise.note:
                    parts.append(exercise.note)
                notes = "; ".join(parts)
            table.add_row(
                exercise.name if first else "",
                str(s.set_number),
                str(s.target_reps),
                format_weight(s.weight),
                f"{s.intensity}%" if s.intensity is not None else "",
                notes,
            )

    return table


def print_workout(workout: GeneratedWorkout) -> None:
    """
    Print a generated workout to console.

    Args:
        workout: Workout to display
    """
    console.print(format_workout_table(workout))
    if workout.estimated_duration:
        console.print(f"[dim]Estimated duration: {workout.estimated_duration} min[/dim]")
    for name in workout.skipped:
        print_warning(f"Skipped slot: {name}")


def format_records_table(records: list[PersonalRecord]) -> Table:
    """Create a Rich table of personal records."""
    table = Table(title="Personal Records")

    table.add_column("Date", style="cyan")
    table.add_column("Exercise")
    table.add_column("Type", style="magenta")
    table.add_column("Set", justify="right")
    table.add_column("e1RM", justify="right", style="bold")
    table.add_column("Gain", justify="right", style="green")

    for r in records:
        table.add_row(
            r.record_date,
            r.exercise_id,
            "weight" if r.record_type == "WEIGHT_PR" else "e1RM",
            f"{format_weight(r.weight)} × {r.reps}",
            format_weight(r.estimated_1rm),
            f"+{r.improvement_percentage:.1f}%" if r.improvement_percentage is not None else "first",
        )

    return table


def format_maxes_table(maxes: list[TraineeMax]) -> Table:
    """Create a Rich table of stored 1RM estimates."""
    table = Table(title="Estimated 1RMs")

    table.add_column("Exercise", style="cyan")
    table.add_column("1RM", justify="right", style="bold")
    table.add_column("Confidence", justify="right")
    table.add_column("Date")
    table.add_column("From")

    for m in maxes:
        table.add_row(
            m.exercise_id,
            format_weight(m.one_rm_estimate),
            f"{m.confidence:.0%}",
            m.date,
            m.context,
        )

    return table


def print_records(records: list[PersonalRecord]) -> None:
    """
    Print personal records to console.

    Args:
        records: Records to display
    """
    if not records:
        console.print("[yellow]No personal records yet.[/yellow]")
        return
    console.print(format_records_table(records))


def print_completion(records: list[PersonalRecord], max_updates: list[OneRMUpdate]) -> None:
    """Announce new records and raised maxes after a workout."""
    for r in records:
        label = "Weight PR" if r.record_type == "WEIGHT_PR" else "Estimated 1RM PR"
        value = r.weight if r.record_type == "WEIGHT_PR" else r.estimated_1rm
        console.print(f"[bold green]{label}:[/bold green] {r.exercise_id} {format_weight(value)}")
    for u in max_updates:
        was = f" (was {format_weight(u.previous)})" if u.previous is not None else ""
        console.print(f"[green]1RM updated:[/green] {u.exercise_id} → {format_weight(u.new_max.one_rm_estimate)}{was}")


def print_percentage_table(one_rep_max: float, reps_range: range = range(1, 13)) -> None:
    """Print the weight a trainee should manage for each rep count."""
    table = Table(title=f"Rep maxes from 1RM {format_weight(one_rep_max)}")
    table.add_column("Reps", justify="right")
    table.add_column("%1RM", justify="right")
    table.add_column("Weight", justify="right", style="bold")

    for reps in reps_range:
        pct = percent_of_one_rep_max(reps)
        table.add_row(str(reps), f"{pct:.0%}", format_weight(round_weight(one_rep_max * pct)))

    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
