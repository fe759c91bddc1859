"""
JSON-file storage for programmes, progress, history and records.

Layout under the data directory (default ~/.lift-scheduler):

    programmes/<id>.json   programme + workouts + progress (one document)
    history.jsonl          one PerformanceRecord per line
    records.jsonl          one PersonalRecord per line (append-only)
    maxes.json             {exercise_id: TraineeMax}

A programme document is always rewritten whole through a temp file and
os.replace, so a programme's status and its progress change together.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from ..core.models import PerformanceRecord, PersonalRecord, Programme, ProgrammeProgress, ProgrammeWorkout, TraineeMax
from .serializers import (
    ValidationError,
    dict_to_performance_record,
    dict_to_personal_record,
    dict_to_programme,
    dict_to_programme_workout,
    dict_to_progress,
    dict_to_trainee_max,
    performance_record_to_dict,
    personal_record_to_dict,
    programme_to_dict,
    programme_workout_to_dict,
    progress_to_dict,
    to_json_line,
    trainee_max_to_dict,
)

_PROGRAMME_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class StoreError(Exception):
    """Raised when stored data cannot be read or written."""

    pass


def _atomic_write_json(path: Path, data: Any) -> None:
    """Write JSON to *path* via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


class ProgrammeStore:
    """
    Manages programme documents and training logs in a data directory.

    Single writer per programme: there is no file locking.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding all lift-scheduler data
        """
        self.data_dir = Path(data_dir)
        self.programmes_dir = self.data_dir / "programmes"
        self.history_path = self.data_dir / "history.jsonl"
        self.records_path = self.data_dir / "records.jsonl"
        self.maxes_path = self.data_dir / "maxes.json"

    def exists(self) -> bool:
        """Check if the data directory has been initialised."""
        return self.programmes_dir.is_dir()

    def init(self) -> None:
        """
        Create the data directory layout if it doesn't exist.
        """
        self.programmes_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.history_path, self.records_path):
            if not path.exists():
                path.touch()

    # ------------------------------------------------------------------
    # Programme documents
    # ------------------------------------------------------------------

    def _programme_path(self, programme_id: str) -> Path:
        if not _PROGRAMME_ID_RE.match(programme_id):
            raise StoreError(f"Invalid programme id: {programme_id!r}")
        return self.programmes_dir / f"{programme_id}.json"

    def _read_document(self, programme_id: str) -> dict[str, Any]:
        path = self._programme_path(programme_id)
        if not path.exists():
            raise StoreError(f"Programme not found: {programme_id}")
        try:
            with open(path, "r") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read programme {programme_id}: {e}") from e

    def _write_document(self, programme_id: str, document: dict[str, Any]) -> None:
        try:
            _atomic_write_json(self._programme_path(programme_id), document)
        except OSError as e:
            raise StoreError(f"Cannot write programme {programme_id}: {e}") from e

    def has_programme(self, programme_id: str) -> bool:
        """Check if a programme document exists."""
        return self._programme_path(programme_id).exists()

    def save_programme(
        self,
        programme: Programme,
        workouts: list[ProgrammeWorkout],
        progress: ProgrammeProgress | None = None,
    ) -> None:
        """
        Write a programme with its workouts (template order) and progress.

        Args:
            programme: Programme to save
            workouts: Stored workouts in template order
            progress: Progress record, if the programme has been activated
        """
        self._write_document(
            programme.id,
            {
                "programme": programme_to_dict(programme),
                "workouts": [programme_workout_to_dict(w) for w in workouts],
                "progress": progress_to_dict(progress) if progress else None,
            },
        )

    def load_programme(self, programme_id: str) -> Programme:
        """
        Load a programme.

        Raises:
            StoreError: If the programme doesn't exist or can't be read
            ValidationError: If the stored data is invalid
        """
        return dict_to_programme(self._read_document(programme_id)["programme"])

    def load_workouts(self, programme_id: str) -> list[ProgrammeWorkout]:
        """Load a programme's workouts in stored template order."""
        document = self._read_document(programme_id)
        return [dict_to_programme_workout(w) for w in document.get("workouts", [])]

    def count_workouts(self, programme_id: str) -> int:
        """Actual number of persisted workouts for a programme."""
        return len(self._read_document(programme_id).get("workouts", []))

    def load_progress(self, programme_id: str) -> ProgrammeProgress | None:
        """Load a programme's progress, or None if it was never activated."""
        data = self._read_document(programme_id).get("progress")
        return dict_to_progress(data) if data else None

    def update_programme(self, programme: Programme) -> None:
        """Replace a stored programme's own fields, keeping workouts and progress."""
        document = self._read_document(programme.id)
        document["programme"] = programme_to_dict(programme)
        self._write_document(programme.id, document)

    def append_workout(self, programme_id: str, workout: ProgrammeWorkout) -> None:
        """Add a workout to the end of a programme's template order."""
        document = self._read_document(programme_id)
        document.setdefault("workouts", []).append(programme_workout_to_dict(workout))
        self._write_document(programme_id, document)

    def save_programme_state(self, programme: Programme, progress: ProgrammeProgress) -> None:
        """
        Replace a programme and its progress in one write.

        Used for status transitions so status and progress never disagree.
        """
        if programme.id != progress.programme_id:
            raise StoreError(f"Progress for {progress.programme_id} cannot be saved on {programme.id}")
        document = self._read_document(programme.id)
        document["programme"] = programme_to_dict(programme)
        document["progress"] = progress_to_dict(progress)
        self._write_document(programme.id, document)

    def list_programmes(self) -> list[Programme]:
        """
        Load every stored programme, sorted by id.

        Unreadable documents raise, as with load_programme.
        """
        if not self.programmes_dir.exists():
            return []
        return [self.load_programme(p.stem) for p in sorted(self.programmes_dir.glob("*.json"))]

    def active_programme(self) -> Programme | None:
        """Return the active programme, or None."""
        for programme in self.list_programmes():
            if programme.is_active:
                return programme
        return None

    def delete_programme(self, programme_id: str) -> None:
        """Delete a programme document."""
        path = self._programme_path(programme_id)
        if not path.exists():
            raise StoreError(f"Programme not found: {programme_id}")
        path.unlink()

    # ------------------------------------------------------------------
    # Performance history
    # ------------------------------------------------------------------

    def _read_lines(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []
        rows: list[dict[str, Any]] = []
        with open(path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    rows.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise ValidationError(f"Error parsing line {line_num} in {path}: {e}") from e
        return rows

    def _append_lines(self, path: Path, rows: list[dict[str, Any]]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a") as f:
            for row in rows:
                f.write(to_json_line(row) + "\n")

    def append_performance(self, records: list[PerformanceRecord]) -> None:
        """Append performance records to the history log."""
        self._append_lines(self.history_path, [performance_record_to_dict(r) for r in records])

    def load_performance(self, exercise_name: str | None = None) -> list[PerformanceRecord]:
        """
        Load performance history, oldest first.

        Args:
            exercise_name: Only records for this exercise (case-insensitive)

        Returns:
            Records sorted by date; same-day records keep logging order
        """
        records = [dict_to_performance_record(d) for d in self._read_lines(self.history_path)]
        if exercise_name is not None:
            key = exercise_name.strip().lower()
            records = [r for r in records if r.exercise_name.strip().lower() == key]
        records.sort(key=lambda r: r.date)
        return records

    # ------------------------------------------------------------------
    # Personal records and maxes
    # ------------------------------------------------------------------

    def append_records(self, records: list[PersonalRecord]) -> None:
        """Append newly detected personal records."""
        self._append_lines(self.records_path, [personal_record_to_dict(r) for r in records])

    def load_records(self, exercise_id: str | None = None) -> list[PersonalRecord]:
        """Load personal records, oldest first, optionally for one exercise."""
        records = [dict_to_personal_record(d) for d in self._read_lines(self.records_path)]
        if exercise_id is not None:
            key = exercise_id.strip().lower()
            records = [r for r in records if r.exercise_id.strip().lower() == key]
        records.sort(key=lambda r: r.record_date)
        return records

    def best_weight(self, exercise_id: str) -> float | None:
        """Heaviest recorded weight for an exercise, or None."""
        weights = [r.weight for r in self.load_records(exercise_id) if r.record_type == "WEIGHT_PR"]
        return max(weights) if weights else None

    def best_estimated_1rm(self, exercise_id: str) -> float | None:
        """Best recorded estimated 1RM for an exercise, or None."""
        values = [r.estimated_1rm for r in self.load_records(exercise_id) if r.record_type == "ESTIMATED_1RM_PR"]
        return max(values) if values else None

    def load_maxes(self) -> dict[str, TraineeMax]:
        """Load all trainee maxes keyed by lower-cased exercise id."""
        if not self.maxes_path.exists():
            return {}
        try:
            with open(self.maxes_path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {self.maxes_path}: {e}") from e
        return {k.strip().lower(): dict_to_trainee_max(v) for k, v in data.items()}

    def get_max(self, exercise_id: str) -> TraineeMax | None:
        """Stored 1RM estimate for one exercise (case-insensitive), or None."""
        return self.load_maxes().get(exercise_id.strip().lower())

    def save_max(self, trainee_max: TraineeMax) -> None:
        """Insert or replace one exercise's stored max."""
        maxes = self.load_maxes()
        maxes[trainee_max.exercise_id.strip().lower()] = trainee_max
        try:
            _atomic_write_json(self.maxes_path, {k: trainee_max_to_dict(v) for k, v in sorted(maxes.items())})
        except OSError as e:
            raise StoreError(f"Cannot write {self.maxes_path}: {e}") from e


def get_default_data_dir() -> Path:
    """
    Get the default data directory.

    Returns:
        ~/.lift-scheduler
    """
    return Path.home() / ".lift-scheduler"

