"""Shared fixtures: isolated HOME, fresh engine config, sample programme."""

import copy
import tempfile
from pathlib import Path

import pytest

from lift_scheduler.core.engine.config_loader import load_engine_config
from lift_scheduler.io.programme_store import ProgrammeStore


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path):
    """Point HOME at a temp dir so no user rules.yaml leaks into tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    load_engine_config.cache_clear()
    yield home
    load_engine_config.cache_clear()


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_data_dir):
    """An initialised ProgrammeStore in a temp dir."""
    s = ProgrammeStore(temp_data_dir)
    s.init()
    return s


def _structure(day: int, name: str, exercise: str) -> dict:
    return {
        "day": day,
        "name": name,
        "exercises": [{"name": exercise, "sets": 3, "reps": [5, 5, "5+"]}],
        "estimatedDuration": 45,
    }


PROGRAMME_DOCUMENT = {
    "id": "wave-basics",
    "name": "Wave Basics",
    "duration_weeks": 2,
    "goal": "STRENGTH",
    "weight_calculation_rules": {
        "basis": "ONE_REP_MAX",
        "training_max_percentage": 0.9,
        "rounding_increment": 2.5,
        "minimum_bar_weight": 20.0,
    },
    "progression_rules": {
        "type": "WAVE",
        "cycle_length": 3,
        "weekly_percentages": [[0.65, 0.75, 0.85], [0.70, 0.80, 0.90], [0.75, 0.85, 0.95]],
    },
    "workouts": [
        # Deliberately out of order: import sorts by (week, day)
        {"week_number": 2, "day_number": 1, "name": "Squat Day", "structure": _structure(1, "Squat Day", "Squat")},
        {"week_number": 1, "day_number": 1, "name": "Squat Day", "structure": _structure(1, "Squat Day", "Squat")},
        {"week_number": 1, "day_number": 2, "name": "Bench Day", "structure": _structure(2, "Bench Day", "Bench Press")},
        {"week_number": 2, "day_number": 2, "name": "Bench Day", "structure": _structure(2, "Bench Day", "Bench Press")},
    ],
}


@pytest.fixture
def programme_document():
    """A 2-week, 4-workout wave programme on a 1RM basis."""
    return copy.deepcopy(PROGRAMME_DOCUMENT)
