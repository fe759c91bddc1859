"""
Tests for weight prescription, session progression and workout generation.
"""

import pytest

from lift_scheduler.core.generation import generate_workout
from lift_scheduler.core.models import (
    ExerciseStructure,
    PerformanceRecord,
    Programme,
    ProgressionRules,
    WeightCalculationRules,
    WorkoutStructure,
)
from lift_scheduler.core.prescription import prescribe
from lift_scheduler.core.progression import compute_progression, failure_streak
from lift_scheduler.core.reps import PerSet, Range, Single


def _programme(basis="ONE_REP_MAX", goal="GENERAL", progression=None, **rules):
    return Programme(
        id="p",
        name="Test",
        duration_weeks=4,
        goal=goal,
        weight_calculation_rules=WeightCalculationRules(basis=basis, **rules),
        progression_rules=progression or ProgressionRules(),
    )


def _session(weight, achieved, target=(5, 5, 5), is_deload=False, name="Squat"):
    return PerformanceRecord(
        exercise_name=name,
        date="2026-01-01",
        weight=weight,
        target_reps=list(target),
        achieved_reps=list(achieved),
        is_deload=is_deload,
    )


SUCCESS = (5, 5, 5)
FAIL = (5, 5, 3)


# ===========================================================================
# Prescription decision order
# ===========================================================================

class TestOneRepMaxBasis:
    """TM = max × tm_pct;  w = max(floor_inc(TM × pct / 100), min_bar)"""

    def test_floor_not_round_up(self):
        # 102 × 100% = 102 → floor to 2.5 → 100
        slot = ExerciseStructure(name="Squat", sets=1, reps=Single(1))
        programme = _programme(training_max_percentage=1.0, rounding_increment=2.5)
        assert prescribe(slot, 0, 1, intensity=100, programme=programme, known_max=102.0) == 100.0

    def test_training_max_percentage(self):
        # 140 × 0.9 = 126; 126 × 75% = 94.5 → 92.5
        slot = ExerciseStructure(name="Squat", sets=1, reps=Single(5))
        programme = _programme(training_max_percentage=0.9, rounding_increment=2.5)
        assert prescribe(slot, 0, 5, intensity=75, programme=programme, known_max=140.0) == 92.5

    def test_clamped_to_minimum_bar(self):
        # 40 × 40% = 16 → clamp 20
        slot = ExerciseStructure(name="Curl", sets=1, reps=Single(10))
        programme = _programme(training_max_percentage=1.0, minimum_bar_weight=20.0)
        assert prescribe(slot, 0, 10, intensity=40, programme=programme, known_max=40.0) == 20.0

    def test_unset_increment_uses_engine_default(self):
        # rules.yaml rounding_increment 2.5: 101 → 100
        slot = ExerciseStructure(name="Squat", sets=1, reps=Single(1))
        programme = _programme(training_max_percentage=1.0, rounding_increment=None)
        assert prescribe(slot, 0, 1, intensity=100, programme=programme, known_max=101.0) == 100.0


class TestExplicitAndSuggested:

    def test_one_rep_max_basis_outranks_template_weights(self):
        # 102 × 100% = 102 → floor 2.5 → 100; the listed 60 is not used
        slot = ExerciseStructure(name="Squat", sets=1, reps=Single(5), intensity=[100], weights=[60.0])
        programme = _programme()
        assert prescribe(slot, 0, 5, intensity=100, programme=programme, known_max=102.0) == 100.0

    def test_template_weight_used_without_max_and_rounded(self):
        # no max, no suggestion: 61.3 → 61.25 instead of the seed weight
        slot = ExerciseStructure(name="Squat", sets=2, reps=Single(5), intensity=[80], weights=[61.3])
        assert prescribe(slot, 0, 5, intensity=80, programme=_programme()) == 61.25

    def test_specific_suggestion_outranks_template_weight(self):
        slot = ExerciseStructure(
            name="Squat", sets=1, reps=Single(5), weights=[61.3], suggested_weight=52.5, weight_source="history"
        )
        assert prescribe(slot, 0, 5, programme=_programme()) == 52.5

    def test_set_without_template_weight_falls_through(self):
        # weights only cover set 1; set 2 falls to the seed weight (70)
        slot = ExerciseStructure(name="Squat", sets=2, reps=Single(5), weights=[61.3])
        assert prescribe(slot, 1, 5, programme=_programme()) == 70.0

    def test_specific_suggestion_used_without_max(self):
        # 52.6 → 52.5
        slot = ExerciseStructure(
            name="Squat", sets=1, reps=Single(5), suggested_weight=52.6, weight_source="history"
        )
        assert prescribe(slot, 0, 5, intensity=75, programme=_programme()) == 52.5

    def test_generic_source_ignored(self):
        # average_estimate is a guess → seed for heavy compound at 5 reps = 70
        slot = ExerciseStructure(
            name="Squat", sets=1, reps=Single(5), suggested_weight=52.6, weight_source="average_estimate"
        )
        assert prescribe(slot, 0, 5, programme=_programme()) == 70.0

    def test_generic_with_known_max_uses_goal_table(self):
        # STRENGTH, midpoint 10 → 70% of 100; no intensity so step 1 is skipped
        slot = ExerciseStructure(name="Squat", sets=1, reps=Range(8, 12))
        programme = _programme(goal="STRENGTH")
        assert prescribe(slot, 0, 10, programme=programme, known_max=100.0) == 70.0

    def test_no_programme_at_all(self):
        slot = ExerciseStructure(name="Mystery Lift", sets=1, reps=Single(5))
        assert prescribe(slot, 0, 5) == 45.0


class TestLastWorkoutBasis:

    def test_successful_session_adds_increment(self):
        # Squat increment 5 kg: 100 → 105
        slot = ExerciseStructure(name="Squat", sets=3, reps=Single(5))
        programme = _programme(basis="LAST_WORKOUT")
        assert prescribe(slot, 0, 5, programme=programme, history=[_session(100.0, SUCCESS)]) == 105.0

    def test_last_workout_ignores_intensity(self):
        slot = ExerciseStructure(name="Squat", sets=3, reps=Single(5), intensity=[50])
        programme = _programme(basis="LAST_WORKOUT")
        assert prescribe(
            slot, 0, 5, intensity=50, programme=programme, known_max=200.0,
            history=[_session(100.0, SUCCESS)],
        ) == 105.0


# ===========================================================================
# Progression engine
# ===========================================================================

class TestProgression:
    """increase on success, repeat on a miss, deload after the threshold"""

    def test_no_history_seeds_and_repeats(self):
        decision = compute_progression("Squat", None, [], rep_range=(5, 5))
        assert decision.action == "REPEAT"
        assert decision.weight == 70.0

    def test_no_history_with_known_max(self):
        # GENERAL, 5 reps → 75% of 120 = 90
        decision = compute_progression("Squat", None, [], known_max=120.0, rep_range=(5, 5))
        assert decision.weight == 90.0
        assert "1RM" in decision.reason

    def test_upper_body_increment(self):
        decision = compute_progression("Bench Press", None, [_session(80.0, SUCCESS, name="Bench Press")])
        assert decision.action == "INCREASE"
        assert decision.weight == 82.5

    def test_single_failure_repeats(self):
        decision = compute_progression("Squat", None, [_session(100.0, FAIL)])
        assert decision.action == "REPEAT"
        assert decision.weight == 100.0
        assert decision.failure_streak == 1

    def test_two_failures_deload(self):
        # 100 × (1 − 0.10) = 90
        history = [_session(100.0, FAIL), _session(100.0, FAIL)]
        decision = compute_progression("Squat", None, history)
        assert decision.action == "DELOAD"
        assert decision.is_deload
        assert decision.weight == 90.0
        assert decision.previous_weight == 100.0

    def test_failure_streak_stops_at_success(self):
        history = [_session(100.0, FAIL), _session(100.0, SUCCESS), _session(105.0, FAIL)]
        assert failure_streak(history) == 1

    def test_programme_threshold_three(self):
        rules = ProgressionRules(deload_threshold=3)
        history = [_session(100.0, FAIL), _session(100.0, FAIL)]
        decision = compute_progression("Squat", _programme(progression=rules), history)
        assert decision.action == "REPEAT"

    def test_threshold_clamped_to_three(self):
        rules = ProgressionRules(deload_threshold=5)
        history = [_session(100.0, FAIL)] * 3
        decision = compute_progression("Squat", _programme(progression=rules), history)
        assert decision.action == "DELOAD"

    def test_threshold_clamped_up_to_two(self):
        rules = ProgressionRules(deload_threshold=1)
        decision = compute_progression("Squat", _programme(progression=rules), [_session(100.0, FAIL)])
        assert decision.action == "REPEAT"

    def test_custom_deload_fraction(self):
        # 100 × 0.8 = 80
        rules = ProgressionRules(deload_fraction=0.2)
        history = [_session(100.0, FAIL), _session(100.0, FAIL)]
        assert compute_progression("Squat", _programme(progression=rules), history).weight == 80.0

    def test_deload_never_below_bar(self):
        # 21 × 0.9 = 18.9 → bar 20
        history = [_session(21.0, FAIL, name="Bench Press"), _session(21.0, FAIL, name="Bench Press")]
        assert compute_progression("Bench Press", None, history).weight == 20.0

    def test_deload_session_resets_streak(self):
        history = [
            _session(100.0, FAIL),
            _session(100.0, FAIL),
            _session(90.0, FAIL, is_deload=True),
        ]
        decision = compute_progression("Squat", None, history)
        assert decision.action == "REPEAT"
        assert decision.weight == 90.0

    def test_recovery_capped_at_pre_deload_weight(self):
        # 97.5 + 5 = 102.5 would overshoot the 100 that caused the deload
        history = [
            _session(100.0, FAIL),
            _session(100.0, FAIL),
            _session(97.5, SUCCESS, is_deload=True),
        ]
        decision = compute_progression("Squat", None, history)
        assert decision.action == "INCREASE"
        assert decision.weight == 100.0

    def test_allowed_missed_reps(self):
        rules = ProgressionRules(allowed_missed_reps=1)
        history = [_session(100.0, (5, 5, 4))]
        assert compute_progression("Squat", _programme(progression=rules), history).action == "INCREASE"

    def test_missing_set_is_failure(self):
        rules = ProgressionRules(allowed_missed_reps=10)
        history = [_session(100.0, (5, 5))]
        assert compute_progression("Squat", _programme(progression=rules), history).action == "REPEAT"

    def test_programme_increment_rules(self):
        rules = ProgressionRules(increment_rules={"Squat": 2.5})
        history = [_session(100.0, SUCCESS)]
        assert compute_progression("Squat", _programme(progression=rules), history).weight == 102.5


# ===========================================================================
# Workout generation
# ===========================================================================

class TestGenerateWorkout:

    WAVE = ProgressionRules(
        type="WAVE",
        cycle_length=3,
        weekly_percentages=[[0.65, 0.75, 0.85], [0.70, 0.80, 0.90], [0.75, 0.85, 0.95]],
    )

    def _structure(self, *slots):
        return WorkoutStructure(day=1, name="Day 1", exercises=list(slots), estimated_duration=45)

    def test_wave_week_drives_weights(self):
        # Week 4 → cycle week 1: 65/75/85% of TM 126 → 81.9, 94.5, 107.1 → 80, 92.5, 105
        programme = _programme(training_max_percentage=0.9, progression=self.WAVE)
        slot = ExerciseStructure(name="Squat", sets=3, reps=PerSet(("5", "5", "5+")))
        workout = generate_workout(self._structure(slot), programme, week_number=4, known_maxes={"squat": 140.0})

        sets = workout.exercises[0].sets
        assert [s.weight for s in sets] == [80.0, 92.5, 105.0]
        assert [s.intensity for s in sets] == [65, 75, 85]
        assert [s.set_number for s in sets] == [1, 2, 3]
        assert workout.estimated_duration == 45

    def test_alias_max_applies(self):
        programme = _programme(training_max_percentage=1.0)
        slot = ExerciseStructure(name="Back Squat", sets=1, reps=Single(5), intensity=[50])
        workout = generate_workout(self._structure(slot), programme, 1, known_maxes={"Squat": 100.0})
        assert workout.exercises[0].sets[0].weight == 50.0

    def test_skips_unusable_slots(self, caplog):
        programme = _programme()
        slots = [
            ExerciseStructure(name="", sets=3, reps=Single(5)),
            ExerciseStructure(name="Squat", sets=0, reps=Single(5)),
            ExerciseStructure(name="Zercher Carry", sets=3, reps=Single(5)),
            ExerciseStructure(name="Bench Press", sets=2, reps=Single(5)),
        ]
        with caplog.at_level("WARNING"):
            workout = generate_workout(
                self._structure(*slots), programme, 1,
                known_exercises=["Squat", "Bench Press"],
            )
        assert [e.name for e in workout.exercises] == ["Bench Press"]
        assert workout.skipped == ["(unnamed)", "Squat", "Zercher Carry"]
        assert "unknown exercise" in caplog.text

    def test_last_workout_uses_history_and_marks_deload(self):
        programme = _programme(basis="LAST_WORKOUT")
        slot = ExerciseStructure(name="Squat", sets=3, reps=Single(5))
        history = {"squat": [_session(100.0, FAIL), _session(100.0, FAIL)]}
        workout = generate_workout(self._structure(slot), programme, 2, history_by_exercise=history)

        exercise = workout.exercises[0]
        assert exercise.is_deload
        assert {s.weight for s in exercise.sets} == {90.0}

    def test_day_number_defaults_to_structure(self):
        workout = generate_workout(self._structure(), _programme(), 1)
        assert workout.day_number == 1
        assert generate_workout(self._structure(), _programme(), 1, day_number=3).day_number == 3


@pytest.mark.parametrize("week", [1, 2, 3, 4, 5, 6])
def test_wave_weights_never_exceed_training_max(week):
    programme = _programme(training_max_percentage=0.9, progression=TestGenerateWorkout.WAVE)
    slot = ExerciseStructure(name="Squat", sets=3, reps=Single(5))
    workout = generate_workout(
        WorkoutStructure(day=1, name="d", exercises=[slot]), programme, week, known_maxes={"squat": 140.0}
    )
    assert all(s.weight <= 126.0 for s in workout.exercises[0].sets)
