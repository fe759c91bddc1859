"""
Tests for workout-structure decoding and the logged-sets parser.
"""

import json

import pytest

from lift_scheduler.core.models import ProgrammeWorkout
from lift_scheduler.core.reps import PerSet, Range, RangeString, Single
from lift_scheduler.io.serializers import (
    ValidationError,
    dict_to_programme,
    dict_to_programme_workout,
    parse_exercise_entry,
    parse_sets_string,
)
from lift_scheduler.io.structure_parser import (
    ParseError,
    parse_programme_workouts,
    parse_reps,
    parse_workout_structure,
)

SQUAT_DAY = (
    '{"day": 1, "name": "Day A", "estimatedDuration": 45,'
    ' "exercises": [{"name": "Squat", "sets": 3,'
    ' "reps": {"type": "range", "min": 5, "max": 5},'
    ' "intensity": [75, 80, 85]}]}'
)


class TestParseWorkoutStructure:

    def test_decodes_wire_format(self):
        structure = parse_workout_structure(SQUAT_DAY)
        assert structure.day == 1
        assert structure.name == "Day A"
        assert structure.estimated_duration == 45

        squat = structure.exercises[0]
        assert squat.name == "Squat"
        assert squat.sets == 3
        assert squat.reps == Range(5, 5)
        assert [squat.reps.reps_for_set(i) for i in range(3)] == [5, 5, 5]
        assert squat.intensity == [75, 80, 85]

    def test_camel_and_snake_case_keys(self):
        text = json.dumps({
            "day": 2,
            "name": "B",
            "estimated_duration": 30,
            "exercises": [
                {"name": "Row", "sets": 3, "reps": 8, "suggestedWeight": 60, "weightSource": "history"},
                {"name": "Curl", "sets": 2, "reps": 12, "suggested_weight": 15, "weight_source": "average_estimate"},
            ],
        })
        structure = parse_workout_structure(text)
        assert structure.estimated_duration == 30
        row, curl = structure.exercises
        assert (row.suggested_weight, row.weight_source) == (60.0, "history")
        assert (curl.suggested_weight, curl.weight_source) == (15.0, "average_estimate")

    def test_missing_name_kept_as_blank(self):
        structure = parse_workout_structure('{"exercises": [{"sets": 3, "reps": 5}]}')
        assert structure.exercises[0].name == ""
        assert structure.day == 1

    def test_fractional_intensity_rounded(self):
        structure = parse_workout_structure('{"exercises": [{"name": "Squat", "sets": 1, "reps": 5, "intensity": [72.5]}]}')
        assert structure.exercises[0].intensity == [72]     # round-half-even

    @pytest.mark.parametrize("text", [
        '{"exercises": [{"name": "Squat", "sets": 3, "reps":, "intensity": [70]}]}',
        '{"exercises": [{"name": "Squat", "sets": 3, "reps": , "intensity": [70]}]}',
    ])
    def test_empty_reps_repaired_to_default_range(self, text):
        structure = parse_workout_structure(text)
        assert structure.exercises[0].reps == RangeString("8-12")
        assert structure.exercises[0].intensity == [70]

    def test_not_json_without_repair(self):
        with pytest.raises(ParseError) as exc_info:
            parse_workout_structure("not json")
        assert exc_info.value.first_error is not None
        assert exc_info.value.repair_error is None

    def test_repair_that_does_not_help_carries_both_errors(self):
        text = '{"exercises": [{"name": "Squat", "reps":, "sets": }]}'
        with pytest.raises(ParseError) as exc_info:
            parse_workout_structure(text)
        assert exc_info.value.first_error is not None
        assert exc_info.value.repair_error is not None
        assert "empty_reps" in str(exc_info.value)

    def test_boolean_reps_rejected(self):
        with pytest.raises(ParseError):
            parse_workout_structure('{"exercises": [{"name": "Squat", "sets": 3, "reps": true}]}')

    def test_exercises_must_be_a_list(self):
        with pytest.raises(ParseError):
            parse_workout_structure('{"exercises": {"name": "Squat"}}')


class TestParseReps:

    @pytest.mark.parametrize("raw,expected", [
        (5, Single(5)),
        (5.0, Single(5)),
        ("5", Single(5)),
        ("8-12", RangeString("8-12")),
        ("AMRAP", RangeString("AMRAP")),
        ("", RangeString("8-12")),
        (None, RangeString("8-12")),
        ([5, 3, "1+"], PerSet(("5", "3", "1+"))),
        ({"min": 8, "max": 12}, Range(8, 12)),
        ({"type": "range", "min": 6, "max": 8}, Range(6, 8)),
        ({"type": "single", "value": 3}, Single(3)),
        ({"type": "perset", "values": [5, 5]}, PerSet(("5", "5"))),
        ({"value": 10}, Single(10)),
    ])
    def test_shapes(self, raw, expected):
        assert parse_reps(raw) == expected

    @pytest.mark.parametrize("raw", [True, 5.5, {"foo": 1}, {"type": "range", "min": 12, "max": 8}])
    def test_unsupported(self, raw):
        with pytest.raises(ValueError):
            parse_reps(raw)


class TestParseProgrammeWorkouts:

    def test_skips_unparseable_workouts(self, caplog):
        workouts = [
            ProgrammeWorkout(1, 1, "Good", SQUAT_DAY),
            ProgrammeWorkout(1, 2, "Broken", "{oops"),
            ProgrammeWorkout(1, 3, "Also good", SQUAT_DAY),
        ]
        with caplog.at_level("WARNING"):
            parsed = parse_programme_workouts(workouts)
        assert [w.name for w, _ in parsed] == ["Good", "Also good"]
        assert "Broken" in caplog.text


class TestProgrammeDocuments:

    def test_structure_object_is_encoded(self):
        workout = dict_to_programme_workout(
            {"week_number": 1, "day_number": 2, "name": "B", "structure": {"day": 2, "exercises": []}}
        )
        assert json.loads(workout.structure_json) == {"day": 2, "exercises": []}

    def test_raw_structure_kept_verbatim(self):
        workout = dict_to_programme_workout(
            {"week_number": 1, "day_number": 1, "structure_json": '{"reps":,}'}
        )
        assert workout.structure_json == '{"reps":,}'

    def test_workout_needs_positive_week(self):
        with pytest.raises(ValidationError):
            dict_to_programme_workout({"week_number": 0, "day_number": 1, "structure": {}})

    def test_programme_requires_id_and_name(self):
        with pytest.raises(ValidationError):
            dict_to_programme({"name": "No id"})

    def test_inconsistent_completion_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_programme({"id": "x", "name": "X", "status": "COMPLETED", "completed_at": None})

    def test_bad_progression_type(self):
        with pytest.raises(ValidationError):
            dict_to_programme({"id": "x", "name": "X", "progression_rules": {"type": "ZIGZAG"}})

    def test_unset_weight_rules_stay_none(self):
        programme = dict_to_programme({"id": "x", "name": "X", "weight_calculation_rules": {"basis": "LAST_WORKOUT"}})
        assert programme.basis == "LAST_WORKOUT"
        assert programme.weight_calculation_rules.rounding_increment is None


class TestParseSetsString:
    """WxR, WxRxN, optional @RPE, trailing ! for not completed"""

    def test_single_group(self):
        sets = parse_sets_string("100x5")
        assert len(sets) == 1
        assert (sets[0].weight, sets[0].reps, sets[0].rpe, sets[0].completed) == (100.0, 5, None, True)

    def test_multiplied_group_with_rpe(self):
        sets = parse_sets_string("80x5x3@8")
        assert len(sets) == 3
        assert all(s.rpe == 8.0 and s.reps == 5 for s in sets)

    def test_mixed_groups_and_failed_set(self):
        sets = parse_sets_string("62.5x5, 62.5 × 3!")
        assert [(s.weight, s.reps, s.completed) for s in sets] == [(62.5, 5, True), (62.5, 3, False)]

    @pytest.mark.parametrize("text", ["", "   ", "heavy", "100x", "100x5@11", "100x5x0"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_sets_string(text)

    def test_exercise_entry(self):
        name, sets = parse_exercise_entry("Bench Press: 80x5x3, 80x4@9")
        assert name == "Bench Press"
        assert len(sets) == 4
        assert sets[-1].rpe == 9.0

    def test_entry_needs_name(self):
        with pytest.raises(ValidationError):
            parse_exercise_entry("80x5")
