"""
Formula-focused unit tests for the core engine.

Values are hand-computed from the formulas in the module docstrings so
the tests double as worked examples.
"""

import pytest

from lift_scheduler.core.models import ProgressionRules
from lift_scheduler.core.reps import PerSet, Range, RangeString, Single, rep_midpoint


# ===========================================================================
# weights.py — display rounding and plate flooring
# ===========================================================================

class TestRoundWeight:
    """round(w) = floor(w / 0.25 + 0.5) × 0.25"""

    def test_rounds_to_nearest_quarter(self):
        from lift_scheduler.core.weights import round_weight
        assert round_weight(62.3) == 62.25       # 249.2 + 0.5 → 249
        assert round_weight(62.4) == 62.5        # 249.6 + 0.5 → 250

    def test_halves_round_up(self):
        from lift_scheduler.core.weights import round_weight
        assert round_weight(62.375) == 62.5      # 249.5 + 0.5 → 250

    @pytest.mark.parametrize("x", [0.0, 0.1, 19.99, 20.125, 61.3, 99.999, 102.0, 137.62, 1234.567])
    def test_idempotent(self, x):
        from lift_scheduler.core.weights import round_weight
        once = round_weight(x)
        assert round_weight(once) == once

    def test_result_is_quarter_multiple(self):
        from lift_scheduler.core.weights import round_weight
        for i in range(0, 1000):
            w = round_weight(i * 0.137)
            assert (w / 0.25) == int(w / 0.25)


class TestFloorToIncrement:
    """floor(w / inc) × inc"""

    def test_floors_not_rounds(self):
        from lift_scheduler.core.weights import floor_to_increment
        assert floor_to_increment(102.0, 2.5) == 100.0     # 40.8 → 40
        assert floor_to_increment(104.9, 2.5) == 102.5     # 41.96 → 41

    def test_exact_multiple_unchanged(self):
        from lift_scheduler.core.weights import floor_to_increment
        assert floor_to_increment(100.0, 2.5) == 100.0

    def test_float_error_does_not_drop_a_step(self):
        # 0.95 × 100 lands a hair under 95 in binary; it must not floor to 92.5
        from lift_scheduler.core.weights import floor_to_increment
        assert floor_to_increment(0.95 * 100, 2.5) == 95.0

    def test_non_positive_increment_is_noop(self):
        from lift_scheduler.core.weights import floor_to_increment
        assert floor_to_increment(101.3, 0) == 101.3

    def test_format_weight(self):
        from lift_scheduler.core.weights import format_weight
        assert format_weight(100.0) == "100 kg"
        assert format_weight(62.5) == "62.5 kg"
        assert format_weight(20.26) == "20.25 kg"


# ===========================================================================
# records.py — Brzycki estimated 1RM
# ===========================================================================

class TestEstimatedOneRepMax:
    """1RM = w × 36 / (37 − r);  r = 1 → w"""

    def test_single_is_its_own_max(self):
        from lift_scheduler.core.records import estimated_one_rep_max
        assert estimated_one_rep_max(140.0, 1) == 140.0

    def test_five_reps(self):
        from lift_scheduler.core.records import estimated_one_rep_max
        assert estimated_one_rep_max(100.0, 5) == pytest.approx(112.5)      # 3600 / 32

    def test_ten_reps(self):
        from lift_scheduler.core.records import estimated_one_rep_max
        assert estimated_one_rep_max(100.0, 10) == pytest.approx(133.333, rel=1e-4)  # 3600 / 27

    @pytest.mark.parametrize("reps", [0, -1, 37, 40])
    def test_out_of_domain_rejected(self, reps):
        from lift_scheduler.core.records import OutOfDomainError, estimated_one_rep_max
        with pytest.raises(OutOfDomainError):
            estimated_one_rep_max(100.0, reps)

    def test_out_of_domain_is_value_error(self):
        from lift_scheduler.core.records import OutOfDomainError
        assert issubclass(OutOfDomainError, ValueError)

    def test_last_valid_rep_count(self):
        from lift_scheduler.core.records import estimated_one_rep_max
        assert estimated_one_rep_max(10.0, 36) == pytest.approx(360.0)      # 10 × 36 / 1

    def test_estimate_never_falls_as_reps_rise(self):
        # More reps at the same weight means a stronger lifter
        from lift_scheduler.core.records import estimated_one_rep_max
        values = [estimated_one_rep_max(100.0, r) for r in range(1, 37)]
        assert all(b >= a for a, b in zip(values, values[1:]))

    def test_percent_of_max_non_increasing_in_reps(self):
        # Load a set of r reps represents: (37 − r) / 36 of 1RM
        from lift_scheduler.core.records import percent_of_one_rep_max
        values = [percent_of_one_rep_max(r) for r in range(1, 37)]
        assert values[0] == 1.0
        assert percent_of_one_rep_max(10) == pytest.approx(0.75)           # 27 / 36
        assert all(b <= a for a, b in zip(values, values[1:]))

    def test_percent_is_inverse_of_estimate(self):
        from lift_scheduler.core.records import estimated_one_rep_max, percent_of_one_rep_max
        for r in (2, 5, 8, 12):
            assert estimated_one_rep_max(100.0, r) * percent_of_one_rep_max(r) == pytest.approx(100.0)


class TestConfidence:
    """0.5 × rep score + 0.3 × RPE score + 0.2 × load score"""

    def test_tested_single_is_full_confidence(self):
        # rep (16−1)/15 = 1.0; RPE (10−5)/5 = 1.0; load 1.0
        from lift_scheduler.core.records import estimate_confidence
        assert estimate_confidence(1, 10.0, 1.0) == pytest.approx(1.0)

    def test_no_rpe_uses_neutral_score(self):
        # rep (16−5)/15 = 0.7333 × 0.5 = 0.3667; RPE 0.3 × 0.3 = 0.09; load 0.8 × 0.2 = 0.16
        from lift_scheduler.core.records import estimate_confidence
        assert estimate_confidence(5, None, 0.8) == pytest.approx(0.617, abs=1e-3)

    def test_high_reps_capped(self):
        from lift_scheduler.core.records import estimate_confidence
        assert estimate_confidence(30, None, 0.5) == estimate_confidence(15, None, 0.5)

    def test_context_string(self):
        from lift_scheduler.core.records import build_context
        assert build_context(100.0, 5, 8.0) == "100 kg × 5 @ RPE 8"
        assert build_context(62.5, 3) == "62.5 kg × 3"


# ===========================================================================
# reps.py — rep scheme variants
# ===========================================================================

class TestRepSchemes:
    """Each variant resolves its own per-set target and range."""

    def test_single(self):
        assert Single(5).reps_for_set(2) == 5
        assert Single(5).rep_range() == (5, 5)

    def test_range_target_is_integer_midpoint(self):
        assert Range(8, 12).reps_for_set(0) == 10
        assert Range(5, 8).reps_for_set(0) == 6                # (5+8)//2

    def test_range_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            Range(12, 8)

    def test_range_string(self):
        assert RangeString("8-12").rep_range() == (8, 12)
        assert RangeString("5+").rep_range() == (5, 5)
        assert RangeString("AMRAP").rep_range() == (8, 12)     # default range

    def test_per_set_amrap_and_reuse(self):
        scheme = PerSet(("5", "3", "1+"))
        assert [scheme.reps_for_set(i) for i in range(4)] == [5, 3, 1, 1]
        assert scheme.rep_range() == (1, 5)

    def test_per_set_non_numeric_defaults(self):
        assert PerSet(("max",)).reps_for_set(0) == 5

    def test_midpoint(self):
        assert rep_midpoint(Range(8, 12)) == 10.0
        assert rep_midpoint(Single(3)) == 3.0


# ===========================================================================
# wave.py — periodised intensity
# ===========================================================================

class TestWaveIntensity:
    """cycle_week = (w − 1) mod cycle_length;  intensity = round(pct × 100)"""

    RULES = ProgressionRules(type="WAVE", cycle_length=3, weekly_percentages=[[0.65], [0.75], [0.85]])

    def test_week_five_maps_to_second_cycle_week(self):
        # (5 − 1) mod 3 = 1 → 0.75 → 75, overriding static 90
        from lift_scheduler.core.wave import wave_intensity
        assert wave_intensity(self.RULES, 5, 0, static_intensity=90) == 75

    @pytest.mark.parametrize("week,expected", [(1, 65), (2, 75), (3, 85), (4, 65), (6, 85)])
    def test_cycle_repeats(self, week, expected):
        from lift_scheduler.core.wave import wave_intensity
        assert wave_intensity(self.RULES, week, 0) == expected

    def test_set_out_of_range_falls_through(self):
        from lift_scheduler.core.wave import wave_intensity
        assert wave_intensity(self.RULES, 1, 1, static_intensity=80) == 80

    def test_linear_rules_keep_static(self):
        from lift_scheduler.core.wave import wave_intensity
        rules = ProgressionRules(type="LINEAR", cycle_length=3, weekly_percentages=[[0.65]])
        assert wave_intensity(rules, 1, 0, static_intensity=70) == 70

    def test_missing_cycle_length_keeps_static(self):
        from lift_scheduler.core.wave import wave_intensity
        rules = ProgressionRules(type="WAVE", weekly_percentages=[[0.65]])
        assert wave_intensity(rules, 1, 0, static_intensity=70) == 70
        assert wave_intensity(None, 1, 0) is None

    def test_short_table_falls_through(self):
        # cycle_length 4 but only 3 rows: cycle week 3 has no row
        from lift_scheduler.core.wave import wave_intensity
        rules = ProgressionRules(type="WAVE", cycle_length=4, weekly_percentages=[[0.6], [0.7], [0.8]])
        assert wave_intensity(rules, 4, 0, static_intensity=55) == 55

    def test_float_fractions_round_not_truncate(self):
        # 0.85 × 100 = 85.00000000000001; 0.29 × 100 = 28.999999999999996
        from lift_scheduler.core.wave import wave_intensity
        rules = ProgressionRules(type="WAVE", cycle_length=1, weekly_percentages=[[0.85, 0.29]])
        assert wave_intensity(rules, 1, 0) == 85
        assert wave_intensity(rules, 1, 1) == 29


# ===========================================================================
# fallback.py / movements.py — generic weights
# ===========================================================================

class TestGenericWeight:
    """known max: max × pct(goal, avg_reps); otherwise seed by category"""

    def test_seed_for_heavy_compound(self):
        from lift_scheduler.core.fallback import generic_weight
        assert generic_weight("Back Squat", 5) == 70.0

    def test_seed_for_isolation_high_reps(self):
        from lift_scheduler.core.fallback import generic_weight
        assert generic_weight("Biceps Curl", 12) == 20.0       # 8 < 12 ≤ 15

    def test_bodyweight_seed_is_zero(self):
        from lift_scheduler.core.fallback import generic_weight
        assert generic_weight("Push-up", 10) == 0.0

    def test_known_max_uses_goal_table(self):
        # STRENGTH, avg 10 reps → 70% of 100
        from lift_scheduler.core.fallback import generic_weight
        assert generic_weight("Squat", 10, "STRENGTH", known_max=100.0) == 70.0

    def test_unknown_goal_uses_general(self):
        from lift_scheduler.core.fallback import percent_of_max_for_reps
        assert percent_of_max_for_reps(4, "POWER") == percent_of_max_for_reps(4, "GENERAL") == 75.0


class TestMovements:

    def test_front_squat_is_light_compound(self):
        from lift_scheduler.core.movements import categorize_exercise
        assert categorize_exercise("Front Squat") == "light_compound"
        assert categorize_exercise("Squat") == "heavy_compound"

    def test_increments_from_rules_yaml(self):
        from lift_scheduler.core.movements import default_increment
        assert default_increment("Squat") == 5.0
        assert default_increment("Leg Press") == 10.0
        assert default_increment("Bench Press") == 2.5

    def test_unlisted_lower_body_gets_larger_increment(self):
        from lift_scheduler.core.movements import default_increment
        assert default_increment("Walking Lunge") == 5.0
        assert default_increment("Lateral Raise") == 2.5

    def test_programme_increment_rules_win(self):
        from lift_scheduler.core.movements import default_increment
        assert default_increment("Squat", {"squat": 2.5}) == 2.5
        assert default_increment("Curl", {"default": 1.0}) == 1.0

    def test_known_max_aliases(self):
        from lift_scheduler.core.movements import lookup_known_max
        maxes = {"squat": 140.0, "bench": 100.0, "ohp": 60.0}
        assert lookup_known_max("Paused Squat", maxes) == 140.0
        assert lookup_known_max("Overhead Press", maxes) == 60.0
        assert lookup_known_max("Leg Press", maxes) is None
        assert lookup_known_max("Bench Press", maxes) == 100.0

    def test_exact_name_beats_alias(self):
        from lift_scheduler.core.movements import lookup_known_max
        assert lookup_known_max("Front Squat", {"squat": 140.0, "front squat": 110.0}) == 110.0

    def test_non_positive_max_is_unknown(self):
        from lift_scheduler.core.movements import lookup_known_max
        assert lookup_known_max("Squat", {"squat": 0.0}) is None


class TestUserRulesOverride:
    """~/.lift-scheduler/rules.yaml deep-merges over the bundled defaults."""

    def test_user_override_changes_one_key(self, isolated_home):
        from lift_scheduler.core.engine.config_loader import engine_setting, load_engine_config
        cfg_dir = isolated_home / ".lift-scheduler"
        cfg_dir.mkdir()
        (cfg_dir / "rules.yaml").write_text("progression:\n  deload_fraction: 0.2\n")
        load_engine_config.cache_clear()

        assert engine_setting("progression", "deload_fraction", None) == 0.2
        assert engine_setting("progression", "deload_threshold", None) == 2     # bundled value kept

    def test_broken_user_file_warns_and_is_ignored(self, isolated_home):
        from lift_scheduler.core.engine.config_loader import engine_setting, load_engine_config
        cfg_dir = isolated_home / ".lift-scheduler"
        cfg_dir.mkdir()
        (cfg_dir / "rules.yaml").write_text("progression: [unclosed\n")
        load_engine_config.cache_clear()

        with pytest.warns(UserWarning):
            value = engine_setting("progression", "deload_fraction", None)
        assert value == 0.1
