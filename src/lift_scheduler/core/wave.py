"""
Wave (periodised) intensity overlay.

Wave programmes such as 5/3/1 keep a static template but vary set
intensities on a repeating multi-week cycle.  The cycle table is stored on
the programme's progression rules as fractions of training max:

    weekly_percentages = [[0.65, 0.75, 0.85],   # cycle week 1
                          [0.70, 0.80, 0.90],   # cycle week 2
                          [0.75, 0.85, 0.95]]   # cycle week 3

For programme week w and set i:

    cycle_week = (w - 1) mod cycle_length
    intensity  = round(weekly_percentages[cycle_week][i] * 100)

Any missing piece (non-wave rules, no table, bad cycle length, row or set
out of range) leaves the template's static intensity in place.

The percentage is rounded, not truncated: truncating 0.29 * 100 gives 28.
A covered set gets the wave percentage even when the template lists no
static intensity for it.
"""

import logging

from .models import ProgressionRules

logger = logging.getLogger(__name__)


def cycle_week_index(week_number: int, cycle_length: int) -> int:
    """0-based position of a 1-based programme week inside the cycle."""
    return (week_number - 1) % cycle_length


def wave_intensity(
    rules: ProgressionRules | None,
    week_number: int,
    set_index: int,
    static_intensity: int | None = None,
) -> int | None:
    """
    Resolve the intensity for one set, applying the wave table if it covers it.

    Args:
        rules: Programme progression rules (None = no overlay)
        week_number: Actual 1-based programme week
        set_index: 0-based set index within the exercise
        static_intensity: The template's own percentage for this set

    Returns:
        Integer percentage of training max, or None if neither source has one
    """
    if rules is None or rules.type != "WAVE":
        return static_intensity

    table = rules.weekly_percentages
    cycle_length = rules.cycle_length
    if not table or cycle_length is None or cycle_length <= 0 or week_number < 1:
        return static_intensity

    cycle_week = cycle_week_index(week_number, cycle_length)
    if cycle_week >= len(table):
        return static_intensity

    row = table[cycle_week]
    if set_index < 0 or set_index >= len(row):
        return static_intensity

    intensity = int(round(row[set_index] * 100))
    logger.debug(
        "Wave overlay: week %d (cycle week %d), set %d -> %d%%",
        week_number, cycle_week + 1, set_index + 1, intensity,
    )
    return intensity
