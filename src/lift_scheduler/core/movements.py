"""
Movement-pattern classification by exercise name.

Programme templates reference exercises by free-text name, so the engine
classifies names into coarse categories to pick seed weights, progression
increments and which known max applies.

Categories
----------
  heavy_compound  : squat, deadlift                      (lower body)
  medium_compound : bench/overhead press, rows, pull-ups (upper body)
  light_compound  : lunges, step-ups, split squats       (lower body)
  isolation       : curls, extensions, raises, flyes
  bodyweight      : push-ups, planks
  unknown         : everything else
"""

from .config import LOWER_BODY_INCREMENT, UPPER_BODY_INCREMENT
from .engine.config_loader import engine_setting

# Checked in order; the first matching keyword wins.
_CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("light_compound", ("lunge", "step up", "step-up", "bulgarian split squat", "split squat", "front squat")),
    ("heavy_compound", ("squat", "deadlift")),
    ("bodyweight", ("push-up", "push up", "bodyweight", "plank", "assisted")),
    ("medium_compound", ("bench press", "overhead press", "row", "pull-up", "pull up", "chin-up", "dip")),
    ("isolation", ("curl", "extension", "raise", "fly", "flye", "pushdown")),
]

_LOWER_BODY_KEYWORDS: tuple[str, ...] = (
    "squat", "deadlift", "lunge", "leg", "hip thrust", "step up", "step-up", "calf", "glute",
)

# Aliases under which a trainee's headline maxes are commonly stored.
_MAX_KEY_KEYWORDS: list[tuple[str, str]] = [
    ("squat", "squat"),
    ("bench", "bench"),
    ("deadlift", "deadlift"),
    ("overhead press", "ohp"),
    ("press", "ohp"),
]


def categorize_exercise(exercise_name: str) -> str:
    """
    Classify an exercise name into a movement category.

    Args:
        exercise_name: Free-text exercise name, e.g. "Barbell Back Squat"

    Returns:
        One of the category strings listed in the module docstring
    """
    name = exercise_name.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(k in name for k in keywords):
            return category
    return "unknown"


def is_lower_body(exercise_name: str) -> bool:
    """True for squat/hinge/lunge patterns."""
    name = exercise_name.lower()
    return any(k in name for k in _LOWER_BODY_KEYWORDS)


def default_increment(exercise_name: str, increment_rules: dict[str, float] | None = None) -> float:
    """
    Per-session weight increment for an exercise.

    Lookup order: programme increment_rules (exact name, then "default"),
    rules.yaml ``increments`` (exact name), then lower/upper body defaults.
    Lower-body and heavy compound lifts get the larger increment.
    """
    key = exercise_name.strip().lower()
    if increment_rules:
        rules = {k.lower(): v for k, v in increment_rules.items()}
        if key in rules:
            return float(rules[key])
        if "default" in rules:
            return float(rules["default"])

    configured = engine_setting("increments", key, None)
    if configured is not None:
        return float(configured)

    category = categorize_exercise(exercise_name)
    if category == "heavy_compound" or (is_lower_body(exercise_name) and category != "isolation"):
        return float(engine_setting("progression", "lower_body_increment", LOWER_BODY_INCREMENT))
    return float(engine_setting("progression", "upper_body_increment", UPPER_BODY_INCREMENT))


def lookup_known_max(exercise_name: str, maxes: dict[str, float]) -> float | None:
    """
    Find the trainee's max for an exercise.

    Tries an exact (case-insensitive) name match first, then the headline
    lift aliases ("squat", "bench", "deadlift", "ohp").  Non-positive
    values count as unknown.
    """
    by_name = {k.strip().lower(): v for k, v in maxes.items()}
    name = exercise_name.strip().lower()

    value = by_name.get(name)
    if value is None:
        for keyword, alias in _MAX_KEY_KEYWORDS:
            if keyword in name:
                if alias == "ohp" and ("bench" in name or "leg" in name):
                    continue
                value = by_name.get(alias)
                break

    if value is None or value <= 0:
        return None
    return float(value)
