"""
Rep schemes for template exercise slots.

A slot's ``reps`` field is one of four shapes in the wire format:

    5                       → Single(5)
    {"min": 8, "max": 12}   → Range(8, 12)
    "8-12"                  → RangeString("8-12")
    [5, 3, "1+"]            → PerSet(["5", "3", "1+"])

Each variant resolves its own per-set target and rep range, so callers
never inspect the raw shape.
"""

from dataclasses import dataclass

from .config import DEFAULT_PER_SET_REPS, DEFAULT_RANGE_MAX, DEFAULT_RANGE_MIN


def _leading_int(token: str) -> int | None:
    """'5' → 5, '1+' → 1, 'AMRAP' → None."""
    token = token.strip()
    if token.endswith("+"):
        token = token[:-1]
    try:
        return int(token)
    except ValueError:
        return None


@dataclass(frozen=True)
class Single:
    """Same rep target on every set."""

    value: int

    def reps_for_set(self, set_index: int) -> int:
        return self.value

    def rep_range(self) -> tuple[int, int]:
        return (self.value, self.value)

    def label(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Range:
    """Numeric range; the prescribed target is the integer midpoint."""

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min < 0 or self.max < 0:
            raise ValueError("rep range bounds must be non-negative")
        if self.min > self.max:
            raise ValueError(f"rep range min {self.min} exceeds max {self.max}")

    def reps_for_set(self, set_index: int) -> int:
        return (self.min + self.max) // 2

    def rep_range(self) -> tuple[int, int]:
        return (self.min, self.max)

    def label(self) -> str:
        return f"{self.min}-{self.max}"


@dataclass(frozen=True)
class RangeString:
    """
    Free-text range such as "8-12", "5+" or "AMRAP".

    Unparseable bounds fall back to the default 8-12 range.
    """

    value: str

    def rep_range(self) -> tuple[int, int]:
        parts = self.value.split("-")
        if len(parts) == 2:
            low = _leading_int(parts[0])
            high = _leading_int(parts[1])
            return (
                low if low is not None else DEFAULT_RANGE_MIN,
                high if high is not None else DEFAULT_RANGE_MAX,
            )
        single = _leading_int(self.value)
        if single is not None:
            return (single, single)
        return (DEFAULT_RANGE_MIN, DEFAULT_RANGE_MAX)

    def reps_for_set(self, set_index: int) -> int:
        low, high = self.rep_range()
        return (low + high) // 2

    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class PerSet:
    """
    One entry per set; "1+" marks an AMRAP set with a minimum of 1.

    Sets beyond the list reuse the last entry.
    """

    values: tuple[str, ...]

    def reps_for_set(self, set_index: int) -> int:
        if not self.values:
            return DEFAULT_PER_SET_REPS
        token = self.values[set_index] if set_index < len(self.values) else self.values[-1]
        reps = _leading_int(token)
        return reps if reps is not None else DEFAULT_PER_SET_REPS

    def rep_range(self) -> tuple[int, int]:
        resolved = [self.reps_for_set(i) for i in range(len(self.values))] or [DEFAULT_PER_SET_REPS]
        return (min(resolved), max(resolved))

    def label(self) -> str:
        return ", ".join(self.values)


RepsScheme = Single | Range | RangeString | PerSet


def rep_midpoint(scheme: RepsScheme) -> float:
    """Average of the scheme's rep range, used by the generic fallback."""
    low, high = scheme.rep_range()
    return (low + high) / 2
