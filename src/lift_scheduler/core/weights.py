"""
Shared weight rounding.

Every weight the engine hands out (targets, actuals, suggestions, 1RM
estimates) passes through round_weight() exactly once before it is stored
or displayed.  Plate-increment flooring for percentage prescriptions is a
separate, earlier step (floor_to_increment).
"""

import math

from .config import DISPLAY_ROUNDING_UNIT


def round_weight(weight: float) -> float:
    """
    Round a weight to the nearest display unit (0.25 kg), halves up.

    Multiples of 0.25 are exact binary fractions, so the result is a fixed
    point: round_weight(round_weight(x)) == round_weight(x).

    Args:
        weight: Raw weight in kg

    Returns:
        Weight rounded to the nearest 0.25
    """
    steps = math.floor(weight / DISPLAY_ROUNDING_UNIT + 0.5)
    return steps * DISPLAY_ROUNDING_UNIT


def floor_to_increment(weight: float, increment: float) -> float:
    """
    Floor a weight to the nearest loadable increment.

    floor(w / inc) * inc, so 102 kg with a 2.5 kg increment gives 100 kg.
    A non-positive increment leaves the weight unchanged.
    """
    if increment <= 0:
        return weight
    # Guard against 99.99999 / 2.5 style float error pushing a step down
    steps = math.floor(weight / increment + 1e-9)
    return steps * increment


def format_weight(weight: float) -> str:
    """Human-readable weight: '100 kg', '62.5 kg', '20.25 kg'."""
    w = round_weight(weight)
    if w == int(w):
        return f"{int(w)} kg"
    return f"{w:g} kg"
