"""
Pure training engine for lift-scheduler.

Nothing in this package writes files, and only engine.config_loader reads
any (rules.yaml).  The store lives in lift_scheduler.io and the store-bound
operations in lift_scheduler.services.
"""

from .generation import GeneratedWorkout, generate_workout
from .prescription import prescribe
from .progression import compute_progression
from .records import OutOfDomainError, detect_records, estimated_one_rep_max
from .wave import wave_intensity

__all__ = [
    "GeneratedWorkout",
    "OutOfDomainError",
    "compute_progression",
    "detect_records",
    "estimated_one_rep_max",
    "generate_workout",
    "prescribe",
    "wave_intensity",
]
