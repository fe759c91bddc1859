"""lift-scheduler: strength-training weight prescription, progression and PR tracking."""

__version__ = "0.1.0"
