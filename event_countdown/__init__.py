"""Live event countdowns, urgency classification and time bucketing."""

__version__ = "0.3.0"
