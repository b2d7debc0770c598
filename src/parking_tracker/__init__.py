"""Single-facility parking slot tracker with tiered time-based billing."""

__version__ = "1.0.0"
