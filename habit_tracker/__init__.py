"""Habit tracking engine: streaks, statistics, badges and freeze days."""

__version__ = "1.0.0"
