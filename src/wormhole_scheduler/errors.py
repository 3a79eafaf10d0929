# src/wormhole_scheduler/errors.py

from __future__ import annotations

"""
Exception hierarchy.

Every error raised on purpose by the scheduler derives from SchedulerError,
so callers can catch the whole family in one place.
"""


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class ConfigurationError(SchedulerError, ValueError):
    """The task set cannot produce a schedule (e.g. it is empty)."""


class InvalidPeriodError(ConfigurationError):
    """A task period is not a positive integer."""

    def __init__(self, period: object) -> None:
        super().__init__(f"period must be a positive integer, got {period!r}")
        self.period = period


class SchedulerDestroyedError(SchedulerError, RuntimeError):
    """The scheduler was destroyed and cannot be used again."""
