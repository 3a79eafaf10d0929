"""Coalescing periodic task scheduler driven by a single timer."""

from .core.gcd import GCDMemo, gcd
from .errors import ConfigurationError, InvalidPeriodError, SchedulerDestroyedError, SchedulerError
from .tasks.schedule import Schedule, build_schedule
from .tasks.task_models import SchedulerState, Task
from .tasks.task_scheduler import PeriodicTaskScheduler

__all__ = [
    "ConfigurationError",
    "GCDMemo",
    "InvalidPeriodError",
    "PeriodicTaskScheduler",
    "Schedule",
    "SchedulerDestroyedError",
    "SchedulerError",
    "SchedulerState",
    "Task",
    "build_schedule",
    "gcd",
]
