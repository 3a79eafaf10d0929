# src/wormhole_scheduler/tasks/task_models.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from ..errors import InvalidPeriodError

TaskCallback = Callable[[], object]


class SchedulerState(StrEnum):
    """
    Scheduler lifecycle state.

    Notes:
    - "destroyed" is terminal; a destroyed scheduler never goes back to stopped.
    """

    STOPPED = "stopped"
    RUNNING = "running"
    DESTROYED = "destroyed"


def validate_period(period: object) -> int:
    """Return period unchanged if it is a positive int, raise InvalidPeriodError otherwise."""
    # bool is an int subclass; True would otherwise pass as period=1.
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise InvalidPeriodError(period)
    return period


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    name: str
    period: int
    callback: TaskCallback = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        validate_period(self.period)

    def is_due(self, timepoint: int) -> bool:
        return timepoint % self.period == 0
