# src/wormhole_scheduler/tasks/schedule.py

"""
Schedule builder.

Turns a set of task periods into the "wormhole" table: the ordered gaps between
consecutive timepoints at which at least one task is due. Replaying the gaps as
successive sleeps, starting at timepoint 0, wakes the scheduler at exactly the
due timepoints of one cycle and nowhere else. The cycle is the least common
multiple of the periods, so every task is due at its end and the table can be
replayed back to back.

Example: periods {2, 3} -> common_period 1, max_period 6, due timepoints
{2, 3, 4, 6}, wormholes (2, 1, 1, 2). Timepoints 1 and 5 are skipped.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from ..core.gcd import GCDMemo
from ..errors import ConfigurationError
from .task_models import validate_period


@dataclass(slots=True, frozen=True)
class Schedule:
    common_period: int
    # Cycle length: lcm of the periods (the largest period whenever it is a multiple of the rest).
    max_period: int
    max_rounds: int
    wormholes: tuple[int, ...]

    @property
    def wakeups_per_cycle(self) -> int:
        return len(self.wormholes)

    @property
    def dense_wakeups_per_cycle(self) -> int:
        """Wake-ups a per-tick walk (one per common_period) would need for the same cycle."""
        return self.max_rounds

    def timepoints(self) -> Iterator[int]:
        """Yield the accepted timepoints of one cycle, accumulated from the wormholes."""
        t = 0
        for gap in self.wormholes:
            t += gap
            yield t

    def describe(self) -> dict[str, Any]:
        return {
            "common_period": self.common_period,
            "max_period": self.max_period,
            "max_rounds": self.max_rounds,
            "wormholes": list(self.wormholes),
            "timepoints": list(self.timepoints()),
            "wakeups_per_cycle": self.wakeups_per_cycle,
            "dense_wakeups_per_cycle": self.dense_wakeups_per_cycle,
        }


def build_schedule(
        periods: Iterable[int],
        *,
        gcd: GCDMemo | None = None,
) -> Schedule:
    """
    Compute the Schedule for the given task periods.

    Raises ConfigurationError when periods is empty and InvalidPeriodError when
    any period is not a positive int. gcd defaults to a fresh GCDMemo; the
    scheduler passes its own so the memo survives rebuilds.
    """
    values = [validate_period(p) for p in periods]
    if not values:
        raise ConfigurationError("cannot build a schedule without tasks")

    gcd_fn = gcd if gcd is not None else GCDMemo()

    # Repeated periods add nothing to the cycle or the divisibility check.
    distinct = sorted(set(values))

    common_period = gcd_fn.reduce(distinct)
    cycle = distinct[0]
    for p in distinct[1:]:
        cycle = cycle * p // gcd_fn(cycle, p)

    max_rounds = cycle // common_period

    wormholes: list[int] = []
    previous = 0
    for r in range(max_rounds):
        t = (r + 1) * common_period
        if any(t % p == 0 for p in distinct):
            wormholes.append(t - previous)
            previous = t

    return Schedule(
        common_period=common_period,
        max_period=cycle,
        max_rounds=max_rounds,
        wormholes=tuple(wormholes),
    )
