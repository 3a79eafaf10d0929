# src/wormhole_scheduler/tasks/task_scheduler.py

from __future__ import annotations

"""
Coalescing periodic task scheduler.

One timer drives every registered task:
- the task periods are compiled into a wormhole table (see schedule.py),
- the timer sleeps wormholes[current_round] ticks,
- on wake-up the absolute timepoint is accumulated from the gaps,
- every task whose period divides the timepoint runs, in registration order,
- the round advances cyclically and the timer is re-armed.

Any change to the task set rebuilds the table from scratch. When the scheduler
is running, the outstanding timer is cancelled and re-armed from round 0, so
the new table takes effect immediately.
"""

import logging
import threading
from collections.abc import Callable

from ..core.gcd import GCDMemo
from ..core.ports import Timer, TimerHandle
from ..core.timers import AsyncioTimer
from ..errors import ConfigurationError, SchedulerDestroyedError
from .schedule import Schedule, build_schedule
from .task_models import SchedulerState, Task, TaskCallback, validate_period

logger = logging.getLogger(__name__)


class PeriodicTaskScheduler:
    """
    Run zero-argument callbacks at every multiple of their integer period.

    Periods are abstract units; tick_seconds converts one unit into seconds
    right before the delay is handed to the timer. With isolate_errors=True a
    failing callback is logged and its siblings at the same timepoint still
    run; with False the exception escapes the wake-up (the timer is re-armed
    first).

    State lives on the instance (task id counter, gcd memo) and is guarded by a
    re-entrant lock, so callbacks may call stop()/add()/remove_by_name() on
    their own scheduler and thread-based timers are safe.
    """

    def __init__(
            self,
            timer: Timer | None = None,
            *,
            tick_seconds: float = 1.0,
            isolate_errors: bool = True,
            gcd: GCDMemo | None = None,
    ) -> None:
        if tick_seconds <= 0:
            raise ConfigurationError(f"tick_seconds must be > 0, got {tick_seconds!r}")

        self._timer = timer
        self._tick_seconds = float(tick_seconds)
        self._isolate_errors = isolate_errors
        self._gcd = gcd if gcd is not None else GCDMemo()

        self._tasks: dict[int, Task] = {}
        self._next_id = 1

        self._schedule: Schedule | None = None
        self._current_round = 0
        self._timepoint = 0

        self._handle: TimerHandle | None = None
        # Bumped on every arm; a firing from an older arm is ignored.
        self._generation = 0
        # run() was called with no tasks: start as soon as one is added.
        self._auto_run = False
        self._destroyed = False

        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings, timer: Timer | None = None) -> PeriodicTaskScheduler:
        return cls(
            timer,
            tick_seconds=getattr(settings, "tick_seconds", 1.0),
            isolate_errors=getattr(settings, "isolate_errors", True),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        if self._destroyed:
            return SchedulerState.DESTROYED
        if self._handle is not None or self._auto_run:
            return SchedulerState.RUNNING
        return SchedulerState.STOPPED

    @property
    def is_running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    @property
    def is_stopped(self) -> bool:
        return not self.is_running

    @property
    def schedule(self) -> Schedule | None:
        return self._schedule

    @property
    def tasks(self) -> tuple[Task, ...]:
        with self._lock:
            return tuple(self._tasks.values())

    @property
    def current_round(self) -> int:
        return self._current_round

    @property
    def timepoint(self) -> int:
        """Timepoint of the last wake-up within the current cycle (0 at cycle start)."""
        return self._timepoint

    @property
    def tick_seconds(self) -> float:
        return self._tick_seconds

    # ------------------------------------------------------------------
    # Task set
    # ------------------------------------------------------------------

    def add(self, name: str, period: int, callback: TaskCallback) -> Task:
        """Register a task and rebuild the schedule. Returns the created Task."""
        validate_period(period)
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")

        with self._lock:
            self._ensure_alive()

            task = Task(id=self._next_id, name=name, period=period, callback=callback)
            self._next_id += 1
            self._tasks[task.id] = task
            logger.debug("Added task %r id=%s period=%s", name, task.id, period)

            def _undo() -> None:
                del self._tasks[task.id]

            self._apply_task_change(_undo)
            return task

    def remove_by_name(self, name: str) -> Task | None:
        """
        Remove the task with the lowest id among those named `name`.

        No match is a no-op: the schedule and the outstanding timer stay as they are.
        """
        with self._lock:
            task = next((t for t in self._tasks.values() if t.name == name), None)
            if task is None:
                return None

            del self._tasks[task.id]
            logger.debug("Removed task %r id=%s", name, task.id)

            def _undo() -> None:
                self._tasks[task.id] = task
                self._tasks = dict(sorted(self._tasks.items()))

            self._apply_task_change(_undo)
            return task

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> Callable[[], None]:
        """
        Start the scheduler and return its stop action.

        Already running: nothing happens. No tasks yet: the scheduler is armed
        and starts on the first add().
        """
        with self._lock:
            self._ensure_alive()

            if self.is_running:
                return self.stop

            if not self._tasks:
                self._auto_run = True
                logger.info("Scheduler armed with no tasks; waiting for the first add()")
                return self.stop

            self.rebuild_schedule()
            self._arm()
            logger.info(
                "Scheduler started: %s task(s), %s wake-up(s) per cycle of %s",
                len(self._tasks),
                self._schedule.wakeups_per_cycle,
                self._schedule.max_period,
            )
            return self.stop

    def rerun(self) -> None:
        with self._lock:
            self.stop()
            self.run()

    def stop(self) -> None:
        """Cancel the outstanding timer. Idempotent and safe from inside a callback."""
        with self._lock:
            was_running = self.is_running
            self._auto_run = False
            self._cancel()
            if was_running:
                logger.info("Scheduler stopped at timepoint=%s round=%s", self._timepoint, self._current_round)

    def destroy(self) -> None:
        """Stop and drop every task. The scheduler cannot be used afterwards."""
        with self._lock:
            if self._destroyed:
                return
            self.stop()
            self._tasks.clear()
            self._schedule = None
            self._current_round = 0
            self._timepoint = 0
            self._destroyed = True
            logger.info("Scheduler destroyed")

    # ------------------------------------------------------------------
    # Schedule + dispatch
    # ------------------------------------------------------------------

    def rebuild_schedule(self) -> Schedule:
        """
        Recompute the wormhole table from the current task periods and reset
        the round position. Raises ConfigurationError if there are no tasks.
        """
        with self._lock:
            if not self._tasks:
                raise ConfigurationError("cannot build a schedule without tasks")

            self._schedule = build_schedule((t.period for t in self._tasks.values()), gcd=self._gcd)
            self._current_round = 0
            self._timepoint = 0
            logger.debug(
                "Schedule rebuilt common_period=%s max_period=%s wormholes=%s",
                self._schedule.common_period,
                self._schedule.max_period,
                self._schedule.wormholes,
            )
            return self._schedule

    def invoke_tasks_by_timepoint(self, timepoint: int) -> int:
        """
        Run every task whose period divides timepoint, in registration order.

        Returns the number of callbacks invoked. Tasks removed by an earlier
        callback of the same wake-up are skipped.
        """
        with self._lock:
            due = [t for t in self._tasks.values() if t.is_due(timepoint)]
            invoked = 0
            for task in due:
                if task.id not in self._tasks:
                    continue
                invoked += 1
                if not self._isolate_errors:
                    task.callback()
                    continue
                try:
                    task.callback()
                except Exception:
                    logger.exception(
                        "Task %r id=%s failed at timepoint=%s", task.name, task.id, timepoint
                    )
            return invoked

    # ------------------------------------------------------------------
    # Timer plumbing
    # ------------------------------------------------------------------

    def _ensure_alive(self) -> None:
        if self._destroyed:
            raise SchedulerDestroyedError("scheduler has been destroyed")

    def _get_timer(self) -> Timer:
        if self._timer is None:
            self._timer = AsyncioTimer()
        return self._timer

    def _arm(self) -> None:
        # Generation and handle only move once call_later succeeded; a failed
        # arm leaves the previous timer in charge.
        generation = self._generation + 1
        units = self._schedule.wormholes[self._current_round]
        handle = self._get_timer().call_later(
            units * self._tick_seconds, lambda: self._fire(generation)
        )
        self._generation = generation
        self._handle = handle

    def _cancel(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _apply_task_change(self, undo: Callable[[], None]) -> None:
        """
        Rebuild after the task set changed and push the new table to the timer.

        If that fails (typically the timer cannot arm), undo() reverts the task
        set and the previous schedule and round position are restored, so the
        scheduler is left exactly as it was before the change.
        """
        snapshot = (self._schedule, self._current_round, self._timepoint)
        try:
            if self._tasks:
                self.rebuild_schedule()
                self._resync()
            else:
                self._go_idle()
        except Exception:
            undo()
            self._schedule, self._current_round, self._timepoint = snapshot
            raise

    def _resync(self) -> None:
        """Apply a freshly rebuilt schedule to a running scheduler."""
        if self._auto_run:
            self._arm()
            self._auto_run = False
            logger.info("Scheduler started on first task")
        elif self._handle is not None:
            stale = self._handle
            self._arm()
            stale.cancel()

    def _go_idle(self) -> None:
        """Last task removed: drop the schedule, keep running-ness as armed-but-empty."""
        was_running = self.is_running
        self._cancel()
        self._schedule = None
        self._current_round = 0
        self._timepoint = 0
        if was_running:
            self._auto_run = True
            logger.info("Last task removed; scheduler idle until the next add()")

    def _fire(self, generation: int) -> None:
        with self._lock:
            if self._handle is None or generation != self._generation:
                return

            schedule = self._schedule
            self._timepoint += schedule.wormholes[self._current_round]
            timepoint = self._timepoint
            logger.debug("Wake-up round=%s timepoint=%s", self._current_round, timepoint)

            try:
                self.invoke_tasks_by_timepoint(timepoint)
            finally:
                # A callback may have stopped us or changed the task set (which re-arms).
                if self._handle is not None and generation == self._generation:
                    self._current_round = (self._current_round + 1) % len(schedule.wormholes)
                    if self._current_round == 0:
                        self._timepoint = 0
                    self._arm()
