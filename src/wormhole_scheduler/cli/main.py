# src/wormhole_scheduler/cli/main.py

"""
CLI entrypoint.

Two subcommands:
- plan PERIOD...            print the wormhole table for a set of periods,
- run NAME=PERIOD... [-c N] run demo tasks that just log, for N full cycles.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys

from ..config import get_settings
from ..core.timers import AsyncioTimer
from ..errors import SchedulerError
from ..logging_setup import setup_logging
from ..tasks.schedule import build_schedule
from ..tasks.task_scheduler import PeriodicTaskScheduler

logger = logging.getLogger(__name__)


def _parse_task_spec(raw: str) -> tuple[str, int]:
    name, sep, period = raw.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=PERIOD, got {raw!r}")
    try:
        return name.strip(), int(period)
    except ValueError:
        raise argparse.ArgumentTypeError(f"period must be an integer, got {period!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wormhole-scheduler",
        description="Coalescing periodic task scheduler driven by a single timer.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="print the wake-up schedule for a set of periods")
    plan.add_argument("periods", nargs="+", type=int, metavar="PERIOD")

    run = sub.add_parser("run", help="run demo tasks that log every time they fire")
    run.add_argument("tasks", nargs="+", type=_parse_task_spec, metavar="NAME=PERIOD")
    run.add_argument("-c", "--cycles", type=int, default=1, help="full cycles to run (default: 1)")
    run.add_argument("--tick", type=float, default=None, help="seconds per period unit (default: from settings)")

    return parser


def cmd_plan(periods: list[int]) -> int:
    schedule = build_schedule(periods)
    print(json.dumps(schedule.describe(), indent=2))
    return 0


async def run_demo(
        tasks: list[tuple[str, int]],
        *,
        cycles: int,
        tick_seconds: float,
        isolate_errors: bool = True,
) -> dict[str, int]:
    """Run logging demo tasks for `cycles` full cycles. Returns fire counts per task name."""
    loop = asyncio.get_running_loop()
    done = asyncio.Event()
    counts: dict[str, int] = {name: 0 for name, _ in tasks}

    scheduler = PeriodicTaskScheduler(
        AsyncioTimer(loop), tick_seconds=tick_seconds, isolate_errors=isolate_errors
    )

    def make_callback(name: str):
        def _cb() -> None:
            counts[name] += 1
            logger.info("%s fired (timepoint=%s)", name, scheduler.timepoint)
        return _cb

    for name, period in tasks:
        scheduler.add(name, period, make_callback(name))

    # Fires at the end of every cycle; max_period is already a due timepoint,
    # so this task does not change the wake-up table.
    cycles_seen = 0

    def _on_cycle() -> None:
        nonlocal cycles_seen
        cycles_seen += 1
        if cycles_seen >= cycles:
            scheduler.stop()
            done.set()

    scheduler.add("__cycle__", scheduler.schedule.max_period, _on_cycle)

    try:
        loop.add_signal_handler(signal.SIGINT, done.set)
    except (NotImplementedError, RuntimeError):
        # Not supported on every platform / outside the main thread.
        pass

    scheduler.run()
    try:
        await done.wait()
    finally:
        scheduler.destroy()
    return counts


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    console_level = getattr(logging, settings.log_level, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    args = build_parser().parse_args(argv)

    try:
        if args.command == "plan":
            return cmd_plan(args.periods)

        if args.cycles < 1:
            logger.error("--cycles must be >= 1")
            return 2
        tick = args.tick if args.tick is not None else settings.tick_seconds
        counts = asyncio.run(
            run_demo(args.tasks, cycles=args.cycles, tick_seconds=tick, isolate_errors=settings.isolate_errors)
        )
        logger.info("Done: %s", counts)
        return 0
    except SchedulerError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
