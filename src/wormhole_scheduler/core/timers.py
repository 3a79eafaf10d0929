# src/wormhole_scheduler/core/timers.py

"""Timer adapters for the scheduler runtime (asyncio loop, background threads)."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable

from .ports import TimerHandle

logger = logging.getLogger(__name__)


class AsyncioTimer:
    """
    Timer backed by loop.call_later.

    If no loop is given, the running loop is resolved lazily on the first
    call_later(), so the timer can be created outside of a coroutine.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(max(0.0, delay_seconds), callback)


class ThreadingTimer:
    """
    Timer backed by one daemon threading.Timer per arm.

    Callbacks run on the timer thread; the scheduler serializes state access
    with its own lock.
    """

    def __init__(self, *, name_prefix: str = "wormhole-timer") -> None:
        self._name_prefix = name_prefix
        self._seq = 0

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        self._seq += 1
        t = threading.Timer(max(0.0, delay_seconds), callback)
        t.name = f"{self._name_prefix}-{self._seq}"
        t.daemon = True
        t.start()
        logger.debug("Armed %s delay=%.3fs", t.name, delay_seconds)
        return t
