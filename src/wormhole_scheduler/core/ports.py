# src/wormhole_scheduler/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler runtime.

The runtime depends on a Timer protocol instead of a concrete event loop.
This keeps asyncio / threading backends swappable and makes testing easier
(tests drive a manual clock through the same port).
"""

from typing import Callable, Protocol


class TimerHandle(Protocol):
    """A single scheduled callback that can still be cancelled."""

    def cancel(self) -> None: ...


class Timer(Protocol):
    """
    Schedule-callback-after-delay primitive.

    Implementations must:
    - call callback once, roughly delay_seconds from now,
    - make cancel() a no-op if the callback has already run.
    """

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...
