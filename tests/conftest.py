# tests/conftest.py

from __future__ import annotations

import pytest

from wormhole_scheduler.config import get_settings
from wormhole_scheduler.tasks.task_scheduler import PeriodicTaskScheduler

from .fakes import FakeTimer, Recorder


@pytest.fixture()
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture()
def recorder(fake_timer: FakeTimer) -> Recorder:
    return Recorder(fake_timer)


@pytest.fixture()
def scheduler(fake_timer: FakeTimer) -> PeriodicTaskScheduler:
    """
    Scheduler on a manual clock: one period unit == one second of fake time.
    """
    return PeriodicTaskScheduler(fake_timer, tick_seconds=1.0)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """
    Drop WORMHOLE_* variables and point logs at tmp_path, so settings are
    deterministic regardless of the developer's environment.
    """
    import os

    for key in list(os.environ):
        if key.startswith("WORMHOLE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("WORMHOLE_LOG_DIR", str(tmp_path / "logs"))
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
