# tests/conftest.py

from __future__ import annotations

import pytest

from app.features.time_tracking.registry import TimerRegistry

from .fakes import FakeClock, FakeGateway

USER_ID = "user-1"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def registry(gateway: FakeGateway, clock: FakeClock) -> TimerRegistry:
    """
    Registry wired with a fake clock and an in-memory gateway.

    Ticks are driven by hand with registry.scheduler.tick(); the interval
    is long enough that the background driver never fires.
    """
    return TimerRegistry(gateway, clock=clock, user_id=USER_ID, tick_interval=3600)
