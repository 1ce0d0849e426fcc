# tests/test_registry.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from app.features.time_tracking.domain import TimerPhase
from app.features.time_tracking.errors import (
    NotFoundError,
    PersistenceError,
    TimerBusyError,
    ValidationError,
)
from app.features.time_tracking.registry import TimerRegistry

from .conftest import USER_ID
from .fakes import T0


@pytest.mark.asyncio
async def test_start_creates_entry_and_marks_task_in_progress(registry, gateway) -> None:
    state = await registry.start("task-1")

    assert state is not None
    assert state.phase == TimerPhase.RUNNING
    assert state.entry_ref == "entry-1"
    assert state.start_anchor == T0
    assert state.total_duration == timedelta(0)
    assert state.accumulated_paused_duration == timedelta(0)
    assert gateway.created == [("task-1", USER_ID, T0)]
    assert gateway.statuses == [("task-1", "in_progress")]
    assert registry.is_running("task-1")
    assert registry.scheduler.is_active


@pytest.mark.asyncio
async def test_start_twice_creates_a_single_entry(registry, gateway, clock) -> None:
    first = await registry.start("task-1")
    clock.advance(5)
    second = await registry.start("task-1")

    assert len(gateway.created) == 1
    assert second is not None
    assert second.entry_ref == first.entry_ref
    assert second.start_anchor == first.start_anchor
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_start_on_paused_timer_is_a_noop(registry, gateway, clock) -> None:
    await registry.start("task-1")
    clock.advance(10)
    registry.pause("task-1")

    state = await registry.start("task-1")

    assert state.phase == TimerPhase.PAUSED
    assert len(gateway.created) == 1


@pytest.mark.asyncio
async def test_start_without_user_is_rejected(gateway, clock) -> None:
    reg = TimerRegistry(gateway, clock=clock, user_id=None, tick_interval=3600)

    with pytest.raises(ValidationError):
        await reg.start("task-1")

    assert gateway.created == []
    assert reg.query("task-1") is None


@pytest.mark.asyncio
async def test_start_with_blank_task_id_is_rejected(registry, gateway) -> None:
    with pytest.raises(ValidationError):
        await registry.start("   ")
    assert gateway.created == []


@pytest.mark.asyncio
async def test_failed_start_leaves_no_state(registry, gateway) -> None:
    gateway.fail_create = True

    with pytest.raises(PersistenceError):
        await registry.start("task-1")

    assert registry.query("task-1") is None
    assert not registry.is_running("task-1")
    assert gateway.statuses == []
    assert not registry.is_pending("task-1")


@pytest.mark.asyncio
async def test_status_update_failure_keeps_the_timer(registry, gateway) -> None:
    gateway.fail_status = True

    state = await registry.start("task-1")

    assert state is not None
    assert registry.is_running("task-1")


@pytest.mark.asyncio
async def test_elapsed_is_computed_from_the_anchor(registry, clock) -> None:
    await registry.start("task-1")
    clock.advance(125)

    assert registry.formatted_elapsed("task-1") == "00:02:05"


@pytest.mark.asyncio
async def test_elapsed_has_no_drift_with_irregular_ticks(registry, clock) -> None:
    await registry.start("task-1")
    for step in (0.7, 1.3, 0.2, 2.9, 1.0, 0.9):
        clock.advance(step)
        registry.scheduler.tick()

    state = registry.query("task-1")
    assert state.current_session_duration == timedelta(seconds=7)
    assert registry.formatted_elapsed("task-1") == "00:00:07"


def test_formatted_elapsed_of_unknown_task(registry) -> None:
    assert registry.formatted_elapsed("missing") == "00:00:00"
    assert registry.remaining("missing") is None
    assert not registry.is_running("missing")
    assert not registry.is_paused("missing")


@pytest.mark.asyncio
async def test_pause_time_is_excluded(registry, gateway, clock) -> None:
    await registry.start("task-1")
    clock.advance(10)
    registry.pause("task-1")
    clock.advance(30)
    registry.resume("task-1")
    clock.advance(30)

    final = await registry.stop("task-1")

    assert final == timedelta(seconds=40)
    assert gateway.finalized == [("entry-1", T0 + timedelta(seconds=70))]


@pytest.mark.asyncio
async def test_pause_folds_session_into_total(registry, clock) -> None:
    await registry.start("task-1")
    clock.advance(10)

    state = registry.pause("task-1")

    assert state.phase == TimerPhase.PAUSED
    assert state.total_duration == timedelta(seconds=10)
    assert state.current_session_duration == timedelta(0)
    assert state.pause_anchor == T0 + timedelta(seconds=10)

    # Display is frozen while paused
    clock.advance(300)
    assert registry.formatted_elapsed("task-1") == "00:00:10"
    assert registry.is_paused("task-1")
    assert not registry.is_running("task-1")


@pytest.mark.asyncio
async def test_pause_and_resume_are_idempotent(registry, clock) -> None:
    await registry.start("task-1")
    clock.advance(10)
    once = registry.pause("task-1")
    clock.advance(5)
    twice = registry.pause("task-1")
    assert twice == once

    clock.advance(5)
    resumed = registry.resume("task-1")
    clock.advance(5)
    resumed_again = registry.resume("task-1")
    assert resumed_again == resumed
    assert resumed.accumulated_paused_duration == timedelta(seconds=10)
    assert resumed.start_anchor == T0 + timedelta(seconds=20)


def test_pause_and_resume_of_unknown_task_do_nothing(registry) -> None:
    assert registry.pause("missing") is None
    assert registry.resume("missing") is None
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_resume_while_running_is_a_noop(registry, clock) -> None:
    started = await registry.start("task-1")
    clock.advance(3)

    state = registry.resume("task-1")

    assert state.start_anchor == started.start_anchor
    assert state.accumulated_paused_duration == timedelta(0)


@pytest.mark.asyncio
async def test_accumulated_pause_across_cycles(registry, clock) -> None:
    await registry.start("task-1")
    for _ in range(3):
        clock.advance(20)
        registry.pause("task-1")
        clock.advance(7)
        registry.resume("task-1")
    clock.advance(1)

    state = registry.query("task-1")
    assert state.accumulated_paused_duration == timedelta(seconds=21)
    assert registry.elapsed("task-1") == timedelta(seconds=61)


@pytest.mark.asyncio
async def test_stop_of_paused_timer_excludes_open_pause(registry, gateway, clock) -> None:
    await registry.start("task-1")
    clock.advance(15)
    registry.pause("task-1")
    clock.advance(600)

    final = await registry.stop("task-1")

    assert final == timedelta(seconds=15)
    assert len(gateway.finalized) == 1


@pytest.mark.asyncio
async def test_stop_finalizes_entry_and_removes_timer(registry, gateway, clock) -> None:
    await registry.start("task-1")
    clock.advance(42)

    final = await registry.stop("task-1")

    assert final == timedelta(seconds=42)
    assert registry.query("task-1") is None
    assert gateway.finalized == [("entry-1", T0 + timedelta(seconds=42))]
    assert gateway.statuses == [("task-1", "in_progress")]


@pytest.mark.asyncio
async def test_stop_can_mark_task_completed(registry, gateway) -> None:
    await registry.start("task-1")

    await registry.stop("task-1", mark_completed=True)

    assert gateway.statuses[-1] == ("task-1", "completed")


@pytest.mark.asyncio
async def test_stop_of_unknown_task_is_a_noop(registry, gateway) -> None:
    assert await registry.stop("missing") is None
    assert gateway.finalized == []


@pytest.mark.asyncio
async def test_failed_stop_keeps_timer_for_retry(registry, gateway, clock) -> None:
    await registry.start("task-1")
    clock.advance(30)
    gateway.fail_finalize = True

    with pytest.raises(PersistenceError):
        await registry.stop("task-1")

    assert registry.is_running("task-1")
    assert registry.query("task-1").entry_ref == "entry-1"

    gateway.fail_finalize = False
    clock.advance(10)
    final = await registry.stop("task-1")

    assert final == timedelta(seconds=40)
    assert registry.query("task-1") is None
    assert len(gateway.finalized) == 1


@pytest.mark.asyncio
async def test_stop_of_vanished_entry_keeps_timer(registry, gateway) -> None:
    await registry.start("task-1")
    gateway.finalize_missing = True

    with pytest.raises(NotFoundError):
        await registry.stop("task-1")

    assert "task-1" in registry


@pytest.mark.asyncio
async def test_concurrent_start_and_stop_while_start_in_flight(registry, gateway) -> None:
    gateway.create_gate = asyncio.Event()

    first = asyncio.create_task(registry.start("task-1"))
    await asyncio.sleep(0)
    assert registry.is_pending("task-1")

    assert await registry.start("task-1") is None
    with pytest.raises(TimerBusyError):
        await registry.stop("task-1")

    gateway.create_gate.set()
    state = await first

    assert state.phase == TimerPhase.RUNNING
    assert len(gateway.created) == 1
    assert not registry.is_pending("task-1")


@pytest.mark.asyncio
async def test_stop_during_status_update_wins_over_start(registry, gateway) -> None:
    gateway.status_gate = asyncio.Event()

    first = asyncio.create_task(registry.start("task-1"))
    for _ in range(3):
        await asyncio.sleep(0)
    assert "task-1" in registry

    assert await registry.stop("task-1") == timedelta(0)
    gateway.status_gate.set()

    assert await first is None
    assert "task-1" not in registry
    assert gateway.finalized == [("entry-1", T0)]
    assert not registry.scheduler.is_active


@pytest.mark.asyncio
async def test_padded_task_ids_address_the_same_timer(registry, gateway, clock) -> None:
    state = await registry.start(" task-1 ")
    assert state.task_id == "task-1"
    assert await registry.start("task-1") is not None
    assert len(gateway.created) == 1

    clock.advance(30)
    assert registry.is_running(" task-1")
    assert registry.query("task-1 ").task_id == "task-1"
    assert registry.formatted_elapsed(" task-1 ") == "00:00:30"

    registry.pause(" task-1 ")
    assert registry.is_paused("task-1")
    registry.resume("task-1 ")
    clock.advance(10)

    assert await registry.stop(" task-1 ") == timedelta(seconds=40)
    assert gateway.finalized == [("entry-1", T0 + timedelta(seconds=40))]
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_timers_are_independent(registry, clock) -> None:
    await registry.start("task-1")
    clock.advance(10)
    await registry.start("task-2")
    clock.advance(10)
    registry.pause("task-1")
    clock.advance(10)

    assert registry.formatted_elapsed("task-1") == "00:00:20"
    assert registry.formatted_elapsed("task-2") == "00:00:20"
    assert registry.is_paused("task-1")
    assert registry.is_running("task-2")
    assert {s.task_id for s in registry.snapshots()} == {"task-1", "task-2"}


@pytest.mark.asyncio
async def test_remaining_against_estimate(registry, clock) -> None:
    await registry.start("task-1", estimated_target=timedelta(hours=1))
    clock.advance(600)
    assert registry.remaining("task-1") == timedelta(seconds=3000)

    clock.advance(3600)
    assert registry.remaining("task-1") == timedelta(0)


@pytest.mark.asyncio
async def test_remaining_without_estimate(registry) -> None:
    await registry.start("task-1")
    assert registry.remaining("task-1") is None


@pytest.mark.asyncio
async def test_query_returns_a_snapshot(registry, clock) -> None:
    await registry.start("task-1")
    snapshot = registry.query("task-1")
    snapshot.phase = TimerPhase.STOPPED

    assert registry.is_running("task-1")


@pytest.mark.asyncio
async def test_session_duration_never_decreases(registry, clock) -> None:
    await registry.start("task-1")
    clock.advance(30)
    registry.refresh()

    clock.advance(-10)  # wall clock stepped back
    registry.refresh()

    assert registry.query("task-1").current_session_duration == timedelta(seconds=30)


@pytest.mark.asyncio
async def test_refresh_counts_running_timers(registry, clock) -> None:
    await registry.start("task-1")
    await registry.start("task-2")
    registry.pause("task-2")
    clock.advance(4)

    assert registry.refresh() == 1
    assert registry.query("task-1").current_session_duration == timedelta(seconds=4)
    assert registry.query("task-2").current_session_duration == timedelta(0)
