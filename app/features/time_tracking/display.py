"""Formatting helpers for timer displays. Pure functions, no state."""
import math
from datetime import timedelta
from typing import Optional, Union

from .domain import TimerPhase

OVERDUE_LABEL = "Overdue"

Seconds = Union[int, float, timedelta]


def _whole_seconds(value: Seconds) -> int:
    if isinstance(value, timedelta):
        value = value.total_seconds()
    return max(0, math.floor(value))


def format_duration(value: Seconds) -> str:
    """
    Format a duration as HH:MM:SS.

    Fractions of a second are floored; negative values show as zero.
    Hours are zero-padded to two digits and are not capped.
    """
    total = _whole_seconds(value)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_remaining(value: Seconds) -> str:
    """Remaining budget as HH:MM:SS, or "Overdue" once it is used up"""
    seconds = value.total_seconds() if isinstance(value, timedelta) else value
    if seconds <= 0:
        return OVERDUE_LABEL
    return format_duration(value)


def progress_percent(elapsed: timedelta, estimate: Optional[timedelta]) -> Optional[int]:
    """Share of the estimate already spent, rounded and capped at 100"""
    if not estimate or estimate <= timedelta(0):
        return None
    ratio = elapsed / estimate
    return min(100, round(ratio * 100))


def status_label(phase: TimerPhase) -> str:
    if phase == TimerPhase.RUNNING:
        return "Running"
    if phase == TimerPhase.PAUSED:
        return "Paused"
    return "Stopped"


def hours_to_duration(hours: Optional[float]) -> Optional[timedelta]:
    """Convert a task's estimated_hours into a timedelta budget"""
    if hours is None:
        return None
    try:
        hours = float(hours)
    except (TypeError, ValueError):
        return None
    if hours <= 0:
        return None
    return timedelta(hours=hours)
