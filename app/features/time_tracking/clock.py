"""Wall-clock seam"""
from datetime import datetime
from typing import Protocol

from app.utils.datetime_helper import utc_now


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Aware UTC wall clock"""

    def now(self) -> datetime:
        return utc_now()
