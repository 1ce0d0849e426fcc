"""Datetime helpers shared by the timer engine and the Supabase adapter"""
from datetime import datetime, timezone
from typing import Union


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive values are treated as already being UTC, which is how Postgres
    `timestamp without time zone` columns come back from PostgREST.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse a PostgREST timestamp into an aware UTC datetime.

    Args:
        value: ISO-8601 string (a trailing "Z" is accepted) or a datetime

    Returns:
        datetime in UTC
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))
