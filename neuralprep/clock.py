"""
Clock abstraction and day-boundary helpers.

Scheduling, staleness and due-date logic take a clock instead of calling
datetime.now() directly so they can be tested against fixed times.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in the local timezone (day boundaries follow the user's day)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone()


class FixedClock:
    """Clock frozen at a given instant; advance() moves it forward."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance(self, **kwargs) -> None:
        self.instant = self.instant + timedelta(**kwargs)


DEFAULT_CLOCK = SystemClock()


def resolve_now(clock: Optional[Clock] = None) -> datetime:
    return (clock or DEFAULT_CLOCK).now()


def start_of_day(moment: datetime) -> datetime:
    """Midnight at the start of moment's calendar day (same tzinfo)."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    """Last representable instant of moment's calendar day (same tzinfo)."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def ensure_aware(moment: Optional[datetime]) -> Optional[datetime]:
    """
    Treat naive datetimes (e.g. read back from SQLite) as UTC.
    """
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
