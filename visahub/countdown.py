"""Time left until the next daily listing refresh."""
from __future__ import annotations

from datetime import datetime, time, timedelta, timezone


def parse_refresh_time(value: str) -> time:
    """``"15:30"`` -> 15:30 UTC."""
    hours, _, minutes = value.strip().partition(":")
    return time(int(hours), int(minutes or 0), tzinfo=timezone.utc)


def next_refresh_at(now: datetime, refresh_time: time) -> datetime:
    """Today's refresh slot, or tomorrow's once now is past it."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now_utc = now.astimezone(timezone.utc)
    slot = now_utc.replace(
        hour=refresh_time.hour, minute=refresh_time.minute, second=0, microsecond=0,
    )
    if now_utc > slot:
        slot += timedelta(days=1)
    return slot


def time_until_refresh(now: datetime, refresh_time: time) -> timedelta:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return next_refresh_at(now, refresh_time) - now


def format_countdown(delta: timedelta) -> str:
    total = max(int(delta.total_seconds()), 0)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours}h {minutes}m {seconds}s"
