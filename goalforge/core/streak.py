"""
streak.py — Habit streak calculation.

A streak is the run of consecutive calendar days that ends on the most recent
logged day, provided that day is today or yesterday. Dates after "today" are
ignored so a client clock ahead of ours cannot extend a streak.
"""

from datetime import date, timedelta
from typing import Iterable, Optional


def toggle_date(history: Iterable[date], day: date) -> list[date]:
    """Un-log the day if it is present, log it otherwise. Returns sorted unique dates."""
    days = set(history)
    if day in days:
        days.remove(day)
    else:
        days.add(day)
    return sorted(days)


def calculate_streak(history: Iterable[date], today: date) -> int:
    days = sorted({d for d in history if d <= today}, reverse=True)
    if not days:
        return 0
    if today - days[0] > timedelta(days=1):
        return 0

    streak = 1
    for newer, older in zip(days, days[1:]):
        if newer - older != timedelta(days=1):
            break
        streak += 1
    return streak


def last_logged(history: Iterable[date]) -> Optional[date]:
    return max(history, default=None)
