"""
habit_service.py — Habits & Streaks tracking
Toggles a day in a habit's history and recomputes the streak after every toggle.
"""

import logging
from datetime import date, datetime, timezone

from goalforge.core.streak import calculate_streak, last_logged, toggle_date
from goalforge.errors import NotFoundError, ValidationError
from goalforge.record_store import RecordStore
from goalforge.schemas import Habit

logger = logging.getLogger(__name__)


class HabitService:
    @staticmethod
    def create(store: RecordStore, user_id: str, name: str) -> Habit:
        if not name or not name.strip():
            raise ValidationError("Habit name is required")
        return store.upsert(Habit(user_id=user_id, name=name.strip()))

    @staticmethod
    def get_all(store: RecordStore, user_id: str, today: date = None) -> list[dict]:
        """All habits with today's status."""
        today = today or datetime.now(timezone.utc).date()
        return [
            {"habit": h, "completed_today": today in h.history}
            for h in store.get_all(Habit, user_id)
        ]

    @staticmethod
    def get_by_id(store: RecordStore, user_id: str, habit_id: str) -> Habit:
        habit = store.get(Habit, habit_id, user_id=user_id)
        if habit is None:
            raise NotFoundError("Habit not found")
        return habit

    @staticmethod
    def rename(store: RecordStore, user_id: str, habit_id: str, name: str) -> Habit:
        if not name or not name.strip():
            raise ValidationError("Habit name is required")
        habit = HabitService.get_by_id(store, user_id, habit_id)
        return store.upsert(habit.model_copy(update={"name": name.strip()}))

    @staticmethod
    def delete(store: RecordStore, user_id: str, habit_id: str) -> None:
        HabitService.get_by_id(store, user_id, habit_id)
        store.delete(Habit, habit_id, user_id)

    @staticmethod
    def toggle(store: RecordStore, user_id: str, habit_id: str, day: date = None, today: date = None) -> Habit:
        """Log or un-log a day, then recompute streak and last-logged date."""
        today = today or datetime.now(timezone.utc).date()
        day = day or today
        habit = HabitService.get_by_id(store, user_id, habit_id)

        history = toggle_date(habit.history, day)
        updated = habit.model_copy(update={
            "history": history,
            "streak_count": calculate_streak(history, today),
            "last_logged_date": last_logged(history),
        })
        return store.upsert(updated)

    @staticmethod
    def refresh_streaks(store: RecordStore, user_id: str, today: date = None) -> list[Habit]:
        """Recompute stored streaks, e.g. after a day passed without logging."""
        today = today or datetime.now(timezone.utc).date()
        result = []
        for habit in store.get_all(Habit, user_id):
            streak = calculate_streak(habit.history, today)
            if streak != habit.streak_count:
                habit = store.upsert(habit.model_copy(update={"streak_count": streak}))
            result.append(habit)
        return result
