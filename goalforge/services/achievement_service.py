"""
achievement_service.py — Achievement log CRUD.
"""

from datetime import date
from typing import Optional

from goalforge.errors import NotFoundError, ValidationError
from goalforge.record_store import RecordStore
from goalforge.schemas import Achievement


class AchievementService:
    @staticmethod
    def get_all(store: RecordStore, user_id: str, start: Optional[date] = None, end: Optional[date] = None) -> list[Achievement]:
        items = store.get_all(Achievement, user_id)
        if start:
            items = [a for a in items if a.date >= start]
        if end:
            items = [a for a in items if a.date <= end]
        return sorted(items, key=lambda a: a.date, reverse=True)

    @staticmethod
    def get_by_id(store: RecordStore, user_id: str, achievement_id: str) -> Achievement:
        achievement = store.get(Achievement, achievement_id, user_id=user_id)
        if achievement is None:
            raise NotFoundError("Achievement not found")
        return achievement

    @staticmethod
    def save(store: RecordStore, user_id: str, achievement: Achievement) -> Achievement:
        if not achievement.title.strip():
            raise ValidationError("Achievement title is required")
        return store.upsert(achievement.model_copy(update={"user_id": user_id}))

    @staticmethod
    def delete(store: RecordStore, user_id: str, achievement_id: str) -> None:
        AchievementService.get_by_id(store, user_id, achievement_id)
        store.delete(Achievement, achievement_id, user_id)
