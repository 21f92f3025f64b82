import datetime as dt
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from goalforge.auth import get_current_user
from goalforge.record_store import RecordStore, get_store
from goalforge.routes.common import get_ai_service, http_error, ok
from goalforge.schemas import Achievement, AchievementType
from goalforge.services.achievement_service import AchievementService
from goalforge.services.ai_service import AIService

router = APIRouter(prefix="/api/v1/achievements", tags=["Achievements"])


class AchievementIn(BaseModel):
    title: str
    description: str = ""
    classification: AchievementType = AchievementType.OTHER
    summary: str = ""
    project: str = ""
    date: date
    evidence_url: Optional[str] = None


class AchievementUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    classification: Optional[AchievementType] = None
    summary: Optional[str] = None
    project: Optional[str] = None
    date: Optional[dt.date] = None
    evidence_url: Optional[str] = None


class ClassifyRequest(BaseModel):
    title: str
    description: str


@router.get("")
async def list_achievements(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        return [a.model_dump(mode="json") for a in AchievementService.get_all(store, user_id, start, end)]
    except Exception as e:
        raise http_error(e)


@router.post("")
async def create_achievement(body: AchievementIn, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        achievement = AchievementService.save(store, user_id, Achievement(user_id=user_id, **body.model_dump()))
        return ok(achievement.model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.post("/classify")
async def classify_achievement(
    body: ClassifyRequest,
    user_id: str = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
):
    """Suggest a category and a review-ready summary. Never fails: falls back to Other."""
    result = await ai.classify_achievement(body.title, body.description)
    return ok(result.model_dump(mode="json"))


@router.get("/{achievement_id}")
async def get_achievement(achievement_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        return AchievementService.get_by_id(store, user_id, achievement_id).model_dump(mode="json")
    except Exception as e:
        raise http_error(e)


@router.put("/{achievement_id}")
async def update_achievement(
    achievement_id: str,
    body: AchievementUpdate,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        existing = AchievementService.get_by_id(store, user_id, achievement_id)
        updated = Achievement.model_validate({**existing.model_dump(), **body.model_dump(exclude_unset=True)})
        return ok(AchievementService.save(store, user_id, updated).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.delete("/{achievement_id}")
async def delete_achievement(achievement_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        AchievementService.delete(store, user_id, achievement_id)
        return ok()
    except Exception as e:
        raise http_error(e)
