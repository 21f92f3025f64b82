from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from goalforge.auth import get_current_user
from goalforge.record_store import RecordStore, get_store
from goalforge.routes.common import http_error, ok
from goalforge.services.habit_service import HabitService

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])


class HabitIn(BaseModel):
    name: str


class ToggleRequest(BaseModel):
    day: Optional[date] = None
    today: Optional[date] = None


@router.get("")
async def list_habits(
    today: Optional[date] = None,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        HabitService.refresh_streaks(store, user_id, today)
        return [
            {**item["habit"].model_dump(mode="json"), "completed_today": item["completed_today"]}
            for item in HabitService.get_all(store, user_id, today)
        ]
    except Exception as e:
        raise http_error(e)


@router.post("")
async def create_habit(body: HabitIn, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        return ok(HabitService.create(store, user_id, body.name).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.put("/{habit_id}")
async def rename_habit(
    habit_id: str,
    body: HabitIn,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        return ok(HabitService.rename(store, user_id, habit_id, body.name).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.post("/{habit_id}/toggle")
async def toggle_habit(
    habit_id: str,
    body: ToggleRequest = ToggleRequest(),
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    """Log or un-log a day (defaults to today) and return the recomputed streak."""
    try:
        habit = HabitService.toggle(store, user_id, habit_id, body.day, body.today)
        return ok(habit.model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.delete("/{habit_id}")
async def delete_habit(habit_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        HabitService.delete(store, user_id, habit_id)
        return ok()
    except Exception as e:
        raise http_error(e)
