"""
Report routes: AI performance reports and the monthly reflection.
Both always answer; when the model is unavailable the fallback text is returned.
"""
from fastapi import APIRouter, Depends

from goalforge.auth import get_current_user
from goalforge.errors import ValidationError
from goalforge.record_store import RecordStore, get_store
from goalforge.routes.common import get_ai_service, http_error, ok
from goalforge.schemas import Achievement, Goal, Habit, ReportConfig, Task
from goalforge.services.ai_service import AIService

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


@router.post("/generate")
async def generate_report(
    config: ReportConfig,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service),
):
    try:
        if config.start_date > config.end_date:
            raise ValidationError("start_date must not be after end_date")
        report = await ai.generate_report(
            config,
            store.get_all(Goal, user_id),
            store.get_all(Achievement, user_id),
            store.get_all(Task, user_id),
        )
        return ok({"report": report})
    except Exception as e:
        raise http_error(e)


@router.get("/reflection")
async def monthly_reflection(
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service),
):
    try:
        reflection = await ai.generate_reflection(store.get_all(Habit, user_id), store.get_all(Goal, user_id))
        return ok({"reflection": reflection})
    except Exception as e:
        raise http_error(e)
