from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from goalforge.auth import get_current_user
from goalforge.record_store import RecordStore, get_store
from goalforge.routes.common import get_ai_service, http_error, ok
from goalforge.schemas import Goal, GoalCategory, ItemStatus, Milestone, new_id
from goalforge.services.ai_service import AIService
from goalforge.services.cascade import CascadeCoordinator
from goalforge.services.goal_service import GoalService

router = APIRouter(prefix="/api/v1/goals", tags=["Goals"])


class MilestoneIn(BaseModel):
    id: Optional[str] = None
    description: str
    status: ItemStatus = "pending"
    due_date: Optional[date] = None


class GoalCreate(BaseModel):
    title: str
    category: GoalCategory = GoalCategory.CAREER
    description: str = ""
    timeframe: str = ""
    progress: int = 0
    tags: list[str] = []
    milestones: list[MilestoneIn] = []


class GoalUpdate(BaseModel):
    title: Optional[str] = None
    category: Optional[GoalCategory] = None
    description: Optional[str] = None
    timeframe: Optional[str] = None
    progress: Optional[int] = None
    tags: Optional[list[str]] = None
    milestones: Optional[list[MilestoneIn]] = None
    is_completed: Optional[bool] = None


class CompletionRequest(BaseModel):
    completed: bool


class ConvertRequest(BaseModel):
    list_id: Optional[str] = None


class SmartGoalRequest(BaseModel):
    text: str


class MilestoneSuggestRequest(BaseModel):
    goal_text: str
    timeframe: str


def _milestones(goal_id: str, items: list[MilestoneIn]) -> list[Milestone]:
    return [
        Milestone(id=m.id or new_id(), goal_id=goal_id, description=m.description, status=m.status, due_date=m.due_date)
        for m in items
    ]


@router.get("")
async def list_goals(
    category: Optional[str] = None,
    is_completed: Optional[bool] = None,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        goals = GoalService.get_all(store, user_id, {"category": category, "is_completed": is_completed})
        return [g.model_dump(mode="json") for g in goals]
    except Exception as e:
        raise http_error(e)


@router.post("")
async def create_goal(body: GoalCreate, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        goal_id = new_id()
        goal = Goal(
            id=goal_id,
            user_id=user_id,
            title=body.title,
            category=body.category,
            description=body.description,
            timeframe=body.timeframe,
            progress=body.progress,
            tags=body.tags,
            milestones=_milestones(goal_id, body.milestones),
        )
        return ok(GoalService.save(store, user_id, goal).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.post("/smart-rewrite")
async def smart_rewrite(
    body: SmartGoalRequest,
    user_id: str = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
):
    return ok({"text": await ai.generate_smart_goal(body.text)})


@router.post("/suggest-milestones")
async def suggest_milestones(
    body: MilestoneSuggestRequest,
    user_id: str = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
):
    drafts = await ai.generate_milestones(body.goal_text, body.timeframe)
    return ok([d.model_dump(mode="json") for d in drafts])


@router.get("/{goal_id}")
async def get_goal(goal_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        return GoalService.get_by_id(store, user_id, goal_id).model_dump(mode="json")
    except Exception as e:
        raise http_error(e)


@router.put("/{goal_id}")
async def update_goal(
    goal_id: str,
    body: GoalUpdate,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        goal = GoalService.get_by_id(store, user_id, goal_id)
        changes = body.model_dump(exclude_unset=True, exclude={"milestones"})
        if body.milestones is not None:
            changes["milestones"] = _milestones(goal_id, body.milestones)
        updated = Goal.model_validate({**goal.model_dump(), **changes})
        return ok(GoalService.save(store, user_id, updated).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.post("/{goal_id}/complete")
async def set_goal_completion(
    goal_id: str,
    body: CompletionRequest,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        goal = GoalService.set_completed(store, user_id, goal_id, body.completed)
        return ok(goal.model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.post("/{goal_id}/milestones/{milestone_id}/toggle")
async def toggle_milestone(
    goal_id: str,
    milestone_id: str,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        mutation = GoalService.toggle_milestone(store, user_id, goal_id, milestone_id)
        CascadeCoordinator(store).apply(user_id, mutation)
        return ok(GoalService.get_by_id(store, user_id, goal_id).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.post("/{goal_id}/milestones/{milestone_id}/convert")
async def convert_milestone(
    goal_id: str,
    milestone_id: str,
    body: ConvertRequest,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    """Turn a milestone into a task linked to the same goal."""
    try:
        mutation = GoalService.convert_milestone_to_task(store, user_id, goal_id, milestone_id, body.list_id)
        task = CascadeCoordinator(store).apply(user_id, mutation)
        goal = GoalService.get_by_id(store, user_id, goal_id)
        return ok({"task": task.model_dump(mode="json"), "goal": goal.model_dump(mode="json")})
    except Exception as e:
        raise http_error(e)


@router.delete("/{goal_id}")
async def delete_goal(goal_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        GoalService.delete(store, user_id, goal_id)
        return ok()
    except Exception as e:
        raise http_error(e)
