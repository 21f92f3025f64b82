from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from goalforge.auth import get_current_user
from goalforge.errors import NotFoundError
from goalforge.record_store import RecordStore, get_store
from goalforge.routes.common import http_error, ok
from goalforge.schemas import ItemStatus, Task, TaskList
from goalforge.services.cascade import CascadeCoordinator
from goalforge.services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks", tags=["Tasks"])


class TaskListIn(BaseModel):
    title: str


class TaskCreate(BaseModel):
    list_id: str
    title: str
    details: Optional[str] = None
    due_date: Optional[date] = None
    status: ItemStatus = "pending"
    linked_goal_id: Optional[str] = None


class TaskUpdate(BaseModel):
    list_id: Optional[str] = None
    title: Optional[str] = None
    details: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[ItemStatus] = None
    linked_goal_id: Optional[str] = None


# --- Lists ---
@router.get("/lists")
async def list_task_lists(user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        TaskService.ensure_default_list(store, user_id)
        return [tl.model_dump(mode="json") for tl in TaskService.get_lists(store, user_id)]
    except Exception as e:
        raise http_error(e)


@router.post("/lists")
async def create_task_list(body: TaskListIn, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        task_list = TaskService.save_list(store, user_id, TaskList(user_id=user_id, title=body.title))
        return ok(task_list.model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.put("/lists/{list_id}")
async def rename_task_list(
    list_id: str,
    body: TaskListIn,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        existing = store.get(TaskList, list_id, user_id=user_id)
        if existing is None:
            raise NotFoundError("Task list not found")
        task_list = TaskService.save_list(store, user_id, existing.model_copy(update={"title": body.title}))
        return ok(task_list.model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.delete("/lists/{list_id}")
async def delete_task_list(list_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    """Delete a list and its tasks, then recompute the goals they were linked to."""
    try:
        mutation = TaskService.delete_list(store, user_id, list_id)
        CascadeCoordinator(store).apply(user_id, mutation)
        return ok({"recomputed_goal_ids": sorted(mutation.affected_goal_ids)})
    except Exception as e:
        raise http_error(e)


# --- Tasks ---
@router.get("")
async def list_tasks(
    list_id: Optional[str] = None,
    linked_goal_id: Optional[str] = None,
    status: Optional[str] = None,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        filters = {"list_id": list_id, "linked_goal_id": linked_goal_id, "status": status}
        return [t.model_dump(mode="json") for t in TaskService.get_all(store, user_id, filters)]
    except Exception as e:
        raise http_error(e)


@router.post("")
async def create_task(body: TaskCreate, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        mutation = TaskService.save(store, user_id, Task(user_id=user_id, **body.model_dump()))
        task = CascadeCoordinator(store).apply(user_id, mutation)
        return ok(task.model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.get("/{task_id}")
async def get_task(task_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        return TaskService.get_by_id(store, user_id, task_id).model_dump(mode="json")
    except Exception as e:
        raise http_error(e)


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    body: TaskUpdate,
    user_id: str = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        task = TaskService.get_by_id(store, user_id, task_id)
        updated = Task.model_validate({**task.model_dump(), **body.model_dump(exclude_unset=True)})
        mutation = TaskService.save(store, user_id, updated)
        return ok(CascadeCoordinator(store).apply(user_id, mutation).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.post("/{task_id}/toggle")
async def toggle_task(task_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        mutation = TaskService.toggle(store, user_id, task_id)
        return ok(CascadeCoordinator(store).apply(user_id, mutation).model_dump(mode="json"))
    except Exception as e:
        raise http_error(e)


@router.delete("/{task_id}")
async def delete_task(task_id: str, user_id: str = Depends(get_current_user), store: RecordStore = Depends(get_store)):
    try:
        mutation = TaskService.delete(store, user_id, task_id)
        CascadeCoordinator(store).apply(user_id, mutation)
        return ok()
    except Exception as e:
        raise http_error(e)
