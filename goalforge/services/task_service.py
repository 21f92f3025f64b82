"""
task_service.py — Task lists and tasks
Handles CRUD for lists and tasks. Every write reports the goals whose
progress depends on it so the cascade can recompute them.
"""

import logging
from datetime import datetime, timezone

from goalforge.config import DEFAULT_TASK_LIST_TITLE
from goalforge.errors import NotFoundError, ValidationError
from goalforge.record_store import RecordStore
from goalforge.schemas import Goal, Task, TaskList
from goalforge.services.cascade import Mutation

logger = logging.getLogger(__name__)


class TaskService:
    # --- Lists ---
    @staticmethod
    def get_lists(store: RecordStore, user_id: str) -> list[TaskList]:
        return store.get_all(TaskList, user_id)

    @staticmethod
    def ensure_default_list(store: RecordStore, user_id: str) -> TaskList:
        lists = store.get_all(TaskList, user_id)
        for task_list in lists:
            if task_list.is_default:
                return task_list
        return store.upsert(TaskList(user_id=user_id, title=DEFAULT_TASK_LIST_TITLE, is_default=True))

    @staticmethod
    def save_list(store: RecordStore, user_id: str, task_list: TaskList) -> TaskList:
        if not task_list.title.strip():
            raise ValidationError("List title is required")
        existing = store.get(TaskList, task_list.id, user_id=user_id)
        # The default flag belongs to the list, not to the caller
        is_default = existing.is_default if existing else False
        return store.upsert(task_list.model_copy(update={"user_id": user_id, "is_default": is_default}))

    @staticmethod
    def delete_list(store: RecordStore, user_id: str, list_id: str) -> Mutation:
        """Delete a list with its tasks; every goal those tasks fed is affected."""
        task_list = store.get(TaskList, list_id, user_id=user_id)
        if task_list is None:
            raise NotFoundError("Task list not found")
        if task_list.is_default:
            raise ValidationError("The default list cannot be deleted")

        doomed = [t for t in store.get_all(Task, user_id) if t.list_id == list_id]
        for task in doomed:
            store.delete(Task, task.id, user_id)
        store.delete(TaskList, list_id, user_id)
        logger.info(f"Deleted list {list_id} with {len(doomed)} task(s)")
        return Mutation.touching(task_list, *(t.linked_goal_id for t in doomed))

    # --- Tasks ---
    @staticmethod
    def get_all(store: RecordStore, user_id: str, filters: dict = None) -> list[Task]:
        tasks = store.get_all(Task, user_id)
        if filters:
            if filters.get("list_id"):
                tasks = [t for t in tasks if t.list_id == filters["list_id"]]
            if filters.get("linked_goal_id"):
                tasks = [t for t in tasks if t.linked_goal_id == filters["linked_goal_id"]]
            if filters.get("status"):
                tasks = [t for t in tasks if t.status == filters["status"]]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    @staticmethod
    def get_by_id(store: RecordStore, user_id: str, task_id: str) -> Task:
        task = store.get(Task, task_id, user_id=user_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    @staticmethod
    def save(store: RecordStore, user_id: str, task: Task) -> Mutation:
        """Create or update a task. Affects the new and the previous linked goal."""
        if not task.title.strip():
            raise ValidationError("Task title is required")
        if store.get(TaskList, task.list_id, user_id=user_id) is None:
            raise ValidationError("Task list does not exist")
        if task.linked_goal_id and store.get(Goal, task.linked_goal_id, user_id=user_id) is None:
            raise ValidationError("Linked goal does not exist")

        previous = store.get(Task, task.id, user_id=user_id)

        if task.status == "completed" and not task.completed_at:
            task = task.model_copy(update={"completed_at": datetime.now(timezone.utc)})
        elif task.status != "completed":
            task = task.model_copy(update={"completed_at": None})
        task = task.model_copy(update={"user_id": user_id})

        store.upsert(task)
        return Mutation.touching(task, task.linked_goal_id, previous.linked_goal_id if previous else None)

    @staticmethod
    def toggle(store: RecordStore, user_id: str, task_id: str) -> Mutation:
        task = TaskService.get_by_id(store, user_id, task_id)
        status = "pending" if task.status == "completed" else "completed"
        return TaskService.save(store, user_id, task.model_copy(update={"status": status, "completed_at": None}))

    @staticmethod
    def delete(store: RecordStore, user_id: str, task_id: str) -> Mutation:
        task = TaskService.get_by_id(store, user_id, task_id)
        store.delete(Task, task_id, user_id)
        return Mutation.touching(task, task.linked_goal_id)
