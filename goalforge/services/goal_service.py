"""
goal_service.py — Goals and their embedded milestones
Saving a goal recomputes its own progress; milestone edits report the goal
as affected so the cascade recomputes it after the write.
"""

import logging
from datetime import datetime, timezone

from goalforge.core.progress import apply_progress
from goalforge.errors import NotFoundError, ValidationError
from goalforge.record_store import RecordStore
from goalforge.schemas import KPI, Goal, Milestone, Task
from goalforge.services.cascade import Mutation
from goalforge.services.task_service import TaskService

logger = logging.getLogger(__name__)


class GoalService:
    @staticmethod
    def get_all(store: RecordStore, user_id: str, filters: dict = None) -> list[Goal]:
        goals = store.get_all(Goal, user_id)
        if filters:
            if filters.get("category"):
                goals = [g for g in goals if g.category.value == filters["category"]]
            if "is_completed" in filters and filters["is_completed"] is not None:
                goals = [g for g in goals if g.is_completed == filters["is_completed"]]
        return sorted(goals, key=lambda g: g.created_at)

    @staticmethod
    def get_by_id(store: RecordStore, user_id: str, goal_id: str) -> Goal:
        goal = store.get(Goal, goal_id, user_id=user_id)
        if goal is None:
            raise NotFoundError("Goal not found")
        return goal

    @staticmethod
    def save(store: RecordStore, user_id: str, goal: Goal) -> Goal:
        """Create or replace a goal, recomputing progress from its items."""
        if not goal.title.strip():
            raise ValidationError("Goal title is required")
        milestones = [m.model_copy(update={"goal_id": goal.id}) for m in goal.milestones]
        goal = goal.model_copy(update={"user_id": user_id, "milestones": milestones})
        tasks = store.get_all(Task, user_id)
        return store.upsert(apply_progress(goal, tasks, datetime.now(timezone.utc)))

    @staticmethod
    def set_completed(store: RecordStore, user_id: str, goal_id: str, completed: bool) -> Goal:
        goal = GoalService.get_by_id(store, user_id, goal_id)
        return GoalService.save(store, user_id, goal.model_copy(update={"is_completed": completed}))

    @staticmethod
    def toggle_milestone(store: RecordStore, user_id: str, goal_id: str, milestone_id: str) -> Mutation:
        goal = GoalService.get_by_id(store, user_id, goal_id)
        found = False
        milestones = []
        for m in goal.milestones:
            if m.id == milestone_id:
                found = True
                m = m.model_copy(update={"status": "pending" if m.status == "completed" else "completed"})
            milestones.append(m)
        if not found:
            raise NotFoundError("Milestone not found")
        store.upsert(goal.model_copy(update={"milestones": milestones}))
        return Mutation.touching(goal, goal.id)

    @staticmethod
    def convert_milestone_to_task(
        store: RecordStore, user_id: str, goal_id: str, milestone_id: str, list_id: str = None
    ) -> Mutation:
        """Replace a milestone with a task linked to the same goal.

        The task is written first, then the milestone is removed. If removing
        the milestone fails the task is deleted again, so the item is never
        counted twice.
        """
        goal = GoalService.get_by_id(store, user_id, goal_id)
        milestone: Milestone | None = next((m for m in goal.milestones if m.id == milestone_id), None)
        if milestone is None:
            raise NotFoundError("Milestone not found")
        if not list_id:
            list_id = TaskService.ensure_default_list(store, user_id).id

        task = Task(
            user_id=user_id,
            list_id=list_id,
            linked_goal_id=goal.id,
            title=milestone.description,
            due_date=milestone.due_date,
            status=milestone.status,
        )
        created = TaskService.save(store, user_id, task).record

        remaining = [m for m in goal.milestones if m.id != milestone_id]
        try:
            store.upsert(goal.model_copy(update={"milestones": remaining}))
        except Exception:
            logger.error(f"Milestone {milestone_id} removal failed, rolling back task {created.id}")
            store.delete(Task, created.id, user_id)
            raise
        return Mutation.touching(created, goal.id)

    @staticmethod
    def delete(store: RecordStore, user_id: str, goal_id: str) -> None:
        """Delete a goal, unlinking its tasks and dropping it from KPI links."""
        GoalService.get_by_id(store, user_id, goal_id)
        store.delete(Goal, goal_id, user_id)

        for task in store.get_all(Task, user_id):
            if task.linked_goal_id == goal_id:
                store.upsert(task.model_copy(update={"linked_goal_id": None}))
        for kpi in store.get_all(KPI, user_id):
            if goal_id in kpi.linked_goal_ids:
                ids = [g for g in kpi.linked_goal_ids if g != goal_id]
                store.upsert(kpi.model_copy(update={"linked_goal_ids": ids}))
