"""
mappers.py — Translation between canonical records and storage rows.

One dump/load pair per entity. Rows are plain dicts keyed by column name;
embedded lists are stored as JSON text. Nothing outside this module and
record_store.py knows about the row shape.
"""

import json
from dataclasses import dataclass
from datetime import date
from typing import Callable

from goalforge import models, schemas


def _json_list(raw) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return value if isinstance(value, list) else []


# ── Users ─────────────────────────────────────────────────────────
def dump_user(user) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
        "title": user.title,
        "role": user.role,
        "department": user.department,
    }


def load_user(row: dict):
    data = {k: row.get(k) for k in ("id", "name", "email", "avatar", "title", "department")}
    data["role"] = row.get("role") or "employee"
    return schemas.user_adapter.validate_python(data)


# ── Goals ─────────────────────────────────────────────────────────
def dump_goal(goal: schemas.Goal) -> dict:
    return {
        "id": goal.id,
        "user_id": goal.user_id,
        "title": goal.title,
        "category": goal.category.value,
        "description": goal.description,
        "timeframe": goal.timeframe,
        "progress": goal.progress,
        "milestones": json.dumps([m.model_dump(mode="json") for m in goal.milestones]),
        "tags": json.dumps(goal.tags),
        "is_completed": goal.is_completed,
        "completed_at": goal.completed_at,
        "created_at": goal.created_at,
    }


def load_goal(row: dict) -> schemas.Goal:
    milestones = []
    for raw in _json_list(row.get("milestones")):
        raw.setdefault("goal_id", row["id"])
        milestones.append(schemas.Milestone.model_validate(raw))
    return schemas.Goal(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        category=row.get("category") or schemas.GoalCategory.CAREER,
        description=row.get("description") or "",
        timeframe=row.get("timeframe") or "",
        progress=row.get("progress") or 0,
        milestones=milestones,
        tags=_json_list(row.get("tags")),
        is_completed=bool(row.get("is_completed")),
        completed_at=row.get("completed_at"),
        created_at=row.get("created_at") or schemas.utcnow(),
    )


# ── Tasks ─────────────────────────────────────────────────────────
def dump_task_list(task_list: schemas.TaskList) -> dict:
    return task_list.model_dump()


def load_task_list(row: dict) -> schemas.TaskList:
    return schemas.TaskList(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        is_default=bool(row.get("is_default")),
    )


def dump_task(task: schemas.Task) -> dict:
    return task.model_dump()


def load_task(row: dict) -> schemas.Task:
    return schemas.Task.model_validate(
        {**row, "status": row.get("status") or "pending", "created_at": row.get("created_at") or schemas.utcnow()}
    )


# ── KPIs ──────────────────────────────────────────────────────────
def dump_kpi(kpi: schemas.KPI) -> dict:
    row = kpi.model_dump()
    row["linked_goal_ids"] = json.dumps(kpi.linked_goal_ids)
    return row


def load_kpi(row: dict) -> schemas.KPI:
    return schemas.KPI.model_validate({
        **row,
        "kpi_type": row.get("kpi_type") or "numeric",
        "current_value": row.get("current_value") or 0.0,
        "weight": row.get("weight") or 1.0,
        "level": row.get("level") or "individual",
        "linked_goal_ids": _json_list(row.get("linked_goal_ids")),
        "created_at": row.get("created_at") or schemas.utcnow(),
    })


# ── Achievements & habits ─────────────────────────────────────────
def dump_achievement(achievement: schemas.Achievement) -> dict:
    row = achievement.model_dump()
    row["classification"] = achievement.classification.value
    return row


def load_achievement(row: dict) -> schemas.Achievement:
    return schemas.Achievement.model_validate({
        **row,
        "description": row.get("description") or "",
        "classification": row.get("classification") or schemas.AchievementType.OTHER,
        "summary": row.get("summary") or "",
        "project": row.get("project") or "",
        "created_at": row.get("created_at") or schemas.utcnow(),
    })


def dump_habit(habit: schemas.Habit) -> dict:
    row = habit.model_dump()
    row["history"] = json.dumps(sorted(d.isoformat() for d in set(habit.history)))
    return row


def load_habit(row: dict) -> schemas.Habit:
    history = sorted({date.fromisoformat(d) for d in _json_list(row.get("history"))})
    return schemas.Habit(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        streak_count=row.get("streak_count") or 0,
        last_logged_date=row.get("last_logged_date"),
        history=history,
    )


@dataclass(frozen=True)
class EntityMapping:
    model: type
    dump: Callable
    load: Callable


MAPPINGS: dict[type, EntityMapping] = {
    schemas.Goal: EntityMapping(models.Goal, dump_goal, load_goal),
    schemas.TaskList: EntityMapping(models.TaskList, dump_task_list, load_task_list),
    schemas.Task: EntityMapping(models.Task, dump_task, load_task),
    schemas.KPI: EntityMapping(models.KPI, dump_kpi, load_kpi),
    schemas.Achievement: EntityMapping(models.Achievement, dump_achievement, load_achievement),
    schemas.Habit: EntityMapping(models.Habit, dump_habit, load_habit),
    schemas.Employee: EntityMapping(models.User, dump_user, load_user),
    schemas.DepartmentHead: EntityMapping(models.User, dump_user, load_user),
}


def mapping_for(kind: type) -> EntityMapping:
    try:
        return MAPPINGS[kind]
    except KeyError:
        raise TypeError(f"No storage mapping for {kind.__name__}") from None
