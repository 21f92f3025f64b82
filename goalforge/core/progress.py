"""
progress.py — Goal progress calculation.
Milestones and linked tasks count equally; a completed goal is pinned to 100.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from goalforge.schemas import Goal, Task


def percent(part: float, whole: float) -> int:
    """part/whole as a whole percentage, halves rounded up."""
    return int(math.floor(part * 100 / whole + 0.5))


@dataclass(frozen=True)
class GoalProgress:
    progress: int
    completed_at: Optional[datetime]


def linked_tasks(goal_id: str, tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.linked_goal_id == goal_id]


def count_items(goal: Goal, tasks: Iterable[Task]) -> tuple[int, int]:
    """(done, total) over the goal's milestones and the tasks linked to it."""
    linked = linked_tasks(goal.id, tasks)
    total = len(goal.milestones) + len(linked)
    done = (
        sum(1 for m in goal.milestones if m.status == "completed")
        + sum(1 for t in linked if t.status == "completed")
    )
    return done, total


def compute_goal_progress(goal: Goal, tasks: Iterable[Task], now: Optional[datetime] = None) -> GoalProgress:
    if goal.is_completed:
        return GoalProgress(100, goal.completed_at or now or datetime.now(timezone.utc))

    done, total = count_items(goal, tasks)
    if total == 0:
        # Nothing to count: keep whatever was stored last
        return GoalProgress(goal.progress, None)
    return GoalProgress(percent(done, total), None)


def apply_progress(goal: Goal, tasks: Iterable[Task], now: Optional[datetime] = None) -> Goal:
    """Return a copy of the goal with progress and completed_at recomputed."""
    result = compute_goal_progress(goal, tasks, now)
    return goal.model_copy(update={"progress": result.progress, "completed_at": result.completed_at})
