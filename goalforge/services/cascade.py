"""
cascade.py — Goal progress cascade.

Mutations elsewhere (tasks, task lists, milestones) return a Mutation naming
the goals they touched. The coordinator then re-reads those goals and their
linked tasks from the store, recomputes progress and persists the result.
The triggering write must already be persisted, otherwise the recomputed
progress lags one change behind.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from goalforge.core.progress import apply_progress
from goalforge.record_store import RecordStore
from goalforge.schemas import Goal, Task

logger = logging.getLogger(__name__)


@dataclass
class Mutation:
    record: object = None
    affected_goal_ids: set[str] = field(default_factory=set)

    @classmethod
    def touching(cls, record, *goal_ids: Optional[str]) -> "Mutation":
        return cls(record=record, affected_goal_ids={g for g in goal_ids if g})


class CascadeCoordinator:
    def __init__(self, store: RecordStore):
        self.store = store

    def recompute_goal(self, user_id: str, goal_id: str, now: Optional[datetime] = None) -> Goal | None:
        goal = self.store.get(Goal, goal_id, user_id=user_id)
        if goal is None:
            # Deleted in the meantime; nothing to keep consistent
            logger.info(f"Skipping recompute of missing goal {goal_id}")
            return None
        tasks = self.store.get_all(Task, user_id)
        updated = apply_progress(goal, tasks, now or datetime.now(timezone.utc))
        return self.store.upsert(updated)

    def recompute_goals(self, user_id: str, goal_ids: Iterable[str], now: Optional[datetime] = None) -> list[Goal]:
        results = []
        for goal_id in sorted(set(goal_ids)):
            goal = self.recompute_goal(user_id, goal_id, now)
            if goal is not None:
                results.append(goal)
        return results

    def apply(self, user_id: str, mutation: Mutation):
        """Run the recompute phase for a mutation and hand back its record."""
        if mutation.affected_goal_ids:
            self.recompute_goals(user_id, mutation.affected_goal_ids)
        return mutation.record
