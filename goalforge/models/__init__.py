# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from goalforge.models.user import User
from goalforge.models.session import AuthSession
from goalforge.models.goal import Goal
from goalforge.models.task import Task, TaskList
from goalforge.models.kpi import KPI
from goalforge.models.achievement import Achievement
from goalforge.models.habit import Habit

__all__ = [
    "User",
    "AuthSession",
    "Goal",
    "Task",
    "TaskList",
    "KPI",
    "Achievement",
    "Habit",
]
