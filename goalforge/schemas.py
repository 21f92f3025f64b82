"""
schemas.py — Canonical in-memory records.

Every calculator and service works on these shapes only. Storage rows are
translated at the boundary in mappers.py.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoalCategory(str, Enum):
    CAREER = "Career"
    PERSONAL = "Personal"


class AchievementType(str, Enum):
    LEADERSHIP = "Leadership"
    DELIVERY = "Delivery"
    COMMUNICATION = "Communication"
    IMPACT = "Impact"
    OTHER = "Other"


ItemStatus = Literal["pending", "completed"]
KPIType = Literal["numeric", "percentage", "currency"]
KPILevel = Literal["individual", "department"]


# ── Users ─────────────────────────────────────────────────────────
class UserBase(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    email: str
    avatar: Optional[str] = None
    title: Optional[str] = None


class Employee(UserBase):
    role: Literal["employee"] = "employee"
    department: Optional[str] = None


class DepartmentHead(UserBase):
    """A user allowed to manage the KPI hierarchy of their department."""

    role: Literal["department_head"] = "department_head"
    department: str


User = Annotated[Union[Employee, DepartmentHead], Field(discriminator="role")]
user_adapter = TypeAdapter(User)


# ── Goals ─────────────────────────────────────────────────────────
class Milestone(BaseModel):
    id: str = Field(default_factory=new_id)
    goal_id: str
    description: str
    status: ItemStatus = "pending"
    due_date: Optional[date] = None


class Goal(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    category: GoalCategory = GoalCategory.CAREER
    description: str = ""
    timeframe: str = ""
    progress: int = Field(0, ge=0, le=100)
    created_at: datetime = Field(default_factory=utcnow)
    milestones: list[Milestone] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_completed: bool = False
    completed_at: Optional[datetime] = None


# ── Tasks ─────────────────────────────────────────────────────────
class TaskList(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    is_default: bool = False


class Task(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    list_id: str
    linked_goal_id: Optional[str] = None
    title: str
    details: Optional[str] = None
    due_date: Optional[date] = None
    status: ItemStatus = "pending"
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


# ── KPIs ──────────────────────────────────────────────────────────
class KPI(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    name: str
    description: Optional[str] = None
    kpi_type: KPIType = "numeric"
    target_value: float
    current_value: float = 0.0
    weight: float = Field(1.0, gt=0)
    level: KPILevel = "individual"
    parent_kpi_id: Optional[str] = None
    linked_goal_ids: list[str] = Field(default_factory=list)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


# ── Achievements & habits ─────────────────────────────────────────
class Achievement(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    description: str = ""
    classification: AchievementType = AchievementType.OTHER
    summary: str = ""
    project: str = ""
    date: date
    evidence_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Habit(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    name: str
    streak_count: int = 0
    last_logged_date: Optional[date] = None
    history: list[date] = Field(default_factory=list)


# ── AI payloads ───────────────────────────────────────────────────
class MilestoneDraft(BaseModel):
    description: str
    status: ItemStatus = "pending"
    due_date: Optional[date] = None


class AchievementClassification(BaseModel):
    classification: AchievementType
    summary: str


class ReportConfig(BaseModel):
    report_type: Literal["Weekly", "Monthly", "Quarterly"] = "Monthly"
    tone: Literal["Manager-ready", "Casual", "Concise"] = "Manager-ready"
    goal_ids: list[str] = Field(default_factory=list)
    start_date: date
    end_date: date
