from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Date, DateTime, Boolean, ForeignKey
from goalforge.database import Base


class TaskList(Base):
    __tablename__ = "task_lists"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    is_default = Column(Boolean, default=False)  # default lists cannot be deleted


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    list_id = Column(String(36), ForeignKey("task_lists.id"), nullable=False)
    linked_goal_id = Column(String(36), nullable=True, index=True)  # no FK: unlinked on goal delete
    title = Column(String(500), nullable=False)
    details = Column(Text, nullable=True)
    due_date = Column(Date, nullable=True)
    status = Column(String(20), default="pending")  # pending/completed
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
