from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey
from goalforge.database import Base


class Goal(Base):
    __tablename__ = "goals"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    category = Column(String(20), nullable=False)  # Career/Personal
    description = Column(Text, nullable=True)
    timeframe = Column(String(200), nullable=True)  # free text, e.g. "Q4 2025"
    progress = Column(Integer, default=0)  # 0-100
    milestones = Column(Text, nullable=True)  # JSON array of milestone objects
    tags = Column(Text, nullable=True)  # JSON array string
    is_completed = Column(Boolean, default=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
