from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey
from goalforge.database import Base


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    classification = Column(String(20), default="Other")  # Leadership/Delivery/Communication/Impact/Other
    summary = Column(Text, nullable=True)
    project = Column(String(200), nullable=True)
    date = Column(Date, nullable=False)
    evidence_url = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
