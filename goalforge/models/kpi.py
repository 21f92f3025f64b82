from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, Float, ForeignKey
from goalforge.database import Base


class KPI(Base):
    __tablename__ = "kpis"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    kpi_type = Column(String(20), default="numeric")  # numeric/percentage/currency
    target_value = Column(Float, nullable=False)
    current_value = Column(Float, default=0.0)
    weight = Column(Float, default=1.0)
    level = Column(String(20), default="individual")  # individual/department
    parent_kpi_id = Column(String(36), nullable=True, index=True)  # may dangle after parent delete
    linked_goal_ids = Column(Text, nullable=True)  # JSON array string
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
