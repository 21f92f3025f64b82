from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey
from goalforge.database import Base


class Habit(Base):
    __tablename__ = "habits"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    streak_count = Column(Integer, default=0)
    last_logged_date = Column(Date, nullable=True)
    history = Column(Text, nullable=True)  # JSON array of "YYYY-MM-DD" strings
