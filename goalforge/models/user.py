import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime
from goalforge.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    email = Column(String(320), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=True)
    avatar = Column(Text, nullable=True)  # base64 image or URL
    title = Column(String(200), nullable=True)  # job title
    role = Column(String(20), nullable=False, default="employee")  # employee/department_head
    department = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
