# taskflow/models/role.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from taskflow.database import Base
from taskflow.utils.clock import utc_now


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    users = relationship("User", back_populates="role")
    task_types = relationship("TaskType", back_populates="role")
