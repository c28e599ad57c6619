# taskflow/models/task_type.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from taskflow.database import Base
from taskflow.utils.clock import utc_now


class TaskType(Base):
    __tablename__ = "task_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    daily_capacity = Column(Integer, default=2, nullable=False)  # informational load threshold
    is_predefined = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    role = relationship("Role", back_populates="task_types")
    tasks = relationship("Task", back_populates="task_type")

    @property
    def role_name(self):
        return self.role.name if self.role else None
