# taskflow/models/task.py
from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
import enum

from taskflow.database import Base
from taskflow.utils.clock import utc_now


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    CLIENT_FEEDBACK = "client_feedback"
    COMPLETED = "completed"
    # Only reachable through the feedback action
    REVISION = "revision"


# Values accepted by the dedicated status-update path
CANONICAL_STATUSES = (
    TaskStatus.PENDING,
    TaskStatus.IN_PROGRESS,
    TaskStatus.ON_HOLD,
    TaskStatus.CLIENT_FEEDBACK,
    TaskStatus.COMPLETED,
)


class TaskUrgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


URGENCY_RANK = {
    TaskUrgency.CRITICAL.value: 4,
    TaskUrgency.HIGH.value: 3,
    TaskUrgency.MEDIUM.value: 2,
    TaskUrgency.LOW.value: 1,
}


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False, index=True)
    description = Column(Text, nullable=True)
    client_name = Column(String(255), nullable=True)

    task_type_id = Column(Integer, ForeignKey("task_types.id"), nullable=False)
    urgency = Column(String(20), default=TaskUrgency.MEDIUM.value, nullable=False)

    # Dates (date only, no time component)
    deadline = Column(Date, nullable=False, index=True)
    buffer_deadline = Column(Date, nullable=False)
    eta = Column(Date, nullable=True)

    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Lifecycle
    status = Column(String(20), default=TaskStatus.PENDING.value, nullable=False, index=True)
    progress = Column(Integer, default=0, nullable=False)
    revision_count = Column(Integer, default=0, nullable=False)
    feedback_notes = Column(Text, nullable=True)

    # System dates
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    task_type = relationship("TaskType", back_populates="tasks")
    assignee = relationship("User", foreign_keys=[assigned_to], back_populates="assigned_tasks")
    creator = relationship("User", foreign_keys=[created_by], back_populates="created_tasks")
    time_logs = relationship("TaskTimeLog", back_populates="task", cascade="all, delete-orphan")

    @property
    def assignee_name(self):
        return self.assignee.name if self.assignee else None

    @property
    def task_type_name(self):
        return self.task_type.name if self.task_type else None

    @property
    def role_name(self):
        return self.task_type.role_name if self.task_type else None
