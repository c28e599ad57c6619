# taskflow/schemas/task.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List

from taskflow.models.task import TaskStatus, TaskUrgency


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    task_type_id: int
    deadline: date
    urgency: TaskUrgency = TaskUrgency.MEDIUM
    client_name: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    eta: Optional[date] = None


class TaskUpdate(BaseModel):
    """Partial update: omitted fields keep their value, explicit nulls clear"""
    title: Optional[str] = None
    description: Optional[str] = None
    client_name: Optional[str] = None
    urgency: Optional[TaskUrgency] = None
    deadline: Optional[date] = None
    assigned_to: Optional[int] = None
    status: Optional[TaskStatus] = None
    eta: Optional[date] = None
    feedback_notes: Optional[str] = None


class TaskProgressUpdate(BaseModel):
    progress: int


class TaskStatusUpdate(BaseModel):
    # Validated against the canonical statuses by the service
    status: str


class TaskFeedback(BaseModel):
    notes: Optional[str] = None


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    task_type_id: int
    urgency: TaskUrgency
    deadline: date
    buffer_deadline: date
    assigned_to: Optional[int] = None
    status: TaskStatus
    progress: int
    revision_count: int
    feedback_notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    eta: Optional[date] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    # Joined names
    assignee_name: Optional[str] = None
    task_type_name: Optional[str] = None
    role_name: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class TaskTypeBasic(BaseModel):
    id: int
    name: str
    role_id: int
    role_name: Optional[str] = None
    daily_capacity: int
    is_predefined: bool

    model_config = {
        "from_attributes": True
    }


class AssigneeCandidate(BaseModel):
    id: int
    name: str
    today_count: int


class AssignmentPreview(BaseModel):
    task_type: TaskTypeBasic
    candidates: List[AssigneeCandidate] = []


class TaskDeleted(BaseModel):
    success: bool
    id: int
