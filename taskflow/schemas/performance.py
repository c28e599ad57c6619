from pydantic import BaseModel
from typing import Optional, List

from taskflow.schemas.task import TaskOut
from taskflow.schemas.time_log import TimeLogOut, TaskTimeLogOut


class PerformanceScore(BaseModel):
    id: int
    name: str
    role_name: Optional[str] = None
    score: int
    grade: str
    grade_color: str
    on_time_count: int
    early_count: int
    total_completed: int
    active_tasks: int
    avg_revisions: float
    avg_tasks_per_day: float
    client_feedback_count: int
    total_time_hours: float


class PerformanceUser(BaseModel):
    id: int
    name: str
    role_name: Optional[str] = None


class PerformanceDetail(BaseModel):
    user: PerformanceUser
    tasks: List[TaskOut] = []
    time_logs: List[TaskTimeLogOut] = []
    punch_logs: List[TimeLogOut] = []
    total_time_hours: float
