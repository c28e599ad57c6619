from pydantic import BaseModel
from datetime import date as Date
from typing import Optional, List

from taskflow.schemas.task import TaskOut


class DashboardStats(BaseModel):
    total_active: int
    today_tasks: int
    week_tasks: int
    overdue_tasks: int
    completed_all: int


class AssigneeGroup(BaseModel):
    assignee_id: Optional[int] = None
    assignee_name: str
    role_name: Optional[str] = None
    tasks: List[TaskOut] = []


class DailyView(BaseModel):
    date: Date
    groups: List[AssigneeGroup] = []
    total: int


class DayGroup(BaseModel):
    date: Date
    tasks: List[TaskOut] = []


class WeeklyView(BaseModel):
    week_start: Date
    week_end: Date
    days: List[DayGroup] = []
    total: int


class MonthlyView(BaseModel):
    month_start: Date
    month_end: Date
    tasks: List[TaskOut] = []
    total: int


class TeamLoadRow(BaseModel):
    id: int
    name: str
    role_name: Optional[str] = None
    today_count: int
    active_count: int
    overdue_count: int
