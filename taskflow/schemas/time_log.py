from pydantic import BaseModel
from datetime import date as Date, datetime
from typing import Optional, List


class TimeLogOut(BaseModel):
    id: Optional[int] = None
    user_id: int
    date: Date
    punch_in: Optional[datetime] = None
    punch_out: Optional[datetime] = None
    duration_minutes: int = 0

    model_config = {
        "from_attributes": True
    }


class PunchSummaryRow(TimeLogOut):
    user_name: str
    role_name: Optional[str] = None


class MonthlyUserPunches(BaseModel):
    user_id: int
    user_name: str
    role_name: Optional[str] = None
    records: List[TimeLogOut] = []
    total_minutes: int = 0


class MonthlyPunchReport(BaseModel):
    month: str
    month_start: Date
    month_end: Date
    users: List[MonthlyUserPunches] = []
    total_records: int


class TaskTimeLogOut(BaseModel):
    id: int
    task_id: int
    user_id: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_secs: int = 0
    task_title: Optional[str] = None

    model_config = {
        "from_attributes": True
    }
