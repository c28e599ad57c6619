from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class RoleCreate(BaseModel):
    name: str


class RoleOut(BaseModel):
    id: int
    name: str
    created_at: datetime
    member_count: int = 0
    task_type_count: int = 0

    model_config = {
        "from_attributes": True
    }


class TaskTypeCreate(BaseModel):
    name: str
    role_id: int
    daily_capacity: int = 2


class TaskTypeUpdate(BaseModel):
    name: Optional[str] = None
    role_id: Optional[int] = None
    daily_capacity: Optional[int] = None


class TaskTypeOut(BaseModel):
    id: int
    name: str
    role_id: int
    role_name: Optional[str] = None
    daily_capacity: int
    is_predefined: bool
    created_at: datetime
    task_count: int = 0

    model_config = {
        "from_attributes": True
    }
