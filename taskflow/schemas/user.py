from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role_id: Optional[int] = None
    is_admin: bool = False


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserBasic(BaseModel):
    id: int
    name: str
    email: str
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    is_admin: bool

    model_config = {
        "from_attributes": True
    }


class UserOut(UserBasic):
    is_active: bool
    created_at: datetime


class UserWithLoad(UserOut):
    active_tasks: int = 0
    completed_tasks: int = 0


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role_id: Optional[int] = None
    is_admin: Optional[bool] = None

    model_config = {
        "from_attributes": True
    }
