from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.user import UserCreate, UserOut, UserUpdate, UserWithLoad
from taskflow.services.directory import UserDirectory
from taskflow.utils.auth import admin_required, get_current_user

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserWithLoad])
def list_team(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Active team members (non-admin) with their task counts"""
    return UserDirectory(db).list_team()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    return UserDirectory(db).create_user(**payload.model_dump())


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return UserDirectory(db).update_user(user_id, payload.model_dump(exclude_unset=True))


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    """Soft delete: deactivates the user and unassigns their open tasks"""
    return UserDirectory(db).deactivate_user(current_user, user_id)
