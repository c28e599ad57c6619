from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.role import TaskTypeCreate, TaskTypeOut, TaskTypeUpdate
from taskflow.services.directory import TaskTypeDirectory
from taskflow.utils.auth import admin_required, get_current_user

router = APIRouter(prefix="/task-types", tags=["Task Types"])


@router.get("", response_model=List[TaskTypeOut])
def list_task_types(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return TaskTypeDirectory(db).list_task_types()


@router.post("", response_model=TaskTypeOut, status_code=status.HTTP_201_CREATED)
def create_task_type(payload: TaskTypeCreate, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    return TaskTypeDirectory(db).create_task_type(payload.name, payload.role_id, payload.daily_capacity)


@router.put("/{task_type_id}", response_model=TaskTypeOut)
def update_task_type(
    task_type_id: int,
    payload: TaskTypeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return TaskTypeDirectory(db).update_task_type(task_type_id, payload.model_dump(exclude_unset=True))


@router.delete("/{task_type_id}")
def delete_task_type(task_type_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    TaskTypeDirectory(db).delete_task_type(task_type_id)
    return {"message": "Task type deleted"}
