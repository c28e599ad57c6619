from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.task import (
    AssignmentPreview,
    TaskCreate,
    TaskDeleted,
    TaskFeedback,
    TaskOut,
    TaskProgressUpdate,
    TaskStatusUpdate,
    TaskUpdate,
)
from taskflow.schemas.time_log import TaskTimeLogOut
from taskflow.services.task_service import TaskService
from taskflow.services.time_tracking import TaskTimer
from taskflow.services.workload import WorkloadBalancer
from taskflow.utils.auth import admin_required, get_current_user
from taskflow.utils.clock import get_clock

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=List[TaskOut])
def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status"),
    urgency: Optional[str] = None,
    assignee: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db).list_tasks(current_user, status=status_filter, urgency=urgency, assignee=assignee)


@router.get("/my", response_model=List[TaskOut])
def my_tasks(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Open tasks assigned to the caller"""
    return TaskService(db).my_tasks(current_user)


@router.get("/assignment-preview", response_model=AssignmentPreview)
def assignment_preview(
    task_type_id: int,
    deadline: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    """Least-loaded members of the task type's role for the given deadline"""
    return WorkloadBalancer(db).suggest_assignee(task_type_id, deadline)


@router.get("/my-active-timer", response_model=Optional[TaskTimeLogOut])
def my_active_timer(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return TaskTimer(db).active_timer(current_user.id)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    task = TaskService(db).get_task(task_id)
    return task


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db, clock=clock).create_task(current_user, **payload.model_dump())


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    # Only fields present in the request body are applied
    return TaskService(db, clock=clock).update_task(current_user, task_id, payload.model_dump(exclude_unset=True))


@router.patch("/{task_id}/progress", response_model=TaskOut)
def update_progress(
    task_id: int,
    payload: TaskProgressUpdate,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db, clock=clock).update_progress(current_user, task_id, payload.progress)


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_status(
    task_id: int,
    payload: TaskStatusUpdate,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db, clock=clock).update_status(current_user, task_id, payload.status)


@router.post("/{task_id}/feedback", response_model=TaskOut)
def submit_feedback(
    task_id: int,
    payload: TaskFeedback,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return TaskService(db, clock=clock).submit_feedback(current_user, task_id, payload.notes)


@router.delete("/{task_id}", response_model=TaskDeleted)
def delete_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return TaskService(db).delete_task(current_user, task_id)


@router.post("/{task_id}/timer/start", response_model=TaskTimeLogOut, status_code=status.HTTP_201_CREATED)
def start_timer(
    task_id: int,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return TaskTimer(db, clock=clock).start_timer(current_user.id, task_id)


@router.post("/{task_id}/timer/stop", response_model=TaskTimeLogOut)
def stop_timer(
    task_id: int,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return TaskTimer(db, clock=clock).stop_timer(current_user.id, task_id)
