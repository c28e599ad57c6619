# taskflow/services/task_service.py
"""
Task lifecycle: creation, partial updates, progress and status changes,
client feedback and deletion.

Every mutation runs in one transaction, re-checks authorization itself and
keeps the derived fields consistent:

- buffer_deadline follows deadline and urgency
- completed_at is written once, the first time a task is completed
- progress drives status on the progress path only
- leaving active work (completed, client_feedback) stops the actor's timer
"""

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import case
from sqlalchemy.orm import Session, joinedload

from taskflow.config.settings import settings
from taskflow.database import transaction
from taskflow.errors import InvalidArgument, NotFound, PermissionDenied
from taskflow.models import (
    ActiveTimer,
    CANONICAL_STATUSES,
    Task,
    TaskStatus,
    TaskType,
    TaskUrgency,
    URGENCY_RANK,
    User,
)
from taskflow.services.time_tracking import TaskTimer
from taskflow.services.transitions import ACTIVE_WORK_EXITS, TransitionPolicy
from taskflow.utils.clock import utc_now
from taskflow.utils.working_days import buffer_deadline_for

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "title",
    "description",
    "client_name",
    "urgency",
    "deadline",
    "assigned_to",
    "status",
    "eta",
    "feedback_notes",
})
NULLABLE_FIELDS = frozenset({"description", "client_name", "assigned_to", "eta", "feedback_notes"})


def parse_urgency(value) -> TaskUrgency:
    try:
        return TaskUrgency(value)
    except ValueError:
        raise InvalidArgument(f"Unknown urgency: {value!r}")


def status_for_progress(progress: int) -> TaskStatus:
    if progress == 100:
        return TaskStatus.COMPLETED
    if progress > 0:
        return TaskStatus.IN_PROGRESS
    return TaskStatus.PENDING


def _require_date(value, field: str) -> date:
    if isinstance(value, datetime) or not isinstance(value, date):
        raise InvalidArgument(f"{field} must be a date")
    return value


class TaskService:
    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utc_now,
        policy: Optional[TransitionPolicy] = None,
        timer: Optional[TaskTimer] = None,
    ):
        self.db = db
        self.clock = clock
        self.policy = policy or TransitionPolicy(strict=settings.STRICT_STATUS_TRANSITIONS)
        self.timer = timer or TaskTimer(db, clock)

    # ── Reads ────────────────────────────────────────────────────────────────

    def _hydrated(self):
        return self.db.query(Task).options(
            joinedload(Task.assignee),
            joinedload(Task.task_type).joinedload(TaskType.role),
        )

    def get_task(self, task_id: int) -> Task:
        task = self._hydrated().filter(Task.id == int(task_id)).first()
        if not task:
            raise NotFound("Task not found")
        return task

    def _ordered(self, query):
        urgency_rank = case(URGENCY_RANK, value=Task.urgency, else_=1)
        return query.order_by(urgency_rank.desc(), Task.deadline.asc(), Task.id.asc())

    def list_tasks(
        self,
        actor: User,
        status: Optional[str] = None,
        urgency: Optional[str] = None,
        assignee: Optional[int] = None,
    ) -> List[Task]:
        """All tasks for admins, only the caller's own tasks for everyone else"""
        query = self._hydrated()
        if status:
            query = query.filter(Task.status == status)
        if urgency:
            query = query.filter(Task.urgency == urgency)
        if assignee:
            query = query.filter(Task.assigned_to == int(assignee))
        if not actor.is_admin:
            query = query.filter(Task.assigned_to == int(actor.id))
        return self._ordered(query).all()

    def my_tasks(self, actor: User) -> List[Task]:
        query = self._hydrated().filter(
            Task.assigned_to == int(actor.id),
            Task.status != TaskStatus.COMPLETED.value,
        )
        return self._ordered(query).all()

    # ── Authorization ────────────────────────────────────────────────────────

    @staticmethod
    def _require_admin(actor: User, action: str):
        if not actor.is_admin:
            logger.warning("User %s refused: %s requires admin", actor.id, action)
            raise PermissionDenied("Admin access required")

    @staticmethod
    def _require_admin_or_assignee(actor: User, task: Task):
        if actor.is_admin:
            return
        if task.assigned_to is None or int(task.assigned_to) != int(actor.id):
            logger.warning("User %s refused: task %s is assigned to %s", actor.id, task.id, task.assigned_to)
            raise PermissionDenied("Not authorised to update this task")

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _locked(self, task_id: int) -> Task:
        task = self.db.query(Task).filter(Task.id == int(task_id)).with_for_update().first()
        if not task:
            raise NotFound("Task not found")
        return task

    def _active_assignee(self, user_id) -> int:
        user_id = int(user_id)
        exists = self.db.query(User.id).filter(User.id == user_id, User.is_active == True).first()  # noqa: E712
        if not exists:
            raise NotFound("Assigned user not found or inactive")
        return user_id

    def _stamp_completed(self, task_id: int, now: datetime):
        # First write wins: never overwrite an existing completion time
        self.db.query(Task).filter(
            Task.id == task_id,
            Task.completed_at.is_(None),
        ).update({Task.completed_at: now}, synchronize_session=False)

    def _after_status_change(self, actor: User, task: Task, prior_status: str, now: datetime):
        new_status = TaskStatus(task.status)
        if new_status.value == prior_status:
            return
        if new_status in ACTIVE_WORK_EXITS:
            self.timer.stop_running_on_task(actor.id, task.id, now)
        if new_status == TaskStatus.COMPLETED:
            self._stamp_completed(task.id, now)

    # ── Mutations ────────────────────────────────────────────────────────────

    def create_task(
        self,
        actor: User,
        title: str,
        task_type_id: int,
        deadline: date,
        urgency=TaskUrgency.MEDIUM,
        client_name: Optional[str] = None,
        description: Optional[str] = None,
        assigned_to: Optional[int] = None,
        eta: Optional[date] = None,
    ) -> Task:
        self._require_admin(actor, "create task")
        if not title or not title.strip() or task_type_id is None or deadline is None:
            raise InvalidArgument("title, task_type_id, and deadline are required")
        deadline = _require_date(deadline, "deadline")
        urgency = parse_urgency(urgency or TaskUrgency.MEDIUM)
        if eta is not None:
            eta = _require_date(eta, "eta")

        with transaction(self.db):
            task_type = self.db.query(TaskType).filter(TaskType.id == int(task_type_id)).first()
            if not task_type:
                raise NotFound("Task type not found")
            if assigned_to is not None:
                assigned_to = self._active_assignee(assigned_to)

            now = self.clock()
            task = Task(
                title=title.strip(),
                description=description,
                client_name=client_name,
                task_type_id=task_type.id,
                urgency=urgency.value,
                deadline=deadline,
                buffer_deadline=buffer_deadline_for(deadline, urgency),
                assigned_to=assigned_to,
                status=TaskStatus.PENDING.value,
                progress=0,
                revision_count=0,
                eta=eta,
                created_by=int(actor.id),
                created_at=now,
                updated_at=now,
            )
            self.db.add(task)
            self.db.flush()

        logger.info("Task %s '%s' created by %s (assignee %s)", task.id, task.title, actor.id, task.assigned_to)
        return self.get_task(task.id)

    def update_task(self, actor: User, task_id: int, changes: Dict[str, Any]) -> Task:
        self._require_admin(actor, "update task")
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidArgument(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with transaction(self.db):
            task = self._locked(task_id)
            now = self.clock()
            prior_status = task.status

            for field, value in changes.items():
                if value is None:
                    # Explicit null clears nullable columns; required columns keep their value
                    if field in NULLABLE_FIELDS:
                        setattr(task, field, None)
                    continue
                if field == "title":
                    if not value.strip():
                        raise InvalidArgument("title cannot be blank")
                    value = value.strip()
                elif field == "urgency":
                    value = parse_urgency(value).value
                elif field == "deadline":
                    value = _require_date(value, "deadline")
                elif field == "eta":
                    value = _require_date(value, "eta")
                elif field == "assigned_to":
                    value = self._active_assignee(value)
                elif field == "status":
                    value = self.policy.check(task.status, value, actor_is_admin=actor.is_admin).value
                setattr(task, field, value)

            if "deadline" in changes or "urgency" in changes:
                task.buffer_deadline = buffer_deadline_for(task.deadline, task.urgency)
            task.updated_at = now
            self._after_status_change(actor, task, prior_status, now)

        logger.info("Task %s updated by %s: %s", task_id, actor.id, ", ".join(sorted(changes)))
        return self.get_task(task_id)

    def update_progress(self, actor: User, task_id: int, progress) -> Task:
        if isinstance(progress, bool):
            raise InvalidArgument("progress must be an integer")
        try:
            progress = int(progress)
        except (TypeError, ValueError):
            raise InvalidArgument("progress must be an integer")

        with transaction(self.db):
            task = self._locked(task_id)
            self._require_admin_or_assignee(actor, task)

            now = self.clock()
            prior_status = task.status
            progress = min(100, max(0, progress))
            task.progress = progress
            task.status = status_for_progress(progress).value
            task.updated_at = now
            self._after_status_change(actor, task, prior_status, now)
            if progress == 100:
                self._stamp_completed(task.id, now)

        logger.info("Task %s progress set to %s by %s", task_id, progress, actor.id)
        return self.get_task(task_id)

    def update_status(self, actor: User, task_id: int, status) -> Task:
        allowed = [s.value for s in CANONICAL_STATUSES]
        if status not in allowed:
            raise InvalidArgument(f"status must be one of: {', '.join(allowed)}")

        with transaction(self.db):
            task = self._locked(task_id)
            self._require_admin_or_assignee(actor, task)

            now = self.clock()
            prior_status = task.status
            task.status = self.policy.check(prior_status, status, actor_is_admin=actor.is_admin).value
            task.updated_at = now
            self._after_status_change(actor, task, prior_status, now)

        logger.info("Task %s status %s -> %s by %s", task_id, prior_status, status, actor.id)
        return self.get_task(task_id)

    def submit_feedback(self, actor: User, task_id: int, notes: Optional[str] = None) -> Task:
        with transaction(self.db):
            task = self._locked(task_id)
            task.revision_count = Task.revision_count + 1
            task.feedback_notes = notes or None
            task.status = TaskStatus.REVISION.value
            task.updated_at = self.clock()

        logger.info("Feedback recorded on task %s by %s", task_id, actor.id)
        return self.get_task(task_id)

    def delete_task(self, actor: User, task_id: int) -> Dict[str, Any]:
        self._require_admin(actor, "delete task")
        with transaction(self.db):
            task = self._locked(task_id)
            self.db.query(ActiveTimer).filter(ActiveTimer.task_id == task.id).delete()
            # time_logs cascade: sessions are deleted before the task row
            self.db.delete(task)

        logger.info("Task %s deleted by %s", task_id, actor.id)
        return {"success": True, "id": int(task_id)}
