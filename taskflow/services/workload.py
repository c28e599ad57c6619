# taskflow/services/workload.py
"""
Assignee suggestion for new tasks.

A greedy least-loaded heuristic: candidates are the active, non-admin
members of the task type's role, ranked by how many unfinished tasks they
already have due on the same deadline. Ties keep user-id order. The task
type's daily_capacity is reported but not enforced.
"""

from datetime import date
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from taskflow.errors import InvalidArgument, NotFound
from taskflow.models import Task, TaskStatus, TaskType, User

MAX_CANDIDATES = 5


class WorkloadBalancer:
    def __init__(self, db: Session):
        self.db = db

    def same_day_load(self, user_ids: List[int], deadline: date) -> Dict[int, int]:
        if not user_ids:
            return {}
        rows = (
            self.db.query(Task.assigned_to, func.count(Task.id))
            .filter(
                Task.assigned_to.in_(user_ids),
                Task.deadline == deadline,
                Task.status != TaskStatus.COMPLETED.value,
            )
            .group_by(Task.assigned_to)
            .all()
        )
        return {int(user_id): count for user_id, count in rows}

    def suggest_assignee(self, task_type_id: int, deadline: date) -> Dict[str, Any]:
        if not isinstance(deadline, date):
            raise InvalidArgument("deadline must be a date")

        task_type = self.db.query(TaskType).filter(TaskType.id == task_type_id).first()
        if not task_type:
            raise NotFound("Task type not found")

        members = (
            self.db.query(User)
            .filter(
                User.role_id == task_type.role_id,
                User.is_active == True,  # noqa: E712
                User.is_admin == False,  # noqa: E712
            )
            .order_by(User.id)
            .all()
        )
        load = self.same_day_load([member.id for member in members], deadline)

        # sorted() is stable, so equal loads keep user-id order
        ranked = sorted(members, key=lambda member: load.get(member.id, 0))
        candidates = [
            {"id": member.id, "name": member.name, "today_count": load.get(member.id, 0)}
            for member in ranked[:MAX_CANDIDATES]
        ]
        return {"task_type": task_type, "candidates": candidates}
