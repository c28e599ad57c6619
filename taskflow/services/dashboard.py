# taskflow/services/dashboard.py
"""
Dashboard views over task deadlines.

Admins see every task; other users only see tasks assigned to them.
"""

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from taskflow.models import Role, Task, TaskStatus, TaskType, URGENCY_RANK, User
from taskflow.utils.clock import utc_now
from taskflow.utils.working_days import month_range, week_range


class DashboardService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock

    def _today(self) -> date:
        return self.clock().date()

    def _scoped(self, actor: User, query):
        if not actor.is_admin:
            query = query.filter(Task.assigned_to == actor.id)
        return query

    def _count(self, actor: User, *criteria) -> int:
        query = self.db.query(func.count(Task.id)).filter(*criteria)
        return self._scoped(actor, query).scalar() or 0

    def _tasks(self, actor: User, *criteria):
        query = (
            self.db.query(Task)
            .options(joinedload(Task.assignee), joinedload(Task.task_type).joinedload(TaskType.role))
            .filter(*criteria)
        )
        return self._scoped(actor, query)

    @staticmethod
    def _urgency_rank():
        return case(URGENCY_RANK, value=Task.urgency, else_=1)

    def stats(self, actor: User) -> Dict[str, int]:
        today = self._today()
        week_start, week_end = week_range(today)
        open_task = Task.status != TaskStatus.COMPLETED.value
        return {
            "total_active": self._count(actor, open_task),
            "today_tasks": self._count(actor, Task.deadline == today),
            "week_tasks": self._count(actor, Task.deadline.between(week_start, week_end)),
            "overdue_tasks": self._count(actor, Task.deadline < today, open_task),
            "completed_all": self._count(actor, Task.status == TaskStatus.COMPLETED.value),
        }

    def daily(self, actor: User, day: Optional[date] = None) -> Dict[str, Any]:
        """Tasks due on one day, grouped by assignee"""
        day = day or self._today()
        tasks = (
            self._tasks(actor, Task.deadline == day)
            .outerjoin(User, Task.assigned_to == User.id)
            .order_by(self._urgency_rank().desc(), User.name, Task.id)
            .all()
        )

        groups: Dict[Any, Dict[str, Any]] = {}
        for task in tasks:
            group = groups.setdefault(task.assigned_to, {
                "assignee_id": task.assigned_to,
                "assignee_name": task.assignee_name or "Unassigned",
                "role_name": task.role_name,
                "tasks": [],
            })
            group["tasks"].append(task)
        return {"date": day, "groups": list(groups.values()), "total": len(tasks)}

    def weekly(self, actor: User, day: Optional[date] = None) -> Dict[str, Any]:
        """Tasks of the Monday-Saturday week containing `day`, grouped by deadline"""
        start, end = week_range(day or self._today())
        tasks = (
            self._tasks(actor, Task.deadline.between(start, end))
            .order_by(Task.deadline, self._urgency_rank().desc(), Task.id)
            .all()
        )

        days: Dict[date, Dict[str, Any]] = {}
        for task in tasks:
            days.setdefault(task.deadline, {"date": task.deadline, "tasks": []})["tasks"].append(task)
        return {"week_start": start, "week_end": end, "days": list(days.values()), "total": len(tasks)}

    def monthly(self, actor: User, day: Optional[date] = None) -> Dict[str, Any]:
        start, end = month_range(day or self._today())
        tasks = (
            self._tasks(actor, Task.deadline.between(start, end))
            .order_by(Task.deadline, self._urgency_rank().desc(), Task.id)
            .all()
        )
        return {"month_start": start, "month_end": end, "tasks": tasks, "total": len(tasks)}

    def team_load(self) -> List[Dict[str, Any]]:
        today = self._today()
        open_task = Task.status != TaskStatus.COMPLETED.value
        members = (
            self.db.query(User.id, User.name, Role.name)
            .outerjoin(Role, User.role_id == Role.id)
            .filter(User.is_active == True, User.is_admin == False)  # noqa: E712
            .order_by(Role.name, User.name)
            .all()
        )

        def per_user(*criteria) -> Dict[int, int]:
            rows = (
                self.db.query(Task.assigned_to, func.count(Task.id))
                .filter(Task.assigned_to.isnot(None), *criteria)
                .group_by(Task.assigned_to)
                .all()
            )
            return dict(rows)

        due_today = per_user(Task.deadline == today, open_task)
        active = per_user(open_task)
        overdue = per_user(Task.deadline < today, open_task)
        return [
            {
                "id": user_id,
                "name": name,
                "role_name": role_name,
                "today_count": due_today.get(user_id, 0),
                "active_count": active.get(user_id, 0),
                "overdue_count": overdue.get(user_id, 0),
            }
            for user_id, name, role_name in members
        ]
