# taskflow/services/performance.py
"""
Performance scores for team members.

The score (0-100) weighs four rates over a user's completed tasks:

    on-time rate          40  completed on or before the deadline
    early rate            20  completed strictly before the deadline
    1 - revision penalty  25  penalty = min(1, avg revisions / 3)
    productivity          15  min(1, completed per distinct day / 4)

Users without completed tasks get the "No Data" grade and a zero score.
"""

from typing import Any, Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from taskflow.errors import NotFound
from taskflow.models import Task, TaskStatus, TaskTimeLog, TaskType, TimeLog, User
from taskflow.utils.clock import round_half_up

GRADES = (
    (80, "Excellent", "#16a34a"),
    (60, "Good", "#2563eb"),
    (40, "Average", "#f59e0b"),
    (0, "Needs Work", "#dc2626"),
)
NO_DATA_GRADE = ("No Data", "#94a3b8")

DETAIL_TIMER_SESSIONS = 50
DETAIL_PUNCH_RECORDS = 30


def grade_for(score: int):
    for threshold, grade, color in GRADES:
        if score >= threshold:
            return grade, color
    return GRADES[-1][1:]


def seconds_to_hours(seconds: int) -> float:
    return round_half_up((seconds or 0) / 3600, 1)


def score_completed_tasks(completed: Iterable[Task]) -> Dict[str, Any]:
    """Score a user's completed tasks; pure, no database access"""
    completed = list(completed)
    total = len(completed)
    if total == 0:
        grade, color = NO_DATA_GRADE
        return {
            "score": 0,
            "grade": grade,
            "grade_color": color,
            "on_time_count": 0,
            "early_count": 0,
            "total_completed": 0,
            "avg_revisions": 0.0,
            "avg_tasks_per_day": 0.0,
        }

    finished = [task for task in completed if task.completed_at is not None]
    on_time = sum(1 for task in finished if task.completed_at.date() <= task.deadline)
    early = sum(1 for task in finished if task.completed_at.date() < task.deadline)

    avg_revisions = sum(task.revision_count or 0 for task in completed) / total
    distinct_days = len({task.completed_at.date() for task in finished}) or 1
    avg_per_day = total / distinct_days

    revision_penalty = min(1.0, avg_revisions / 3)
    productivity = min(1.0, avg_per_day / 4)
    score = int(round_half_up(
        on_time / total * 40
        + early / total * 20
        + (1 - revision_penalty) * 25
        + productivity * 15
    ))
    grade, color = grade_for(score)

    return {
        "score": score,
        "grade": grade,
        "grade_color": color,
        "on_time_count": on_time,
        "early_count": early,
        "total_completed": total,
        "avg_revisions": round_half_up(avg_revisions, 1),
        "avg_tasks_per_day": round_half_up(avg_per_day, 1),
    }


class PerformanceScorer:
    """Read-only scoring over tasks and timer sessions"""

    def __init__(self, db: Session):
        self.db = db

    def _count(self, *criteria) -> int:
        return self.db.query(func.count(Task.id)).filter(*criteria).scalar() or 0

    def score_user(self, user: User) -> Dict[str, Any]:
        completed = (
            self.db.query(Task)
            .filter(Task.assigned_to == user.id, Task.status == TaskStatus.COMPLETED.value)
            .all()
        )
        total_secs = (
            self.db.query(func.coalesce(func.sum(TaskTimeLog.duration_secs), 0))
            .filter(TaskTimeLog.user_id == user.id)
            .scalar()
        )

        result = {"id": user.id, "name": user.name, "role_name": user.role_name}
        result.update(score_completed_tasks(completed))
        result.update({
            "active_tasks": self._count(Task.assigned_to == user.id, Task.status != TaskStatus.COMPLETED.value),
            "client_feedback_count": self._count(Task.assigned_to == user.id, Task.revision_count > 0),
            "total_time_hours": seconds_to_hours(total_secs),
        })
        return result

    def all_scores(self) -> List[Dict[str, Any]]:
        users = (
            self.db.query(User)
            .options(joinedload(User.role))
            .filter(User.is_active == True, User.is_admin == False)  # noqa: E712
            .order_by(User.name)
            .all()
        )
        return [self.score_user(user) for user in users]

    def detail(self, user_id: int) -> Dict[str, Any]:
        user = self.db.query(User).options(joinedload(User.role)).filter(User.id == int(user_id)).first()
        if not user:
            raise NotFound("User not found")

        tasks = (
            self.db.query(Task)
            .options(joinedload(Task.assignee), joinedload(Task.task_type).joinedload(TaskType.role))
            .filter(Task.assigned_to == user.id)
            .order_by(Task.deadline.desc())
            .all()
        )
        sessions = (
            self.db.query(TaskTimeLog)
            .options(joinedload(TaskTimeLog.task))
            .filter(TaskTimeLog.user_id == user.id)
            .order_by(TaskTimeLog.started_at.desc())
            .limit(DETAIL_TIMER_SESSIONS)
            .all()
        )
        punches = (
            self.db.query(TimeLog)
            .filter(TimeLog.user_id == user.id)
            .order_by(TimeLog.date.desc())
            .limit(DETAIL_PUNCH_RECORDS)
            .all()
        )

        return {
            "user": {"id": user.id, "name": user.name, "role_name": user.role_name},
            "tasks": tasks,
            "time_logs": sessions,
            "punch_logs": punches,
            # Hours over the listed sessions only
            "total_time_hours": seconds_to_hours(sum(log.duration_secs or 0 for log in sessions)),
        }
