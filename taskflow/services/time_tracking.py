# taskflow/services/time_tracking.py
"""
Time accounting: the daily punch clock and per-task timers.

Both clocks allow one open session per user. Punch records are unique per
(user, date). Timer sessions are guarded by an ActiveTimer lease whose
user_id is unique, so two racing starts for one user cannot both commit.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskflow.database import transaction
from taskflow.errors import (
    AlreadyPunchedIn,
    AlreadyPunchedOut,
    Conflict,
    InvalidArgument,
    NoActiveTimer,
    NotFound,
    NotPunchedIn,
)
from taskflow.models import ActiveTimer, Role, Task, TaskStatus, TaskTimeLog, TimeLog, User
from taskflow.utils.clock import round_half_up, utc_now
from taskflow.utils.working_days import month_range

logger = logging.getLogger(__name__)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds()))


def elapsed_minutes(start: datetime, end: datetime) -> int:
    return int(round_half_up(elapsed_seconds(start, end) / 60))


class TaskTimer:
    """Per-task timers; a user has at most one running timer across all tasks"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock

    def _open_sessions_query(self, user_id: int):
        return self.db.query(TaskTimeLog).filter(
            TaskTimeLog.user_id == user_id,
            TaskTimeLog.ended_at.is_(None),
        )

    def _close(self, log: TaskTimeLog, now: datetime):
        log.ended_at = now
        log.duration_secs = elapsed_seconds(log.started_at, now)

    def close_open_sessions(self, user_id: int, now: datetime) -> List[TaskTimeLog]:
        """Close every running session of the user inside the caller's transaction"""
        self.db.query(ActiveTimer).filter(ActiveTimer.user_id == user_id).delete()
        sessions = self._open_sessions_query(user_id).with_for_update().all()
        for log in sessions:
            self._close(log, now)
        self.db.flush()
        return sessions

    def stop_running_on_task(self, user_id: int, task_id: int, now: datetime) -> Optional[TaskTimeLog]:
        """Close the user's running session on this task, if any, inside the caller's transaction"""
        log = (
            self._open_sessions_query(int(user_id))
            .filter(TaskTimeLog.task_id == int(task_id))
            .order_by(TaskTimeLog.started_at.desc())
            .with_for_update()
            .first()
        )
        if not log:
            return None
        self._close(log, now)
        self.db.query(ActiveTimer).filter(ActiveTimer.task_time_log_id == log.id).delete()
        self.db.flush()
        logger.info("Stopped timer %s for user %s on task %s (%ss)", log.id, user_id, task_id, log.duration_secs)
        return log

    def start_timer(self, user_id: int, task_id: int) -> TaskTimeLog:
        user_id, task_id = int(user_id), int(task_id)
        with transaction(self.db):
            task = self.db.query(Task).filter(Task.id == task_id).first()
            if not task:
                raise NotFound("Task not found")

            now = self.clock()
            closed = self.close_open_sessions(user_id, now)

            log = TaskTimeLog(task_id=task_id, user_id=user_id, started_at=now, duration_secs=0)
            self.db.add(log)
            try:
                self.db.flush()
                self.db.add(ActiveTimer(user_id=user_id, task_time_log_id=log.id, task_id=task_id, started_at=now))
                self.db.flush()
            except IntegrityError:
                logger.warning("Concurrent timer start for user %s refused", user_id)
                raise Conflict("Another timer was started for this user at the same time")

            if task.status == TaskStatus.PENDING.value:
                task.status = TaskStatus.IN_PROGRESS.value
                task.updated_at = now

        for previous in closed:
            logger.info("Closed timer %s on task %s (%ss) for new start", previous.id, previous.task_id, previous.duration_secs)
        logger.info("Started timer %s for user %s on task %s", log.id, user_id, task_id)
        return log

    def stop_timer(self, user_id: int, task_id: int) -> TaskTimeLog:
        with transaction(self.db):
            log = self.stop_running_on_task(user_id, task_id, self.clock())
            if not log:
                raise NoActiveTimer()
        return log

    def active_timer(self, user_id: int) -> Optional[TaskTimeLog]:
        return (
            self._open_sessions_query(int(user_id))
            .order_by(TaskTimeLog.started_at.desc())
            .first()
        )


class PunchClock:
    """Daily punch-in/punch-out, one record per user per UTC date"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock

    def _record(self, user_id: int, day: date) -> Optional[TimeLog]:
        return self.db.query(TimeLog).filter(TimeLog.user_id == user_id, TimeLog.date == day).first()

    def _close_stale_records(self, user_id: int, today: date):
        """Close open records left from earlier days at the end of their own day"""
        # Policy: the stored punch_out is midnight, not a real punch. It keeps
        # one open record per user; the warning below flags the record.
        stale = (
            self.db.query(TimeLog)
            .filter(
                TimeLog.user_id == user_id,
                TimeLog.date < today,
                TimeLog.punch_in.isnot(None),
                TimeLog.punch_out.is_(None),
            )
            .all()
        )
        for record in stale:
            record.punch_out = datetime.combine(record.date + timedelta(days=1), time.min)
            record.duration_minutes = elapsed_minutes(record.punch_in, record.punch_out)
            logger.warning("Closed stale punch record %s of user %s from %s", record.id, user_id, record.date)

    def today(self, user_id: int) -> TimeLog:
        day = self.clock().date()
        record = self._record(int(user_id), day)
        if record:
            return record
        # Placeholder, never added to the session
        return TimeLog(user_id=int(user_id), date=day, punch_in=None, punch_out=None, duration_minutes=0)

    def punch_in(self, user_id: int) -> TimeLog:
        user_id = int(user_id)
        with transaction(self.db):
            now = self.clock()
            record = self._record(user_id, now.date())
            if record and record.punch_in:
                raise AlreadyPunchedIn()

            self._close_stale_records(user_id, now.date())
            if record:
                record.punch_in = now
            else:
                record = TimeLog(user_id=user_id, date=now.date(), punch_in=now, duration_minutes=0)
                self.db.add(record)
            try:
                self.db.flush()
            except IntegrityError:
                # A duplicate submission inserted today's record first
                raise AlreadyPunchedIn()

        logger.info("User %s punched in at %s", user_id, now)
        return record

    def punch_out(self, user_id: int) -> TimeLog:
        user_id = int(user_id)
        with transaction(self.db):
            now = self.clock()
            record = (
                self.db.query(TimeLog)
                .filter(TimeLog.user_id == user_id, TimeLog.date == now.date())
                .with_for_update()
                .first()
            )
            if not record or not record.punch_in:
                raise NotPunchedIn()
            if record.punch_out:
                raise AlreadyPunchedOut()

            record.punch_out = now
            record.duration_minutes = elapsed_minutes(record.punch_in, now)

        logger.info("User %s punched out after %s minutes", user_id, record.duration_minutes)
        return record

    def daily_summary(self, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """All users' punch records for one day, earliest punch-in first"""
        day = day or self.clock().date()
        rows = (
            self.db.query(TimeLog, User.name, Role.name)
            .join(User, TimeLog.user_id == User.id)
            .outerjoin(Role, User.role_id == Role.id)
            .filter(TimeLog.date == day)
            .order_by(TimeLog.punch_in.asc())
            .all()
        )
        return [
            {
                "id": log.id,
                "user_id": log.user_id,
                "date": log.date,
                "punch_in": log.punch_in,
                "punch_out": log.punch_out,
                "duration_minutes": log.duration_minutes,
                "user_name": user_name,
                "role_name": role_name,
            }
            for log, user_name, role_name in rows
        ]

    def monthly_report(self, month: Optional[str] = None) -> Dict[str, Any]:
        """Punch records of one month (YYYY-MM) grouped by user"""
        month = month or self.clock().strftime("%Y-%m")
        try:
            first = datetime.strptime(month, "%Y-%m").date()
        except ValueError:
            raise InvalidArgument("month must be formatted as YYYY-MM")
        start, end = month_range(first)

        rows = (
            self.db.query(TimeLog, User.name, Role.name)
            .join(User, TimeLog.user_id == User.id)
            .outerjoin(Role, User.role_id == Role.id)
            .filter(TimeLog.date.between(start, end))
            .order_by(User.name.asc(), TimeLog.date.asc())
            .all()
        )

        by_user: Dict[int, Dict[str, Any]] = {}
        for log, user_name, role_name in rows:
            entry = by_user.setdefault(log.user_id, {
                "user_id": log.user_id,
                "user_name": user_name,
                "role_name": role_name,
                "records": [],
                "total_minutes": 0,
            })
            entry["records"].append(log)
            entry["total_minutes"] += log.duration_minutes or 0

        return {
            "month": month,
            "month_start": start,
            "month_end": end,
            "users": list(by_user.values()),
            "total_records": len(rows),
        }
