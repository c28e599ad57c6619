# taskflow/models/time_log.py
from sqlalchemy import Column, Integer, DateTime, Date, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship

from taskflow.database import Base


class TimeLog(Base):
    """Daily punch record: one row per user per calendar date"""
    __tablename__ = "time_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    punch_in = Column(DateTime, nullable=True)
    punch_out = Column(DateTime, nullable=True)
    duration_minutes = Column(Integer, default=0, nullable=False)

    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uk_time_logs_user_date"),
    )

    @property
    def is_open(self) -> bool:
        return self.punch_in is not None and self.punch_out is None


class TaskTimeLog(Base):
    """One timer session of a user on a task"""
    __tablename__ = "task_time_logs"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False)
    ended_at = Column(DateTime, nullable=True)
    duration_secs = Column(Integer, default=0, nullable=False)

    task = relationship("Task", back_populates="time_logs")
    user = relationship("User")

    __table_args__ = (
        # At most one open session per user (partial index on SQLite and PostgreSQL)
        Index(
            "uq_task_time_logs_open_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("ended_at IS NULL"),
            postgresql_where=text("ended_at IS NULL"),
        ),
    )

    @property
    def task_title(self):
        return self.task.title if self.task else None


class ActiveTimer(Base):
    """Lease on the single running timer of a user"""
    __tablename__ = "active_timers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    task_time_log_id = Column(Integer, ForeignKey("task_time_logs.id"), nullable=False)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False)

    time_log = relationship("TaskTimeLog")
