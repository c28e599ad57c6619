from .role import Role
from .user import User
from .task_type import TaskType
from .task import Task, TaskStatus, TaskUrgency, CANONICAL_STATUSES, URGENCY_RANK
from .time_log import TimeLog, TaskTimeLog, ActiveTimer
