# taskflow/services/transitions.py
"""
Task status transitions.

The table lists the happy-path moves. Under the default permissive policy
any move is written as requested and the table is informational; the strict
policy refuses moves outside the table for non-admin actors. Administrators
may always move a task to any state, including out of `completed`.
"""

import logging
from typing import Dict, FrozenSet

from taskflow.errors import InvalidArgument
from taskflow.models.task import TaskStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.ON_HOLD, TaskStatus.COMPLETED}),
    TaskStatus.IN_PROGRESS: frozenset({
        TaskStatus.PENDING,
        TaskStatus.ON_HOLD,
        TaskStatus.CLIENT_FEEDBACK,
        TaskStatus.COMPLETED,
    }),
    TaskStatus.ON_HOLD: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}),
    TaskStatus.CLIENT_FEEDBACK: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}),
    TaskStatus.REVISION: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.CLIENT_FEEDBACK, TaskStatus.COMPLETED}),
    TaskStatus.COMPLETED: frozenset(),
}

# Moving a task into one of these stops its running timer
ACTIVE_WORK_EXITS = frozenset({TaskStatus.COMPLETED, TaskStatus.CLIENT_FEEDBACK})


def parse_status(value) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise InvalidArgument(f"Unknown status: {value!r}")


class TransitionPolicy:
    def __init__(self, strict: bool = False):
        self.strict = strict

    def is_allowed(self, current, target) -> bool:
        current, target = parse_status(current), parse_status(target)
        return current == target or target in ALLOWED_TRANSITIONS[current]

    def check(self, current, target, actor_is_admin: bool = False) -> TaskStatus:
        target = parse_status(target)
        if not self.strict or actor_is_admin:
            return target
        if not self.is_allowed(current, target):
            logger.warning("Refused status transition %s -> %s", current, target.value)
            raise InvalidArgument(f"Cannot move a task from '{parse_status(current).value}' to '{target.value}'")
        return target
