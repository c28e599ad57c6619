# taskflow/services/directory.py
"""Reference data: roles, task types and team members"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from taskflow.database import transaction
from taskflow.errors import Conflict, InvalidArgument, NotFound
from taskflow.models import Role, Task, TaskStatus, TaskType, User
from taskflow.utils.security import hash_password

logger = logging.getLogger(__name__)


def _clean_name(value: Optional[str], label: str) -> str:
    if not value or not value.strip():
        raise InvalidArgument(f"{label} is required")
    return value.strip()


class RoleDirectory:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, role_id: int) -> Role:
        role = self.db.query(Role).filter(Role.id == int(role_id)).first()
        if not role:
            raise NotFound("Role not found")
        return role

    def _member_count(self, role_id: int) -> int:
        return self.db.query(func.count(User.id)).filter(
            User.role_id == role_id, User.is_active == True  # noqa: E712
        ).scalar() or 0

    def _task_type_count(self, role_id: int) -> int:
        return self.db.query(func.count(TaskType.id)).filter(TaskType.role_id == role_id).scalar() or 0

    def _with_counts(self, role: Role) -> Dict[str, Any]:
        return {
            "id": role.id,
            "name": role.name,
            "created_at": role.created_at,
            "member_count": self._member_count(role.id),
            "task_type_count": self._task_type_count(role.id),
        }

    def list_roles(self) -> List[Dict[str, Any]]:
        return [self._with_counts(role) for role in self.db.query(Role).order_by(Role.name).all()]

    def _save(self, role: Role):
        try:
            self.db.flush()
        except IntegrityError:
            raise Conflict("Role already exists")

    def create_role(self, name: str) -> Dict[str, Any]:
        name = _clean_name(name, "Role name")
        with transaction(self.db):
            role = Role(name=name)
            self.db.add(role)
            self._save(role)
        logger.info("Role %s '%s' created", role.id, role.name)
        return self._with_counts(role)

    def rename_role(self, role_id: int, name: str) -> Dict[str, Any]:
        name = _clean_name(name, "Role name")
        with transaction(self.db):
            role = self._get(role_id)
            role.name = name
            self._save(role)
        return self._with_counts(role)

    def delete_role(self, role_id: int):
        with transaction(self.db):
            role = self._get(role_id)
            members = self._member_count(role.id)
            if members:
                raise InvalidArgument(f"Cannot delete: {members} team member(s) have this role")
            task_types = self._task_type_count(role.id)
            if task_types:
                raise InvalidArgument(f"Cannot delete: {task_types} task type(s) use this role")
            self.db.delete(role)
        logger.info("Role %s deleted", role_id)


class TaskTypeDirectory:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, task_type_id: int) -> TaskType:
        task_type = (
            self.db.query(TaskType)
            .options(joinedload(TaskType.role))
            .filter(TaskType.id == int(task_type_id))
            .first()
        )
        if not task_type:
            raise NotFound("Task type not found")
        return task_type

    def _require_role(self, role_id: int):
        if not self.db.query(Role.id).filter(Role.id == int(role_id)).first():
            raise NotFound("Role not found")

    def _task_count(self, task_type_id: int) -> int:
        return self.db.query(func.count(Task.id)).filter(Task.task_type_id == task_type_id).scalar() or 0

    def _with_counts(self, task_type: TaskType) -> Dict[str, Any]:
        return {
            "id": task_type.id,
            "name": task_type.name,
            "role_id": task_type.role_id,
            "role_name": task_type.role_name,
            "daily_capacity": task_type.daily_capacity,
            "is_predefined": task_type.is_predefined,
            "created_at": task_type.created_at,
            "task_count": self._task_count(task_type.id),
        }

    def list_task_types(self) -> List[Dict[str, Any]]:
        task_types = (
            self.db.query(TaskType)
            .outerjoin(Role, TaskType.role_id == Role.id)
            .options(joinedload(TaskType.role))
            .order_by(Role.name, TaskType.name)
            .all()
        )
        return [self._with_counts(task_type) for task_type in task_types]

    def create_task_type(self, name: str, role_id: int, daily_capacity: Optional[int] = None) -> Dict[str, Any]:
        name = _clean_name(name, "Task type name")
        if daily_capacity is not None and daily_capacity < 1:
            raise InvalidArgument("daily_capacity must be at least 1")
        with transaction(self.db):
            self._require_role(role_id)
            task_type = TaskType(
                name=name,
                role_id=int(role_id),
                daily_capacity=daily_capacity or 2,
                is_predefined=False,
            )
            self.db.add(task_type)
            self.db.flush()
        logger.info("Task type %s '%s' created", task_type.id, task_type.name)
        return self._with_counts(self._get(task_type.id))

    def update_task_type(self, task_type_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        with transaction(self.db):
            task_type = self._get(task_type_id)
            if changes.get("name") is not None:
                task_type.name = _clean_name(changes["name"], "Task type name")
            if changes.get("role_id") is not None:
                self._require_role(changes["role_id"])
                task_type.role_id = int(changes["role_id"])
            if changes.get("daily_capacity") is not None:
                if changes["daily_capacity"] < 1:
                    raise InvalidArgument("daily_capacity must be at least 1")
                task_type.daily_capacity = changes["daily_capacity"]
        self.db.expire(task_type, ["role"])
        return self._with_counts(self._get(task_type_id))

    def delete_task_type(self, task_type_id: int):
        with transaction(self.db):
            task_type = self._get(task_type_id)
            usage = self._task_count(task_type.id)
            if usage:
                raise InvalidArgument(f"Cannot delete: {usage} task(s) use this type")
            self.db.delete(task_type)
        logger.info("Task type %s deleted", task_type_id)


class UserDirectory:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, user_id: int) -> User:
        user = self.db.query(User).options(joinedload(User.role)).filter(User.id == int(user_id)).first()
        if not user:
            raise NotFound("User not found")
        return user

    def _require_role(self, role_id):
        if role_id is not None and not self.db.query(Role.id).filter(Role.id == int(role_id)).first():
            raise NotFound("Role not found")

    def _save(self):
        try:
            self.db.flush()
        except IntegrityError:
            raise Conflict("Email already exists")

    def _task_counts(self, user_id: int) -> Dict[str, int]:
        def count(*criteria) -> int:
            return self.db.query(func.count(Task.id)).filter(Task.assigned_to == user_id, *criteria).scalar() or 0

        return {
            "active_tasks": count(Task.status != TaskStatus.COMPLETED.value),
            "completed_tasks": count(Task.status == TaskStatus.COMPLETED.value),
        }

    def list_team(self) -> List[Dict[str, Any]]:
        """Active non-admin users with their open and finished task counts"""
        users = (
            self.db.query(User)
            .outerjoin(Role, User.role_id == Role.id)
            .options(joinedload(User.role))
            .filter(User.is_active == True, User.is_admin == False)  # noqa: E712
            .order_by(Role.name, User.name)
            .all()
        )
        result = []
        for user in users:
            row = {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role_id": user.role_id,
                "role_name": user.role_name,
                "is_admin": user.is_admin,
                "is_active": user.is_active,
                "created_at": user.created_at,
            }
            row.update(self._task_counts(user.id))
            result.append(row)
        return result

    def create_user(self, name: str, email: str, password: str, role_id: Optional[int] = None, is_admin: bool = False) -> User:
        name = _clean_name(name, "Name")
        if not password:
            raise InvalidArgument("Password is required")
        email = email.strip().lower()
        with transaction(self.db):
            self._require_role(role_id)
            if self.db.query(User.id).filter(User.email == email).first():
                raise Conflict("Email already exists")
            user = User(
                name=name,
                email=email,
                hashed_password=hash_password(password),
                role_id=role_id,
                is_admin=bool(is_admin),
            )
            self.db.add(user)
            self._save()
        logger.info("User %s <%s> created", user.id, user.email)
        return self._get(user.id)

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> User:
        with transaction(self.db):
            user = self._get(user_id)
            if changes.get("name") is not None:
                user.name = _clean_name(changes["name"], "Name")
            if changes.get("email") is not None:
                email = changes["email"].strip().lower()
                taken = self.db.query(User.id).filter(User.email == email, User.id != user.id).first()
                if taken:
                    raise Conflict("Email already exists")
                user.email = email
            if "role_id" in changes:
                self._require_role(changes["role_id"])
                user.role_id = changes["role_id"]
            if changes.get("is_admin") is not None:
                user.is_admin = bool(changes["is_admin"])
            if changes.get("password"):
                user.hashed_password = hash_password(changes["password"])
            self._save()
        self.db.expire(user, ["role"])
        return self._get(user_id)

    def deactivate_user(self, actor: User, user_id: int) -> Dict[str, Any]:
        """Soft delete: the user is deactivated and loses their unfinished tasks"""
        if int(user_id) == int(actor.id):
            raise InvalidArgument("Cannot delete your own account")
        with transaction(self.db):
            user = self._get(user_id)
            user.is_active = False
            unassigned = (
                self.db.query(Task)
                .filter(Task.assigned_to == user.id, Task.status != TaskStatus.COMPLETED.value)
                .update({Task.assigned_to: None}, synchronize_session=False)
            )
        logger.info("User %s deactivated by %s, %s task(s) unassigned", user_id, actor.id, unassigned)
        return {"message": "Team member removed. Their pending tasks have been unassigned.", "unassigned_tasks": unassigned}
