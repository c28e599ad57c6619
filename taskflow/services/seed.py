# taskflow/services/seed.py
"""First-run reference data: agency roles, predefined task types and an admin account"""

import logging

from sqlalchemy.orm import Session

from taskflow.config.settings import settings
from taskflow.database import transaction
from taskflow.models import Role, TaskType, User
from taskflow.utils.security import hash_password

logger = logging.getLogger(__name__)

DEFAULT_ROLES = ["Designer", "Video Editor", "Content Writer", "Social Media Manager"]

# (name, role, daily capacity)
DEFAULT_TASK_TYPES = [
    ("Graphic Design", "Designer", 2),
    ("Ad Creative", "Designer", 2),
    ("Story Design", "Designer", 4),
    ("Email Template", "Designer", 2),
    ("Reels", "Video Editor", 4),
    ("Video Editing", "Video Editor", 2),
    ("Content Writing", "Content Writer", 4),
    ("Blog Post", "Content Writer", 2),
    ("Caption Writing", "Content Writer", 6),
    ("Social Media Post", "Social Media Manager", 6),
    ("Campaign Planning", "Social Media Manager", 2),
]


def seed_defaults(db: Session) -> bool:
    """Seed an empty database; returns False when roles already exist"""
    if db.query(Role.id).first():
        return False

    with transaction(db):
        roles = {}
        for name in DEFAULT_ROLES:
            roles[name] = Role(name=name)
            db.add(roles[name])
        db.flush()

        for name, role_name, capacity in DEFAULT_TASK_TYPES:
            db.add(TaskType(name=name, role_id=roles[role_name].id, daily_capacity=capacity, is_predefined=True))

        if not db.query(User.id).filter(User.email == settings.SEED_ADMIN_EMAIL.lower()).first():
            db.add(User(
                name=settings.SEED_ADMIN_NAME,
                email=settings.SEED_ADMIN_EMAIL.lower(),
                hashed_password=hash_password(settings.SEED_ADMIN_PASSWORD),
                is_admin=True,
            ))

    logger.info(
        "Seeded %d roles, %d task types and admin %s",
        len(DEFAULT_ROLES), len(DEFAULT_TASK_TYPES), settings.SEED_ADMIN_EMAIL,
    )
    return True
