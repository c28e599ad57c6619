"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database, a small agency team and a
clock that only moves when the test moves it.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskflow import models  # noqa: F401
from taskflow.database import Base, get_db
from taskflow.models import Role, Task, TaskStatus, TaskType, User
from taskflow.utils.clock import get_clock
from taskflow.utils.security import create_access_token, hash_password
from taskflow.utils.working_days import buffer_deadline_for

PASSWORD = "secret123"


class FakeClock:
    """Callable clock for services; starts on Monday 2024-06-10 09:00 UTC"""

    def __init__(self, now=datetime(2024, 6, 10, 9, 0, 0)):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, now):
        self.now = now
        return self.now


@pytest.fixture(scope="session")
def password_hash():
    """bcrypt is slow; hash the shared test password once"""
    return hash_password(PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_user(db, password_hash):
    def _make(name, role=None, is_admin=False, is_active=True, email=None):
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@agency.com",
            hashed_password=password_hash,
            role_id=role.id if role else None,
            is_admin=is_admin,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def team(db, make_user):
    """Two roles, three task types, an admin and three members"""
    designer_role = Role(name="Designer")
    writer_role = Role(name="Content Writer")
    db.add_all([designer_role, writer_role])
    db.commit()

    graphic = TaskType(name="Graphic Design", role_id=designer_role.id, daily_capacity=2, is_predefined=True)
    story = TaskType(name="Story Design", role_id=designer_role.id, daily_capacity=4, is_predefined=True)
    blog = TaskType(name="Blog Post", role_id=writer_role.id, daily_capacity=2, is_predefined=True)
    db.add_all([graphic, story, blog])
    db.commit()

    admin = make_user("Admin", is_admin=True)
    alice = make_user("Alice", role=designer_role)
    bob = make_user("Bob", role=designer_role)
    wendy = make_user("Wendy", role=writer_role)

    return SimpleNamespace(
        designer_role=designer_role,
        writer_role=writer_role,
        graphic=graphic,
        story=story,
        blog=blog,
        admin=admin,
        alice=alice,
        bob=bob,
        wendy=wendy,
    )


@pytest.fixture
def make_task(db, team, clock):
    """Insert a task directly, bypassing the lifecycle service"""
    def _make(title="Banner", assignee=None, deadline=date(2024, 6, 12), urgency="medium",
              status=TaskStatus.PENDING.value, task_type=None, **extra):
        now = clock()
        task = Task(
            title=title,
            task_type_id=(task_type or team.graphic).id,
            urgency=urgency,
            deadline=deadline,
            buffer_deadline=buffer_deadline_for(deadline, urgency),
            assigned_to=assignee.id if assignee else None,
            created_by=team.admin.id,
            status=status,
            created_at=now,
            updated_at=now,
            **extra,
        )
        db.add(task)
        db.commit()
        return task

    return _make


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def client(session_factory, clock):
    """TestClient bound to the test database and clock"""
    from fastapi.testclient import TestClient
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.state.database.mark_ready()

    # Not used as a context manager: startup hooks would start the real connector
    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return auth_headers
