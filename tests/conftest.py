"""Shared pytest configuration for the API tests."""
import os
import sys
from datetime import datetime, timedelta

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SEED_DEFAULT_USERS", "false")
os.environ.setdefault("ENVIRONMENT", "test")

# Ensure repo root is on sys.path
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import Role, Task, TaskPriority, TaskStatus, User
from app.utils.security import create_access_token, hash_password, token_claims_for
from main import app

PASSWORD = "password123"
PASSWORD_HASH = hash_password(PASSWORD)


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
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _add_user(db, username, role, manager=None, active=True):
    user = User(
        username=username,
        email=f"{username}@example.com",
        name=username.replace("_", " ").title(),
        hashed_password=PASSWORD_HASH,
        role=role,
        manager_id=manager.id if manager else None,
        active=active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def users(db):
    """A small organisation.

    admin
    boss (manager) -> alice (user), lead (manager)
    lead (manager) -> carol (user)
    other_boss (manager) -> dave (user)
    eve (user, no manager)
    """
    admin = _add_user(db, "admin", Role.ADMIN)
    boss = _add_user(db, "boss", Role.MANAGER)
    other_boss = _add_user(db, "other_boss", Role.MANAGER)
    alice = _add_user(db, "alice", Role.USER, manager=boss)
    lead = _add_user(db, "lead", Role.MANAGER, manager=boss)
    carol = _add_user(db, "carol", Role.USER, manager=lead)
    dave = _add_user(db, "dave", Role.USER, manager=other_boss)
    eve = _add_user(db, "eve", Role.USER)
    return {
        "admin": admin,
        "boss": boss,
        "other_boss": other_boss,
        "alice": alice,
        "lead": lead,
        "carol": carol,
        "dave": dave,
        "eve": eve,
    }


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(token_claims_for(user))
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_task(db):
    def _make(creator, assignee, title="Task", status=TaskStatus.PENDING):
        task = Task(
            title=title,
            description=f"{title} description",
            status=status,
            priority=TaskPriority.MEDIUM,
            due_date=datetime(2030, 1, 1) + timedelta(days=1),
            creator_id=creator.id,
            assignee_id=assignee.id if assignee is not None else None,
        )
        db.add(task)
        db.commit()
        db.refresh(task)
        return task
    return _make
