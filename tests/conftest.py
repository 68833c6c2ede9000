"""Shared pytest fixtures: in-memory database, seeded school directory, API client."""

import os
from types import SimpleNamespace

# Settings are read at import time; test defaults must be in place first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-do-not-use-in-production")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.core.security import create_access_token, get_password_hash
from app.database import Base, get_db
from app.main import app
from app.models.academic import Grade, SchoolClass
from app.models.enums import UserRole
from app.models.user import User

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

PASSWORD = "SchoolPass123!"
# One bcrypt round-trip per session; seeded users share the hash
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def engine():
    options = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        options = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    test_engine = create_async_engine(TEST_DATABASE_URL, **options)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory, api_base: str):
    """Async HTTP client over the app with ``get_db`` bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=api_base, timeout=30.0) as client:
        yield client
    app.dependency_overrides.clear()


def _user(email: str, first_name: str, last_name: str, role: UserRole, **kwargs) -> User:
    return User(
        email=email,
        hashed_password=PASSWORD_HASH,
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=True,
        **kwargs,
    )


@pytest.fixture
async def school(session_factory) -> SimpleNamespace:
    """
    A small school directory:

    - grades 9 and 10; classes IX-A (3 students, class teacher ``teacher``),
      IX-B (1 student) and X-A (1 student)
    - two teachers, two parents (``parent`` has two children in IX-A), one admin
    """
    async with session_factory() as session:
        grade9 = Grade(level=9, name="Class 9")
        grade10 = Grade(level=10)
        session.add_all([grade9, grade10])
        await session.flush()

        admin = _user("admin@school.example.com", "Asha", "Rao", UserRole.ADMIN)
        teacher = _user("teacher@school.example.com", "Tomas", "Berg", UserRole.TEACHER, phone="555-0101")
        other_teacher = _user("teacher2@school.example.com", "Priya", "Nair", UserRole.TEACHER)
        session.add_all([admin, teacher, other_teacher])
        await session.flush()

        class_9a = SchoolClass(name="IX-A", capacity=30, grade_id=grade9.id, supervisor_id=teacher.id)
        class_9b = SchoolClass(name="IX-B", capacity=30, grade_id=grade9.id, supervisor_id=other_teacher.id)
        class_10a = SchoolClass(name="X-A", capacity=30, grade_id=grade10.id)
        session.add_all([class_9a, class_9b, class_10a])
        await session.flush()

        parent = _user("parent@school.example.com", "Maria", "Lopez", UserRole.PARENT)
        other_parent = _user("parent2@school.example.com", "Kofi", "Mensah", UserRole.PARENT)
        session.add_all([parent, other_parent])
        await session.flush()

        students_9a = [
            _user(f"student{i}@school.example.com", f"Student{i}", "Lopez" if i < 2 else "Ade",
                  UserRole.STUDENT, grade_id=grade9.id, class_id=class_9a.id,
                  parent_id=parent.id if i < 2 else None)
            for i in range(3)
        ]
        for student in students_9a:
            session.add(student)
            await session.flush()
        student_9b = _user("student9b@school.example.com", "Ama", "Mensah", UserRole.STUDENT,
                           grade_id=grade9.id, class_id=class_9b.id, parent_id=other_parent.id)
        student_10a = _user("student10a@school.example.com", "Lars", "Holm", UserRole.STUDENT,
                            grade_id=grade10.id, class_id=class_10a.id)
        session.add_all([student_9b, student_10a])
        await session.commit()

    return SimpleNamespace(
        grade9=grade9,
        grade10=grade10,
        class_9a=class_9a,
        class_9b=class_9b,
        class_10a=class_10a,
        admin=admin,
        teacher=teacher,
        other_teacher=other_teacher,
        parent=parent,
        other_parent=other_parent,
        students_9a=students_9a,
        student_9b=student_9b,
        student_10a=student_10a,
    )


def _auth_headers(user: User, **token_kwargs) -> dict:
    token = create_access_token(
        data={"sub": str(user.id), "role": user.role.value, "name": user.full_name},
        **token_kwargs,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Bearer header builder for a user, as issued by login."""
    return _auth_headers
