import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DEBUG", "false")

from datetime import timedelta
from uuid import uuid4

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lms_quiz.core.security import get_password_hash
from lms_quiz.db.database import Base, get_db
from lms_quiz.main import app
from lms_quiz.models import Quiz, User, UserRole
from lms_quiz.utils.datetime_utils import utcnow

from helpers import DEFAULT_QUESTIONS, QUIZ_PASSWORD

# ============================================================================
# IN-MEMORY DATABASE FOR TESTING
# ============================================================================

@pytest.fixture
async def engine():
    # StaticPool keeps a single connection so the in-memory database survives
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ============================================================================
# FACTORIES
# ============================================================================

@pytest.fixture
def make_user(db_session):
    async def _make(role: UserRole = UserRole.STUDENT, full_name: str = "Test User") -> User:
        user = User(
            email=f"{role.value}-{uuid4().hex[:8]}@example.com",
            password_hash=get_password_hash("Secret123"),
            full_name=full_name,
            role=role,
            is_active=True,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_quiz(db_session):
    async def _make(
        creator: User = None,
        password: str = QUIZ_PASSWORD,
        start_offset: timedelta = timedelta(minutes=-1),
        end_offset: timedelta = timedelta(hours=1),
        questions=None,
    ) -> Quiz:
        now = utcnow()
        quiz = Quiz(
            created_by=creator.id if creator else None,
            title="Astronomy basics",
            start_time=now + start_offset,
            end_time=now + end_offset,
            hash_password=get_password_hash(password) if password else None,
            snapshot_questions=questions if questions is not None else DEFAULT_QUESTIONS,
        )
        db_session.add(quiz)
        await db_session.commit()
        await db_session.refresh(quiz)
        return quiz

    return _make


@pytest.fixture
async def student(make_user):
    return await make_user(UserRole.STUDENT, full_name="Student One")


@pytest.fixture
async def other_student(make_user):
    return await make_user(UserRole.STUDENT, full_name="Student Two")


@pytest.fixture
async def teacher(make_user):
    return await make_user(UserRole.TEACHER, full_name="Teacher One")


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN, full_name="Admin One")


@pytest.fixture
async def quiz(make_quiz, teacher):
    return await make_quiz(creator=teacher)


