import os

# Must be set before portal.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from portal.core.security import create_access_token
from portal.db.base import Base
from portal.db.session import get_db
from portal.main import app
from portal.models.course import Course
from portal.models.user import User


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def users(session_factory):
    """faculty owns the course, student is enrolled, outsider is not."""
    async with session_factory() as db:
        people = {
            "faculty": User(name="Ada Faculty", email="ada@college.edu", role="faculty"),
            "other_faculty": User(name="Bo Faculty", email="bo@college.edu", role="faculty"),
            "admin": User(name="Cy Admin", email="cy@college.edu", role="admin"),
            "student": User(name="Dee Student", email="dee@college.edu", role="student"),
            "second_student": User(name="Eve Student", email="eve@college.edu", role="student"),
            "outsider": User(name="Fay Student", email="fay@college.edu", role="student"),
        }
        db.add_all(people.values())
        await db.commit()
        return people


@pytest_asyncio.fixture
async def course(session_factory, users):
    async with session_factory() as db:
        enrolled = [
            await db.get(User, users["student"].id),
            await db.get(User, users["second_student"].id),
        ]
        course = Course(
            title="Intro to Computing",
            description="CS101",
            access_code="CSE101",
            created_by_id=users["faculty"].id,
            students=enrolled,
        )
        db.add(course)
        await db.commit()
        return course


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers(users):
    return {name: auth_headers(user) for name, user in users.items()}


@pytest.fixture
def quiz_payload():
    return {
        "title": "Week 1 check",
        "timeLimit": 15,
        "questions": [
            {
                "text": "Which one is a prime?",
                "type": "single",
                "options": [
                    {"text": "4", "isCorrect": False},
                    {"text": "7", "isCorrect": True},
                    {"text": "9", "isCorrect": False},
                ],
            },
            {
                "text": "Pick the even numbers",
                "type": "multiple",
                "options": [
                    {"text": "2", "isCorrect": True},
                    {"text": "3", "isCorrect": False},
                    {"text": "8", "isCorrect": True},
                ],
            },
        ],
    }
