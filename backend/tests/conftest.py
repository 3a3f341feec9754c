import os
import tempfile
from typing import AsyncGenerator

# Point the app at throwaway storage BEFORE importing it
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ["ASYNC_DATABASE_URL"] = TEST_DATABASE_URL
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["EMAIL_API_KEY"] = ""
os.environ.setdefault("STATIC_DIR", tempfile.mkdtemp(prefix="askyourot-static-"))

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db import Base, get_db
from app.main import app
from app.models import TherapistProfile, EducationalContent

PASSWORD = "secret123"


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session_maker) -> AsyncGenerator[AsyncClient, None]:
    async def get_db_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = get_db_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


async def signup(client: AsyncClient, email: str, role: str = "client", name: str = "Test User", **extra):
    payload = {
        "name": name,
        "email": email,
        "password": PASSWORD,
        "confirm_password": PASSWORD,
        "role": role,
        **extra,
    }
    return await client.post("/auth/signup", json=payload)


async def login(client: AsyncClient, email: str, password: str = PASSWORD):
    return await client.post("/auth/login", data={"username": email, "password": password})


@pytest_asyncio.fixture
async def make_user(client):
    """
    Factory: sign up + log in, returning (user_dict, auth_headers).
    """

    async def _make(email: str, role: str = "client", name: str = "Test User"):
        res = await signup(client, email, role=role, name=name)
        assert res.status_code == 201, res.text
        token = (await login(client, email)).json()["access_token"]
        return res.json()["user"], {"Authorization": f"Bearer {token}"}

    return _make


@pytest_asyncio.fixture
async def make_therapist(make_user, session):
    """
    Factory for a therapist with a practice profile. Approval is a
    database-only flag, so it is set directly here.
    """

    async def _make(
        email: str,
        name: str = "Dr. Test",
        specialties=("Hand Therapy",),
        hourly_rate=120.0,
        approved: bool = True,
    ):
        user, headers = await make_user(email, role="therapist", name=name)
        profile = TherapistProfile(
            user_id=user["id"],
            bio="Experienced occupational therapist.",
            specialties=list(specialties),
            credentials="OTR/L",
            experience_years=8,
            hourly_rate=hourly_rate,
            is_approved=approved,
        )
        session.add(profile)
        await session.commit()
        await session.refresh(profile)
        return user, headers, profile

    return _make


@pytest_asyncio.fixture
async def add_content(session):
    async def _add(created_by: int, title: str, type: str = "article", tags=(), approved: bool = True):
        content = EducationalContent(
            title=title,
            description=f"About {title}",
            type=type,
            url=f"https://example.com/{title.lower().replace(' ', '-')}",
            category=tags[0] if tags else "General",
            condition_tags=list(tags),
            created_by=created_by,
            is_approved=approved,
        )
        session.add(content)
        await session.commit()
        await session.refresh(content)
        return content

    return _add
