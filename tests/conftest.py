"""Pytest fixtures and configuration."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import docflow.models.sql  # noqa: F401
from docflow.api.deps import get_generation_service
from docflow.config import settings
from docflow.core.security import create_access_token, hash_password
from docflow.db.postgres import Base, get_db
from docflow.main import app
from docflow.models.sql.template import Template
from docflow.models.sql.user import User
from docflow.services.generation import GenerationConfig, GenerationService

# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeCursor:
    """Enough of a motor cursor for sort().limit() and ``async for``."""

    def __init__(self, docs: list[dict]):
        self.docs = docs

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self.docs = sorted(self.docs, key=lambda d: d[key], reverse=direction < 0)
        return self

    def limit(self, n: int) -> "FakeCursor":
        self.docs = self.docs[:n]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self.docs:
            yield dict(doc)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh in-memory database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def activity_collection() -> MagicMock:
    """In-memory stand-in for the MongoDB activity collection."""
    stored: list[dict] = []

    async def mock_insert_one(doc):
        doc = {**doc, "_id": str(uuid4())}
        stored.append(doc)
        return MagicMock(inserted_id=doc["_id"])

    def mock_find(query):
        return FakeCursor([d for d in stored if all(d.get(k) == v for k, v in query.items())])

    collection = MagicMock()
    collection.stored = stored
    collection.insert_one = AsyncMock(side_effect=mock_insert_one)
    collection.find = MagicMock(side_effect=mock_find)
    return collection


@pytest.fixture
def refresh_tokens() -> dict:
    """Refresh-token registry keyed by user id."""
    return {}


@pytest.fixture(autouse=True)
def patched_backends(activity_collection: MagicMock, refresh_tokens: dict, tmp_path):
    """Replace MongoDB, the Redis token registry and the upload directory for every test."""

    async def fake_store(user_id, token):
        refresh_tokens[str(user_id)] = token

    async def fake_get(user_id):
        return refresh_tokens.get(str(user_id))

    async def fake_revoke(user_id):
        refresh_tokens.pop(str(user_id), None)

    with (
        patch("docflow.db.mongodb.get_activities_collection", return_value=activity_collection),
        patch("docflow.api.v1.auth.store_refresh_token", AsyncMock(side_effect=fake_store)),
        patch("docflow.api.v1.auth.get_refresh_token", AsyncMock(side_effect=fake_get)),
        patch("docflow.api.v1.auth.revoke_refresh_token", AsyncMock(side_effect=fake_revoke)),
        patch("docflow.api.v1.users.revoke_refresh_token", AsyncMock(side_effect=fake_revoke)),
        patch.object(settings, "UPLOAD_DIR", str(tmp_path / "uploads")),
    ):
        yield


@pytest_asyncio.fixture
async def generation_service() -> AsyncGenerator[GenerationService, None]:
    """Generation with no provider configured: always the local synthesizer."""
    service = GenerationService(GenerationConfig())
    yield service
    await service.close()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, generation_service: GenerationService
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_generation_service] = lambda: generation_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db_session: AsyncSession, email: str, name: str, role: str = "user", **extra) -> User:
    user = User(
        id=uuid4(),
        email=email,
        name=name,
        hashed_password=hash_password("testpass123"),
        role=role,
        **extra,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    return await _make_user(
        db_session, "test@example.com", "Test User", department="Computer Science", position="Lecturer"
    )


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second regular user who owns nothing the tests create."""
    return await _make_user(db_session, "other@example.com", "Other User", department="Physics")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an administrator."""
    return await _make_user(db_session, "admin@example.com", "Admin User", role="admin")


def _headers(user: User) -> dict:
    token = create_access_token(user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authentication headers for test user."""
    return _headers(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return _headers(other_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return _headers(admin_user)


@pytest_asyncio.fixture
async def test_template(db_session: AsyncSession, admin_user: User) -> Template:
    """An active circular template."""
    template = Template(
        id=uuid4(),
        name="Circular",
        description="General circular for staff and students",
        category="Notice",
        fields=[
            {"name": "body", "label": "Body", "type": "ai-text", "required": True, "position": 1},
        ],
        header={"title": "Springfield College", "subtitle": "Office of the Principal", "logo": None},
        footer={"text": "Confidential", "includePageNumbers": True},
        styling={
            "fontFamily": "Arial",
            "fontSize": 11,
            "margins": {"top": 60, "right": 60, "bottom": 60, "left": 60},
            "primaryColor": "#1a237e",
            "secondaryColor": "#555555",
        },
        created_by=admin_user.id,
    )
    db_session.add(template)
    await db_session.commit()
    await db_session.refresh(template)
    return template
