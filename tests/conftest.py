import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

# Point the app at a throwaway database before backend.config is imported
_tmpdir = Path(tempfile.mkdtemp(prefix="recallio-tests-"))
os.environ["RECALLIO_DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmpdir / 'test.db'}"
os.environ["RECALLIO_BCRYPT_ROUNDS"] = "4"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from backend.auth import hash_password  # noqa: E402
from backend.database import async_session, create_tables, engine  # noqa: E402
from backend.main import app  # noqa: E402
from backend.models import Base, User, Word  # noqa: E402

TEST_PASSWORD = "correct-horse"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh tables for each test."""
    await create_tables()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(database: None) -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def user(db: AsyncSession) -> User:
    user = User(email="learner@example.com", name="Learner", password_hash=hash_password(TEST_PASSWORD))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def add_words(db: AsyncSession, user: User, count: int, section: str = "1", **fields) -> list[Word]:
    words = [
        Word(
            user_id=user.id,
            main_word=f"Wort{i}",
            translation1=f"word{i}",
            translation2=f"shobdo{i}",
            section=section,
            **fields,
        )
        for i in range(count)
    ]
    db.add_all(words)
    await db.commit()
    return words


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def sign_in(client: AsyncClient, email: str = "api@example.com") -> dict:
    """Create an account, log in and send its token with every later request."""
    response = await client.post(
        "/api/auth/signup", json={"email": email, "password": TEST_PASSWORD, "name": "Api"}
    )
    assert response.status_code == 201
    response = await client.post("/api/auth/login", json={"email": email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    client.headers["Authorization"] = f"Bearer {body['token']}"
    return body["user"]


@pytest_asyncio.fixture
async def auth_client(client: AsyncClient) -> AsyncClient:
    await sign_in(client)
    return client
