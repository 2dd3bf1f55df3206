import os
import tempfile

# Settings are read once at import time, so the environment must be in place first
_DB_DIR = tempfile.mkdtemp(prefix="shortener-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("PUBLIC_BASE_URL", "http://test")

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from shortener.main import app
from shortener.database import engine, Base, AsyncSessionLocal
from shortener.models import User, ROLE_ADMIN, ROLE_USER
from shortener.security import hash_password

DEFAULT_PASSWORD = "correct-horse"

@pytest.fixture
async def db_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()

@pytest.fixture
async def client(db_tables) -> AsyncGenerator[AsyncClient, None]:
    # ASGITransport does not run the app lifespan: Redis stays disconnected,
    # so the cache and rate limiter fall back to no-ops.
    async with ASGITransport(app=app) as transport:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c

async def create_account(name: str, email: str, role: str = ROLE_USER, password: str = DEFAULT_PASSWORD) -> User:
    async with AsyncSessionLocal() as db:
        user = User(name=name, email=email, password_hash=hash_password(password), role=role)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

async def login_headers(client: AsyncClient, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    response = await client.post("/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # Drop the session cookie so each request authenticates only through its headers
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}

@pytest.fixture
async def user_headers(client: AsyncClient) -> dict:
    await create_account("Alice", "alice@example.com")
    return await login_headers(client, "alice@example.com")

@pytest.fixture
async def other_user_headers(client: AsyncClient) -> dict:
    await create_account("Bob", "bob@example.com")
    return await login_headers(client, "bob@example.com")

@pytest.fixture
async def admin_headers(client: AsyncClient) -> dict:
    await create_account("Admin", "admin@example.com", role=ROLE_ADMIN)
    return await login_headers(client, "admin@example.com")
