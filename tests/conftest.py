import os
import tempfile
from collections.abc import AsyncGenerator
from typing import Any

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="coach-api-logs-"))
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("EMAIL_API_URL", "https://mail.test/v3/mail/send")
os.environ.setdefault("EMAIL_API_KEY", "test-key")

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.db.session import get_db  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models import Base  # noqa: E402
from app.models import User  # noqa: E402
from app.schemas import Role  # noqa: E402
from app.services.email import get_email_client  # noqa: E402


class FakeEmailClient:
    """Records messages instead of calling the mail provider."""

    def __init__(self):
        self.sent: list[dict[str, Any]] = []
        self.succeed = True
        self.error: Exception | None = None

    async def send(self, to, subject, html, attachment=None) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append(
            {"to": to, "subject": subject, "html": html, "attachment": attachment}
        )
        return self.succeed


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, Any]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
async def client(session_factory, email_client) -> AsyncGenerator[httpx.AsyncClient, Any]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_email_client] = lambda: email_client

    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def registration_data() -> dict[str, str]:
    return {
        "email": "a@b.com",
        "firstName": "Ana",
        "lastName": "Gomez",
        "password": "Secret123!",
        "role": "USER",
        "phoneNumber": "+15551234567",
    }


@pytest.fixture
def add_user(session_factory):
    """Insert a user directly, bypassing the registration flow."""

    async def _add_user(
        email: str = "existing@example.com",
        phone_number: str = "+15550000000",
        first_name: str = "Existing",
        last_name: str = "User",
        username: str | None = None,
        role: Role = Role.USER,
    ) -> User:
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            phone_number=phone_number,
            username=username or f"{first_name}.{last_name}.{phone_number[-4:]}".lower(),
            hashed_password="not-a-real-hash",
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _add_user
