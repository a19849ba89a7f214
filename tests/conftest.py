import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import httpx
import pytest
from fakeredis import aioredis
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.core.database import Base, get_db
from helpdesk.core.security import get_password_hash
from helpdesk.main import app
from helpdesk.models.enums import Role
from helpdesk.models.user import User
from helpdesk.notifications.email import EmailClient
from helpdesk.notifications.queue import NotificationQueue, get_notification_queue
from helpdesk.routers.auth import issue_token
from helpdesk.routers.notifications import get_email_client

TEST_CHANNEL = "test_notifications"
PASSWORD = "secret123"


class RecordingQueue(NotificationQueue):
    """Publishes through the real queue and keeps the events for assertions."""

    def __init__(self, client, channel):
        super().__init__(client, channel)
        self.events = []

    async def publish(self, event):
        self.events.append(event)
        return await super().publish(event)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis():
    return aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def queue(fake_redis):
    return RecordingQueue(fake_redis, TEST_CHANNEL)


@pytest.fixture
async def client(session_factory, queue):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_queue] = lambda: queue
    app.dependency_overrides[get_email_client] = lambda: EmailClient(api_key="")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make_user(role=Role.USER, name=None, email=None):
        name = name or f"{role.value.title()} {os.urandom(2).hex()}"
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        async with session_factory() as session:
            user = User(email=email, name=name, hashed_password=get_password_hash(PASSWORD), role=role)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make_user


def auth(user) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)['access_token']}"}


@pytest.fixture
async def admin(make_user):
    return await make_user(Role.ADMIN, name="Ada Admin")


@pytest.fixture
async def technician(make_user):
    return await make_user(Role.TECHNICIAN, name="Tom Tech")


@pytest.fixture
async def alice(make_user):
    return await make_user(Role.USER, name="Alice User")


@pytest.fixture
async def bob(make_user):
    return await make_user(Role.USER, name="Bob User")


@pytest.fixture
def create_report(client):
    async def _create_report(user, **overrides):
        payload = {
            "title": "Printer jam",
            "description": "The second floor printer jams on every page.",
            "type": "PRINTER_PROBLEMS",
        }
        payload.update(overrides)
        response = await client.post("/reports", json=payload, headers=auth(user))
        assert response.status_code == 201, response.text
        return response.json()["report"]

    return _create_report
