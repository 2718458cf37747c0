from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from fixer.auth.jwt import create_access_token
from fixer.config import settings
from fixer.database import get_db
from fixer.dependencies import get_reasoner
from fixer.main import create_app
from fixer.models.base import Base
from fixer.projects.models import Project
from support import FakeReasoner, add_project

TEST_DATABASE_URL = settings.TEST_DATABASE_URL

# NullPool: each test may run on its own event loop
engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
test_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db():
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def reasoner() -> FakeReasoner:
    return FakeReasoner()


@pytest_asyncio.fixture
async def client(reasoner: FakeReasoner):
    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reasoner] = lambda: reasoner
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def db():
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def project(db: AsyncSession) -> Project:
    return await add_project(db, created_at=datetime.now(timezone.utc) - timedelta(days=1))


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token('user_1')}"}
