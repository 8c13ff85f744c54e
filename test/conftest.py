import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Set test environment before importing the app
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["APP_ENV"] = "test"
os.environ["TECH_EVENT_LOG_ENABLED"] = "false"

from scopeguard.core.context import RequestContext  # noqa: E402

TENANT = "tenant-a"
OPERATOR = "operator-1"


@pytest_asyncio.fixture
async def engine():
    """A fresh in-memory database with every table created."""
    from scopeguard.db.base import Base
    import scopeguard.domain  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(tenant_id=TENANT, operator_id=OPERATOR, request_id="req-1")


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, each request in its own committed session."""
    from scopeguard.db.base import get_db
    from scopeguard.main import app

    async def get_db_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = get_db_override
    app.state.session_factory = session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Tenant-ID": TENANT, "X-User-ID": OPERATOR},
    ) as client:
        yield client

    app.dependency_overrides.clear()
    app.state.session_factory = None


@pytest_asyncio.fixture
async def org(session, context):
    """Tenant tree: JP > TOKYO > talent AIKO, root KR, and talent SOLO under the tenant."""
    from types import SimpleNamespace

    from scopeguard.schemas.organization import SubsidiaryCreate, TalentCreate
    from scopeguard.services.organization import OrganizationService

    svc = OrganizationService(session, context)
    jp = await svc.create_subsidiary(SubsidiaryCreate(code="JP", name_en="Japan"))
    tokyo = await svc.create_subsidiary(
        SubsidiaryCreate(code="TOKYO", name_en="Tokyo", parent_id=jp.id)
    )
    kr = await svc.create_subsidiary(SubsidiaryCreate(code="KR", name_en="Korea"))
    aiko = await svc.create_talent(
        TalentCreate(code="AIKO", name_en="Aiko", subsidiary_id=tokyo.id)
    )
    solo = await svc.create_talent(TalentCreate(code="SOLO", name_en="Solo"))
    await session.commit()
    return SimpleNamespace(jp=jp, tokyo=tokyo, kr=kr, aiko=aiko, solo=solo)
