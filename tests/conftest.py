from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from espetinho.database import build_engine, get_db, init_db
from espetinho.main import app
from espetinho.schemas import ProductCreate
from espetinho.services import ProductManager


@pytest.fixture
async def engine():
    # One shared connection so every session sees the same in-memory database
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def beef_skewer(session):
    """A product in category 1 priced at 12.50."""
    created = await ProductManager(session).create(
        ProductCreate(name="Beef Skewer", unit_price=Decimal("12.50"), category_id=1, available=True)
    )
    return created
