from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import Base, get_db
from main import app
from models.credit_package import CreditPackage
from services.packages import DEFAULT_PACKAGES, list_active_packages, seed_default_packages


@pytest_asyncio.fixture
async def catalog(tmp_path):
    db_path = tmp_path / "packages.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client, session_maker

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.mark.asyncio
async def test_credit_packages_lists_active_by_price(catalog):
    client, session_maker = catalog
    async with session_maker() as session:
        session.add(CreditPackage(id="p20", name="Pro", price=Decimal("20.00"), credits=Decimal("20")))
        session.add(CreditPackage(id="p5", name="Starter", price=Decimal("5.00"), credits=Decimal("5")))
        session.add(
            CreditPackage(id="old", name="Old", price=Decimal("1.00"), credits=Decimal("1"), is_active=False)
        )
        await session.commit()

    response = await client.get("/api/credit-packages")
    assert response.status_code == 200
    assert response.json() == [
        {"id": "p5", "name": "Starter", "price": 5.0, "credits": 5.0},
        {"id": "p20", "name": "Pro", "price": 20.0, "credits": 20.0},
    ]


@pytest.mark.asyncio
async def test_credit_packages_empty_catalog(catalog):
    client, _ = catalog

    response = await client.get("/api/credit-packages")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_seed_default_packages_only_fills_empty_catalog(catalog):
    _, session_maker = catalog

    async with session_maker() as session:
        assert await seed_default_packages(session) == len(DEFAULT_PACKAGES)
    async with session_maker() as session:
        assert await seed_default_packages(session) == 0
        packages = await list_active_packages(session)

    assert [package.price for package in packages] == [price for _, price, _ in DEFAULT_PACKAGES]
    assert all(package.price == package.credits for package in packages)
