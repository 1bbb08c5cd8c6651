from decimal import Decimal
import json
import re

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import Base, get_db
from main import app
from models.credit_package import CreditPackage
from models.player import Player
from services.storefront import BLANK_URL, build_return_url, resolve_launch_context


@pytest_asyncio.fixture
async def store_client(tmp_path):
    db_path = tmp_path / "storefront.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with session_maker() as session:
        session.add(
            Player(
                id="player-1",
                username="alice",
                email="alice@example.com",
                password_hash="not-a-real-hash",
                credits=Decimal("10.00"),
            )
        )
        session.add(CreditPackage(id="p5", name="Starter", price=Decimal("5.00"), credits=Decimal("5")))
        await session.commit()

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


def test_launch_context_prefers_player_id_aliases_in_order():
    context = resolve_launch_context({"userId": "u", "player": "p", "playerId": "pid"})
    assert context.player_id == "pid"
    assert resolve_launch_context({"userId": "u", "player": "p"}).player_id == "p"
    assert resolve_launch_context({"userId": "u"}).player_id == "u"
    assert resolve_launch_context({"playerId": "  "}).player_id is None


def test_launch_context_return_url_falls_back_to_referrer_then_blank():
    assert resolve_launch_context({"gameUrl": "https://a.test", "returnUrl": "https://b.test"}).game_url == "https://a.test"
    assert resolve_launch_context({"returnUrl": "https://b.test"}).game_url == "https://b.test"
    assert resolve_launch_context({}, referrer="https://game.test/play").game_url == "https://game.test/play"

    context = resolve_launch_context({})
    assert context.game_url == BLANK_URL
    assert context.has_game_url is False


def test_build_return_url_appends_update_flags():
    url = build_return_url("https://game.test/play?level=3&playerId=stale", "player-1")
    assert url == "https://game.test/play?level=3&creditsUpdated=true&playerId=player-1"
    assert build_return_url("https://game.test", None) == "https://game.test?creditsUpdated=true&playerId="


def test_build_return_url_without_known_game():
    assert build_return_url(None, "player-1") is None
    assert build_return_url(BLANK_URL, "player-1") is None
    assert build_return_url("/relative/path", "player-1") == "/relative/path"


@pytest.mark.asyncio
async def test_store_state_for_known_player(store_client):
    response = await store_client.get(
        "/api/storefront/state",
        params={"player": "player-1", "returnUrl": "https://game.test/lobby"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["state"] == "authenticated"
    assert payload["player"]["username"] == "alice"
    assert payload["player"]["credits"] == 10.0
    assert payload["packages"] == [{"id": "p5", "name": "Starter", "price": 5.0, "credits": 5.0}]
    assert payload["status"] == {"tone": "success", "message": "Welcome back, alice!"}
    assert payload["gameUrl"] == "https://game.test/lobby"
    assert payload["returnUrl"] == "https://game.test/lobby?creditsUpdated=true&playerId=player-1"
    assert payload["redirectDelaySeconds"] == 3


@pytest.mark.asyncio
async def test_store_state_for_unknown_player(store_client):
    response = await store_client.get("/api/storefront/state", params={"playerId": "ghost"})
    payload = response.json()
    assert payload["state"] == "authentication_required"
    assert payload["player"] is None
    assert payload["status"]["tone"] == "error"
    assert payload["gameUrl"] is None
    assert payload["returnUrl"] is None


@pytest.mark.asyncio
async def test_store_state_without_player_has_no_status(store_client):
    payload = (await store_client.get("/api/storefront/state")).json()
    assert payload["state"] == "authentication_required"
    assert payload["status"] is None
    assert len(payload["packages"]) == 1


@pytest.mark.asyncio
async def test_store_page_embeds_launch_context(store_client):
    response = await store_client.get(
        "/",
        params={"userId": "player-1"},
        headers={"referer": "https://game.test/arcade"},
    )
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Game Credits Store" in response.text

    match = re.search(r'<script id="store-bootstrap" type="application/json">(.*?)</script>', response.text, re.S)
    assert match is not None
    bootstrap = json.loads(match.group(1))
    assert bootstrap["playerId"] == "player-1"
    assert bootstrap["gameUrl"] == "https://game.test/arcade"
    assert bootstrap["apiPrefix"] == "/api"
    assert "redirectDelaySeconds" not in bootstrap


@pytest.mark.asyncio
async def test_store_page_assets_are_served(store_client):
    script = await store_client.get("/static/storefront.js")
    assert script.status_code == 200
    assert "process-payment" in script.text
    # Return URL and redirect delay come from the store state endpoint.
    assert "payload.returnUrl" in script.text
    assert "payload.redirectDelaySeconds" in script.text
    assert "new URL(" not in script.text


@pytest.mark.asyncio
async def test_unexpected_error_is_rendered_as_json(store_client, monkeypatch):
    from routers import storefront as storefront_router

    async def explode(context, db):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(storefront_router, "build_store_state", explode)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/storefront/state")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Something went wrong", "code": "internal_error"}
