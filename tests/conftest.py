import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import patch

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Set test settings before importing app
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["SEED_DATA"] = "false"
os.environ["DEPLOY_PHASE"] = "local"


@pytest_asyncio.fixture(name="engine")
async def engine_fixture():
    """Create a fresh database engine for each test."""
    import cardloom.models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden session."""
    from cardloom.database import get_session
    from cardloom.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("cardloom.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------- #
# helpers
# ---------------------------------------------------------------------- #

def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client: AsyncClient, username: str, games=("pokemon",), password: str = "password123") -> dict:
    """회원가입 후 {user, token, refresh_token, headers} 반환"""
    response = await client.post("/api/auth/register", json={
        "username": username,
        "display_name": username.title(),
        "email": f"{username}@example.com",
        "password": password,
        "preferred_games": list(games),
    })
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    data["headers"] = auth_header(data["token"])
    return data


@pytest_asyncio.fixture
async def alice(client):
    return await register(client, "alice")


@pytest_asyncio.fixture
async def bob(client):
    return await register(client, "bob")


@pytest_asyncio.fixture
async def admin(client, session):
    from cardloom.models.user import User, UserRole
    from sqlmodel import select

    data = await register(client, "admin")
    result = await session.execute(select(User).where(User.user_id == data["user"]["user_id"]))
    user = result.scalars().first()
    user.role = UserRole.ADMIN
    await session.commit()

    # 권한이 바뀌었으므로 다시 로그인
    response = await client.post("/api/auth/login", json={"email": "admin@example.com", "password": "password123"})
    data = response.json()["data"]
    data["headers"] = auth_header(data["token"])
    return data


async def make_set(session: AsyncSession, game: str = "pokemon", code: str = "BS", release: date = date(1999, 1, 9)):
    from cardloom.models.card import CardSet

    card_set = CardSet(game=game, name=f"{code} set", code=code, release_date=release, total_cards=100)
    session.add(card_set)
    await session.commit()
    await session.refresh(card_set)
    return card_set


async def make_card(
    session: AsyncSession,
    card_set,
    name: str,
    number: str = "1",
    rarity: str = "common",
    price=None,
    card_type=None,
    rules_text=None,
    attributes=None,
    is_active: bool = True,
):
    from cardloom.models.card import Card

    card = Card(
        game=card_set.game,
        set_id=card_set.set_id,
        name=name,
        number=number,
        rarity=rarity,
        card_type=card_type,
        image_url=f"https://example.com/{number}.jpg",
        rules_text=rules_text,
        market_price=Decimal(str(price)) if price is not None else None,
        attributes=attributes or {},
        is_active=is_active,
    )
    session.add(card)
    await session.commit()
    await session.refresh(card)
    return card


@pytest_asyncio.fixture
async def pokemon_set(session):
    return await make_set(session, "pokemon", "BS")


@pytest_asyncio.fixture
async def mtg_set(session):
    return await make_set(session, "mtg", "AL", date(1993, 8, 5))


@pytest_asyncio.fixture
async def charizard(session, pokemon_set):
    return await make_card(session, pokemon_set, "Charizard", "4", "holo_rare", 45.99, "Pokémon")


@pytest_asyncio.fixture
async def pikachu(session, pokemon_set):
    return await make_card(session, pokemon_set, "Pikachu", "58", "common", 2.5, "Pokémon")


@pytest_asyncio.fixture
async def black_lotus(session, mtg_set):
    return await make_card(session, mtg_set, "Black Lotus", "1", "mythic_rare", 25000, "Artifact")
