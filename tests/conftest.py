import os
import tempfile
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rpg_engine.database import get_db
from rpg_engine.main import app
from rpg_engine.models import Base, Character, Game
from rpg_engine.schemas.event import GameEvent
from rpg_engine.services.notification_service import EventBus

D20_RULES = {
    "name": "d20",
    "check_mechanics": {"base_dice": "1d20", "critical_success": 20, "critical_failure": 1},
}


@pytest.fixture
async def db_engine():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    test_db_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(test_db_url, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
async def db_session(db_engine) -> AsyncSession:
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client() -> AsyncClient:
    """HTTP client that does NOT override the DB (for endpoints that don't need DB)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_client(db_session: AsyncSession) -> AsyncClient:
    """HTTP client with DB dependency overridden to use the test SQLite DB."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Domain helpers
# ---------------------------------------------------------------------------

class RecordingSubscriber:
    """Collects every event delivered to it."""

    def __init__(self) -> None:
        self.events: list[GameEvent] = []

    def deliver(self, event: GameEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [e.type for e in self.events]


class ScriptedRandom:
    """Stands in for random.Random; randint and random return scripted values in order."""

    def __init__(self, rolls: list[int], draws: list[float] | None = None) -> None:
        self._rolls = list(rolls)
        self._draws = list(draws or [])

    def randint(self, a: int, b: int) -> int:
        return self._rolls.pop(0)

    def random(self) -> float:
        return self._draws.pop(0)


async def create_game(
    db: AsyncSession, name: str = "Test Game", rules: dict[str, Any] | None = None
) -> Game:
    game = Game(name=name, rules=rules)
    db.add(game)
    await db.commit()
    return game


async def create_character(
    db: AsyncSession,
    game: Game,
    name: str,
    attributes: dict[str, int] | None = None,
    skills: dict[str, int] | None = None,
) -> Character:
    character = Character(
        game_id=game.id,
        name=name,
        attributes=attributes or {},
        skills=skills or {},
        status={},
    )
    db.add(character)
    await db.commit()
    return character


@pytest.fixture
async def game(db_session: AsyncSession) -> Game:
    return await create_game(db_session, rules=D20_RULES)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus: EventBus, game: Game) -> RecordingSubscriber:
    subscriber = RecordingSubscriber()
    bus.subscribe(game.id, subscriber)
    return subscriber
