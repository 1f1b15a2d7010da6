"""Pytest configuration and fixtures."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["RATING_PROVIDER"] = "none"

import random
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from matchup.models import PlayerRegistration
from matchup.services.ledger import TournamentLedger
from matchup.services.storage import MemoryTournamentStore
from web.api.deps import get_rating_service, get_store
from web.api.main import app

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_player(epic_id: str, mmr: int, team: int | None = None) -> PlayerRegistration:
    return PlayerRegistration(
        display_name=epic_id.title(),
        epic_id=epic_id,
        mmr=mmr,
        timestamp=T0,
        pre_assigned_team=team,
    )


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return MemoryTournamentStore()


@pytest.fixture
def ledger(store):
    """Ledger over a fresh memory store with a seeded random source."""
    return TournamentLedger(store, rng=random.Random(1234), clock=lambda: T0)


@pytest.fixture
async def client(store):
    """Async HTTP client for testing the API, backed by a fresh memory store."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_rating_service] = lambda: None
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def creator_headers():
    return {"X-Creator-Id": "creator-1"}
