"""Tournament stores: in-process mapping or SQL table, chosen once at startup."""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from matchup.models import Tournament, TournamentRecord

logger = logging.getLogger("rlmatchup.storage")


class TournamentStore(Protocol):
    """What the ledger needs from persistence."""

    async def get(self, tournament_id: str) -> Optional[Tournament]: ...

    async def put(self, tournament: Tournament) -> None: ...

    async def delete(self, tournament_id: str) -> None: ...

    async def list_all(self) -> list[Tournament]: ...

    async def find_by_code(self, code: str) -> Optional[Tournament]: ...


class MemoryTournamentStore:
    """Dict-backed store for tests and single-process deployments."""

    def __init__(self) -> None:
        self._tournaments: dict[str, Tournament] = {}

    async def get(self, tournament_id: str) -> Optional[Tournament]:
        return self._tournaments.get(tournament_id)

    async def put(self, tournament: Tournament) -> None:
        self._tournaments[tournament.id] = tournament

    async def delete(self, tournament_id: str) -> None:
        self._tournaments.pop(tournament_id, None)

    async def list_all(self) -> list[Tournament]:
        return list(self._tournaments.values())

    async def find_by_code(self, code: str) -> Optional[Tournament]:
        code = code.strip().upper()
        return next((t for t in self._tournaments.values() if t.code == code), None)


class SqlTournamentStore:
    """Stores each tournament snapshot as JSON in ``tournament_records``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, tournament_id: str) -> Optional[Tournament]:
        async with self._session_factory() as session:
            row = await session.get(TournamentRecord, tournament_id)
            return Tournament.model_validate_json(row.payload) if row else None

    async def put(self, tournament: Tournament) -> None:
        async with self._session_factory() as session:
            row = await session.get(TournamentRecord, tournament.id)
            if row is None:
                row = TournamentRecord(id=tournament.id)
                session.add(row)
            row.code = tournament.code
            row.status = tournament.status.value
            row.payload = tournament.model_dump_json()
            await session.commit()

    async def delete(self, tournament_id: str) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(TournamentRecord).where(TournamentRecord.id == tournament_id))
            await session.commit()

    async def list_all(self) -> list[Tournament]:
        async with self._session_factory() as session:
            result = await session.execute(select(TournamentRecord).order_by(TournamentRecord.id))
            return [Tournament.model_validate_json(row.payload) for row in result.scalars().all()]

    async def find_by_code(self, code: str) -> Optional[Tournament]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TournamentRecord).where(TournamentRecord.code == code.strip().upper()).limit(1)
            )
            row = result.scalar_one_or_none()
            return Tournament.model_validate_json(row.payload) if row else None


def create_store(backend: str) -> TournamentStore:
    """Build the store named by STORAGE_BACKEND ("memory" or "sql")."""
    if backend == "memory":
        logger.info("Using in-memory tournament store")
        return MemoryTournamentStore()
    if backend == "sql":
        from matchup.models.base import async_session_factory

        logger.info("Using SQL tournament store")
        return SqlTournamentStore(async_session_factory)
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")
