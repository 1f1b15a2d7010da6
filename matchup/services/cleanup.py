"""Periodic sweep of stale tournaments."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

import config
from matchup.models import Tournament, TournamentStatus
from matchup.models.tournament import utcnow
from matchup.services.storage import TournamentStore

logger = logging.getLogger("rlmatchup.cleanup")


def is_expired(
    t: Tournament,
    now: datetime,
    generated_ttl: timedelta = timedelta(minutes=config.GENERATED_TTL_MINUTES),
    open_ttl: timedelta = timedelta(minutes=config.OPEN_TTL_MINUTES),
) -> bool:
    """Deleted tournaments go at once; generated ones after generated_ttl; the rest after open_ttl."""
    if t.status == TournamentStatus.deleted:
        return True
    if t.teams_generated_at:
        return now - t.teams_generated_at > generated_ttl
    return now - t.created_at > open_ttl


async def sweep_expired(store: TournamentStore, now: Optional[datetime] = None) -> list[str]:
    """Delete expired tournaments and return their ids.

    A record may change between the scan and the delete; the sweep does not lock
    and deleting an id that is already gone is harmless.
    """
    now = now or utcnow()
    deleted = []
    for t in await store.list_all():
        if is_expired(t, now):
            await store.delete(t.id)
            deleted.append(t.id)
    if deleted:
        logger.info("Cleanup removed %d tournament(s)", len(deleted))
    return deleted


async def run_cleanup_loop(store: TournamentStore, interval: float = config.CLEANUP_INTERVAL_SECONDS) -> None:
    """Sweep forever every ``interval`` seconds. Runs as a background task; cancel to stop."""
    while True:
        await asyncio.sleep(interval)
        try:
            await sweep_expired(store)
        except Exception:
            logger.exception("Cleanup sweep failed")
