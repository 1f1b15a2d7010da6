"""Rocket League API rating service with caching."""
from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import TYPE_CHECKING, Optional

import rlapi
from rlapi import Platform, PlaylistKey

from matchup.errors import RatingLookupFailed
from matchup.services.rating import AUTH_DENIED, CACHE_TTL, RatingResult, clamp_mmr, demo_rating

if TYPE_CHECKING:
    from rlapi import Player

logger = logging.getLogger("rlmatchup.rating")

# Playlist name to PlaylistKey mapping
PLAYLIST_MAP = {
    "solo_duel": PlaylistKey.solo_duel,
    "doubles": PlaylistKey.doubles,
    "standard": PlaylistKey.standard,
    "hoops": PlaylistKey.hoops,
    "rumble": PlaylistKey.rumble,
    "dropshot": PlaylistKey.dropshot,
    "snow_day": PlaylistKey.snow_day,
    "tournaments": PlaylistKey.tournaments,
}


class RLAPIRatingService:
    """Looks up Epic players through the official RL API (``rlapi``)."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        playlist: str = "doubles",
        timeout: float = 10.0,
        rng: Optional[random.Random] = None,
        client: Optional[rlapi.Client] = None,
    ):
        self._client = client or rlapi.Client(client_id=client_id, client_secret=client_secret)
        self._playlist_key = PLAYLIST_MAP.get(playlist.lower(), PlaylistKey.doubles)
        self._timeout = timeout
        self._rng = rng or random.Random()
        self._cache: dict[str, tuple[Player, float]] = {}

    @property
    def playlist_key(self) -> PlaylistKey:
        return self._playlist_key

    async def close(self) -> None:
        """Close the API client."""
        await self._client.close()

    async def _get_player(self, epic_username: str) -> Player:
        key = f"epic:name:{epic_username.lower()}"
        now = time.time()
        if key in self._cache:
            player, ts = self._cache[key]
            if now - ts < CACHE_TTL:
                return player
            del self._cache[key]
        player = await asyncio.wait_for(
            self._client.get_player_by_name(Platform.epic, epic_username),
            timeout=self._timeout,
        )
        self._cache[key] = (player, now)
        return player

    async def verify(self, epic_id: str) -> RatingResult:
        try:
            player = await self._get_player(epic_id.strip())
        except rlapi.errors.PlayerNotFound:
            return RatingResult(exists=False)
        except asyncio.TimeoutError as e:
            logger.error("RL API lookup for %s timed out", epic_id)
            raise RatingLookupFailed("Rating service timed out") from e
        except rlapi.errors.HTTPException as e:
            if e.status in AUTH_DENIED:
                logger.warning("RL API refused credentials (HTTP %s) - using demo rating", e.status)
                return demo_rating(self._rng)
            logger.error("RL API lookup for %s failed: %s", epic_id, e)
            raise RatingLookupFailed(f"Rating service returned HTTP {e.status}") from e
        except rlapi.errors.RLApiException as e:
            logger.error("RL API lookup for %s failed: %s", epic_id, e)
            raise RatingLookupFailed(f"Rating service error: {e}") from e
        playlist = player.get_playlist(self._playlist_key)
        return RatingResult(exists=True, rating=clamp_mmr(playlist.skill) if playlist else 0)
