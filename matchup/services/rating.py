"""Player rating verification (tracker.gg) with caching and demo fallback."""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

import config
from matchup.errors import RatingLookupFailed

logger = logging.getLogger("rlmatchup.rating")

TRACKER_PROFILE_URL = "https://api.tracker.gg/api/v2/rocket-league/standard/profile/epic/{epic_id}"
USER_AGENT = "RLMatchup/1.0"
CACHE_TTL = 300  # 5 minutes
AUTH_DENIED = (401, 403)


@dataclass(frozen=True)
class RatingResult:
    exists: bool
    rating: int = 0


class RatingService(Protocol):
    async def verify(self, epic_id: str) -> RatingResult: ...

    async def close(self) -> None: ...


def clamp_mmr(value: float) -> int:
    return max(config.MIN_MMR, min(config.MAX_MMR, int(value)))


def demo_rating(rng: random.Random) -> RatingResult:
    """Stand-in rating used when the service refuses our credentials."""
    low, high = config.DEMO_MMR_RANGE
    return RatingResult(exists=True, rating=rng.randint(low, high))


def extract_playlist_rating(payload: dict, playlist_name: str) -> int:
    """Pull the rating for ``playlist_name`` out of a tracker.gg profile. 0 if unranked."""
    segments = (payload.get("data") or {}).get("segments") or []
    for segment in segments:
        if segment.get("type") != "playlist":
            continue
        if (segment.get("metadata") or {}).get("name") != playlist_name:
            continue
        value = ((segment.get("stats") or {}).get("rating") or {}).get("value")
        return clamp_mmr(float(value or 0))
    return 0


class TrackerRatingService:
    """tracker.gg profile lookup. One short-lived httpx client per lookup, bounded by timeout."""

    def __init__(
        self,
        api_key: str,
        playlist: str = "Ranked Duel 2v2",
        timeout: float = 10.0,
        rng: Optional[random.Random] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._playlist = playlist
        self._timeout = timeout
        self._rng = rng or random.Random()
        self._transport = transport
        self._cache: dict[str, tuple[RatingResult, float]] = {}

    async def close(self) -> None:
        """Nothing to release: clients are opened per lookup."""

    def _cached(self, key: str) -> Optional[RatingResult]:
        if key not in self._cache:
            return None
        result, ts = self._cache[key]
        if time.time() - ts < CACHE_TTL:
            return result
        del self._cache[key]
        return None

    async def verify(self, epic_id: str) -> RatingResult:
        key = epic_id.strip().lower()
        cached = self._cached(key)
        if cached:
            return cached

        url = TRACKER_PROFILE_URL.format(epic_id=epic_id.strip())
        headers = {
            "TRN-Api-Key": self._api_key,
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Rating lookup for %s failed: %s", epic_id, e)
            raise RatingLookupFailed(f"Rating service unavailable: {e}") from e

        if response.status_code in AUTH_DENIED:
            logger.warning("Rating service refused API key (HTTP %s) - using demo rating", response.status_code)
            return demo_rating(self._rng)
        if response.status_code == 404:
            return RatingResult(exists=False)
        if response.status_code >= 400:
            logger.error("Rating lookup for %s returned HTTP %s", epic_id, response.status_code)
            raise RatingLookupFailed(f"Rating service returned HTTP {response.status_code}")

        try:
            rating = extract_playlist_rating(response.json(), self._playlist)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error("Rating lookup for %s returned an unreadable profile: %s", epic_id, e)
            raise RatingLookupFailed("Rating service returned an unreadable profile") from e
        result = RatingResult(exists=True, rating=rating)
        self._cache[key] = (result, time.time())
        return result


def create_rating_service(provider: str) -> Optional[RatingService]:
    """Build the service named by RATING_PROVIDER. "none" disables verification."""
    if provider == "none":
        return None
    if provider == "tracker":
        if not config.TRACKER_API_KEY:
            logger.warning("TRACKER_API_KEY not set - every lookup will fall back to demo ratings")
        return TrackerRatingService(
            config.TRACKER_API_KEY,
            playlist=config.TRACKER_PLAYLIST,
            timeout=config.RATING_TIMEOUT_SECONDS,
        )
    if provider == "rlapi":
        from matchup.services.rl_api import RLAPIRatingService

        if not config.RLAPI_CLIENT_ID or not config.RLAPI_CLIENT_SECRET:
            logger.warning("RLAPI credentials not set - rating lookups will fail")
        return RLAPIRatingService(
            config.RLAPI_CLIENT_ID,
            config.RLAPI_CLIENT_SECRET,
            playlist=config.RLAPI_PLAYLIST,
            timeout=config.RATING_TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unknown RATING_PROVIDER: {provider!r}")
