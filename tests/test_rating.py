"""Tests for tracker.gg rating verification."""
import random

import httpx
import pytest

from matchup.errors import RatingLookupFailed
from matchup.services.rating import (
    TrackerRatingService,
    create_rating_service,
    extract_playlist_rating,
)


def _profile(*playlists):
    return {
        "data": {
            "segments": [{"type": "overview", "metadata": {"name": "Lifetime"}, "stats": {}}]
            + [
                {"type": "playlist", "metadata": {"name": name}, "stats": {"rating": {"value": value}}}
                for name, value in playlists
            ]
        }
    }


def _service(handler, calls=None):
    def wrapped(request):
        if calls is not None:
            calls.append(request)
        return handler(request)

    return TrackerRatingService(
        "key-123",
        rng=random.Random(5),
        transport=httpx.MockTransport(wrapped),
    )


def test_extract_playlist_rating():
    payload = _profile(("Ranked Duel 1v1", 900), ("Ranked Duel 2v2", 1234))
    assert extract_playlist_rating(payload, "Ranked Duel 2v2") == 1234
    assert extract_playlist_rating(payload, "Ranked Standard 3v3") == 0
    assert extract_playlist_rating(_profile(("Ranked Duel 2v2", 4200)), "Ranked Duel 2v2") == 3000
    assert extract_playlist_rating({}, "Ranked Duel 2v2") == 0


@pytest.mark.asyncio
async def test_verify_found():
    calls = []
    service = _service(lambda r: httpx.Response(200, json=_profile(("Ranked Duel 2v2", 1450))), calls)
    result = await service.verify("Alpha123")
    assert result.exists
    assert result.rating == 1450
    assert calls[0].url.path.endswith("/profile/epic/Alpha123")
    assert calls[0].headers["TRN-Api-Key"] == "key-123"


@pytest.mark.asyncio
async def test_verify_caches_found_players():
    calls = []
    service = _service(lambda r: httpx.Response(200, json=_profile(("Ranked Duel 2v2", 1450))), calls)
    await service.verify("Alpha123")
    await service.verify("alpha123")
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_verify_not_found():
    service = _service(lambda r: httpx.Response(404, json={"errors": []}))
    result = await service.verify("ghost")
    assert not result.exists


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_verify_auth_denied_falls_back_to_demo_rating(status):
    service = _service(lambda r: httpx.Response(status))
    result = await service.verify("Alpha123")
    assert result.exists
    assert 500 <= result.rating <= 1499


@pytest.mark.asyncio
async def test_verify_server_error_raises():
    service = _service(lambda r: httpx.Response(500))
    with pytest.raises(RatingLookupFailed):
        await service.verify("Alpha123")


@pytest.mark.asyncio
async def test_verify_timeout_raises():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    service = _service(handler)
    with pytest.raises(RatingLookupFailed):
        await service.verify("Alpha123")


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"data": {"segments": None}}, {"data": None}])
async def test_verify_profile_without_segments_is_unranked(payload):
    service = _service(lambda r: httpx.Response(200, json=payload))
    result = await service.verify("Alpha123")
    assert result.exists
    assert result.rating == 0


def _duel_rating(value):
    return {
        "data": {
            "segments": [
                {"type": "playlist", "metadata": {"name": "Ranked Duel 2v2"}, "stats": {"rating": {"value": value}}}
            ]
        }
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"data": {"segments": ["not-a-segment"]}},
        _duel_rating("n/a"),
        _duel_rating([1]),
        ["unexpected"],
    ],
)
async def test_verify_unreadable_profile_raises(payload):
    service = _service(lambda r: httpx.Response(200, json=payload))
    with pytest.raises(RatingLookupFailed):
        await service.verify("Alpha123")


def test_create_rating_service():
    assert create_rating_service("none") is None
    assert isinstance(create_rating_service("tracker"), TrackerRatingService)
    with pytest.raises(ValueError):
        create_rating_service("elo")
