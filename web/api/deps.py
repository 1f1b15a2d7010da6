"""Request dependencies: store, rating service and ledger. Built once, on first use."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends

import config
from matchup.services.ledger import TournamentLedger
from matchup.services.rating import RatingService, create_rating_service
from matchup.services.storage import TournamentStore, create_store

_store: Optional[TournamentStore] = None
_rating_service: Optional[RatingService] = None
_rating_service_ready = False


def get_store() -> TournamentStore:
    global _store
    if _store is None:
        _store = create_store(config.STORAGE_BACKEND)
    return _store


def get_rating_service() -> Optional[RatingService]:
    global _rating_service, _rating_service_ready
    if not _rating_service_ready:
        _rating_service = create_rating_service(config.RATING_PROVIDER)
        _rating_service_ready = True
    return _rating_service


def get_ledger(
    store: TournamentStore = Depends(get_store),
    rating_service: Optional[RatingService] = Depends(get_rating_service),
) -> TournamentLedger:
    return TournamentLedger(store, rating_service)
