"""Configuration for RLMatchup."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Storage: "memory" (single process) or "sql" (DATABASE_URL)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory").strip().lower()
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'rlmatchup.db'}",
)

# Rating verification: "none", "tracker" (tracker.gg) or "rlapi" (Rocket League API)
RATING_PROVIDER = os.getenv("RATING_PROVIDER", "none").strip().lower()
RATING_TIMEOUT_SECONDS = float(os.getenv("RATING_TIMEOUT_SECONDS", "10"))

# tracker.gg
TRACKER_API_KEY = os.getenv("TRACKER_API_KEY", "")
TRACKER_PLAYLIST = os.getenv("TRACKER_PLAYLIST", "Ranked Duel 2v2")

# Rocket League API
RLAPI_CLIENT_ID = os.getenv("RLAPI_CLIENT_ID", "")
RLAPI_CLIENT_SECRET = os.getenv("RLAPI_CLIENT_SECRET", "")
RLAPI_PLAYLIST = os.getenv("RLAPI_PLAYLIST", "doubles")

# Ratings
MIN_MMR = 0
MAX_MMR = 3000
DEMO_MMR_RANGE = (500, 1499)  # inclusive, used when the rating service refuses our key

# Tournaments
MAX_ACTIVE_TOURNAMENTS_PER_CREATOR = int(os.getenv("MAX_ACTIVE_TOURNAMENTS_PER_CREATOR", "2"))

# Cleanup of stale tournaments
CLEANUP_INTERVAL_SECONDS = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "300"))
GENERATED_TTL_MINUTES = int(os.getenv("GENERATED_TTL_MINUTES", "15"))
OPEN_TTL_MINUTES = int(os.getenv("OPEN_TTL_MINUTES", "30"))

# Web server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
