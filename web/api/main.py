"""FastAPI tournament API - serves registration/team endpoints and the static web UI."""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

import config
from matchup.errors import LedgerError
from matchup.models import init_db
from matchup.services.cleanup import run_cleanup_loop
from matchup.services.storage import SqlTournamentStore

from web.api.deps import get_rating_service, get_store
from web.api.routes import router as api_router

logger = logging.getLogger("rlmatchup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    if isinstance(store, SqlTournamentStore):
        await init_db()
    rating_service = get_rating_service()
    cleanup_task = asyncio.create_task(run_cleanup_loop(store, config.CLEANUP_INTERVAL_SECONDS))
    logger.info("Cleanup running every %ss", config.CLEANUP_INTERVAL_SECONDS)
    yield
    cleanup_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task
    if rating_service:
        await rating_service.close()


app = FastAPI(title="RLMatchup API", lifespan=lifespan)

_public_dir = Path(__file__).resolve().parent.parent.parent / "public"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors like any other: 400, not 422."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.get("/api/health")
async def health():
    return {"status": "ok"}


# Serve the static web UI when present
if _public_dir.exists():
    app.mount("/", StaticFiles(directory=str(_public_dir), html=True), name="public")
