"""Privo Club Server - FastAPI Application Entry Point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from privo.api.error_handlers import register_error_handlers
from privo.config import settings
from privo.database import init_db

logger = logging.getLogger("privo")


def configure_logging() -> None:
    """Root logger to stderr, plus an optional log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file_path:
        handlers.append(logging.FileHandler(settings.log_file_path))
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and database on startup."""
    configure_logging()
    init_db()
    logger.info("%s started (environment=%s)", settings.server_name, settings.environment)
    yield


app = FastAPI(
    title="Privo Club",
    description="Private circles, event invites and time-locked memory vaults",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - start) * 1000,
    )
    return response


register_error_handlers(app)

# --- Register API routers ---
from privo.api.auth import router as auth_router  # noqa: E402
from privo.api.circles import router as circles_router  # noqa: E402
from privo.api.invites import router as invites_router  # noqa: E402
from privo.api.feed import router as feed_router  # noqa: E402
from privo.api.media import router as media_router  # noqa: E402
from privo.api.users import router as users_router  # noqa: E402

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(circles_router, prefix=API_PREFIX)
app.include_router(invites_router, prefix=API_PREFIX)
app.include_router(feed_router, prefix=API_PREFIX)
app.include_router(media_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)


@app.get("/")
def root():
    """Server info."""
    return {
        "name": settings.server_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve with uvicorn."""
    import uvicorn

    uvicorn.run("privo.main:app", host=settings.host, port=settings.port)
