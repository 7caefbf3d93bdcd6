"""FastAPI application entry point for STT Eval"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stt_eval import __version__
from stt_eval.api import router as api_router
from stt_eval.core.config import settings
from stt_eval.core.logging import configure_logging, get_logger
from stt_eval.db import init_db

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager for startup/shutdown."""
    configure_logging()
    init_db()
    logger.info("database_initialized", database_path=str(settings.database_path))
    yield


app = FastAPI(
    title="STT Eval API",
    description="Speech-to-text provider evaluation for alphanumeric prompts",
    version=__version__,
    lifespan=lifespan,
)

# NOTE: allow_methods/allow_headers are permissive for development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

app.include_router(api_router)


@app.get("/api/v1/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        dict with status "ok" if the service is healthy.
    """
    return {"status": "ok"}


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "stt_eval.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
