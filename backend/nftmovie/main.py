"""nftmovie — FastAPI application entry point.

Mounts the API routes, configures CORS and error bodies, and owns the
lifecycle of the remote clients.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nftmovie import __version__
from nftmovie.api.router import api_router
from nftmovie.clients import close_clients, open_clients
from nftmovie.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: build remote clients on startup, close on shutdown."""
    logger.info("%s starting up...", settings.APP_NAME)
    logger.info("USE_MOCK_API: %s", settings.USE_MOCK_API)
    logger.info(
        "Polling: interval=%ss timeout=%ss concurrency=%d",
        settings.POLL_INTERVAL, settings.POLL_TIMEOUT, settings.MAX_CONCURRENT_JOBS,
    )
    open_clients(app, settings)

    yield

    await close_clients(app)
    logger.info("%s shut down", settings.APP_NAME)


app = FastAPI(
    title="nftmovie API",
    description="Fetch wallet NFTs and turn their images into videos with RunwayML",
    version=__version__,
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are 400 with an ``error`` message, not FastAPI's default 422."""
    errors = exc.errors()
    missing = [str(e["loc"][-1]) for e in errors if e.get("type") == "missing" and e.get("loc")]
    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    elif errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
        message = f"Invalid field {field}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request body"
    logger.error("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(api_router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": settings.APP_NAME,
        "status": "running",
        "mock_mode": settings.USE_MOCK_API,
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "version": __version__,
        "mock_mode": settings.USE_MOCK_API,
        "runway_configured": bool(settings.RUNWAYML_API_SECRET),
        "helius_configured": bool(settings.HELIUS_API_KEY),
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "nftmovie.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    run()
