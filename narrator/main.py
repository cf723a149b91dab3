"""FastAPI application for Article Narrator."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from narrator.articles_api import router as articles_router
from narrator.config import settings
from narrator.db.connection import async_session_factory, close_db, init_db
from narrator.db.repositories.settings import SettingsRepository
from narrator.episodes_api import router as episodes_router
from narrator.exceptions import NarratorError
from narrator.feed_api import router as feed_router
from narrator.settings_api import router as settings_router
from narrator.tts import http as tts_http

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Article Narrator",
    description="Turns articles into a narrated podcast feed",
    version="1.0.0"
)

# Register API routers
app.include_router(articles_router)
app.include_router(episodes_router)
app.include_router(settings_router)
app.include_router(feed_router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app, endpoint="/metrics")


@app.exception_handler(NarratorError)
async def narrator_error_handler(request: Request, exc: NarratorError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unknown routes (404) and wrong methods (405) raised by the router
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "details": None},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": str(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc) or type(exc).__name__},
    )


@app.on_event("startup")
async def startup_event():
    """Create tables and the settings row."""
    try:
        await init_db()
        async with async_session_factory() as session:
            await SettingsRepository(session).get_or_create_default()
            await session.commit()
        logger.info("Database connection initialized")
    except Exception as e:
        logger.warning(f"Database initialization failed: {e}")

    if not settings.ENCRYPTION_KEY:
        logger.warning("ENCRYPTION_KEY is not set - API keys cannot be stored or used")
    if not settings.r2_configured:
        logger.warning("R2 storage is not configured - episodes cannot be published")

    logger.info("Article Narrator started")
    logger.info(f"Language: {settings.TTS_LANGUAGE_CODE}")


@app.on_event("shutdown")
async def shutdown_event():
    """Close HTTP clients and database on shutdown."""
    await tts_http.close_client()
    logger.info("TTS client closed")

    await close_db()
    logger.info("Database connection closed")


@app.get("/health")
async def health_check():
    """Liveness and configuration status."""
    return {
        "status": "healthy",
        "encryption_configured": bool(settings.ENCRYPTION_KEY),
        "storage_configured": settings.r2_configured,
    }
