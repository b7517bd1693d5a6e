"""
Main FastAPI application for the SOW generator backend.
Handles CORS, request logging middleware, lifespan events, error mapping and
router registration.
"""
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import Database
from app.exceptions import SowServiceError
from app.routers import accounts, chat, export, health, sows, templates
from app.services.completion_client import MatchaCompletionClient

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting SOW generator backend …")
    logger.info("=" * 60)

    # 1 — Database (required; raises on failure)
    database = Database(settings.DATABASE_URL)
    try:
        await database.create_all()
        logger.info("✓ Database connection OK")
    except Exception as exc:
        logger.error("✗ Database connection failed: %s", exc)
        raise
    app.state.database = database

    # 2 — Completion API (optional; generation fails per request until configured)
    completion_client = MatchaCompletionClient()
    if completion_client.is_configured:
        logger.info(
            "✓ Matcha API: %s (mission %s, timeout %.0f s)",
            completion_client.base_url,
            completion_client.mission_id,
            completion_client.read_timeout,
        )
    else:
        logger.warning(
            "⚠ MATCHA_API_KEY is not set — SOW generation will fail until it is configured."
        )
    app.state.completion_client = completion_client

    # 3 — Upload directory
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    logger.info("✓ Upload directory: %s", os.path.abspath(settings.UPLOAD_DIR))

    logger.info("=" * 60)
    logger.info("  SOW generator ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down SOW generator backend …")
    await completion_client.aclose()
    await database.dispose()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="SOW Generator API",
    description=(
        "Generate Statements of Work for client accounts with the Matcha "
        "completion API, then download them as PDF, DOCX or plain text.\n\n"
        "Key endpoints:\n"
        "- `POST /api/accounts` — create a client account\n"
        "- `POST /api/templates` — upload a .pdf/.docx/.txt template\n"
        "- `POST /api/sows/generate` — generate and store a SOW\n"
        "- `GET  /api/export/{id}/{pdf|docx|txt}` — download a SOW\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(SowServiceError)
async def service_error_handler(request: Request, exc: SowServiceError):
    """Map the service error taxonomy to HTTP status codes."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,     prefix="/api/health",    tags=["Health"])
app.include_router(accounts.router,   prefix="/api/accounts",  tags=["Accounts"])
app.include_router(templates.router,  prefix="/api/templates", tags=["Templates"])
app.include_router(sows.router,       prefix="/api/sows",      tags=["SOWs"])
app.include_router(export.router,     prefix="/api/export",    tags=["Export"])
app.include_router(chat.router,       prefix="/chat",          tags=["Chat"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "SOW Generator API",
        "version": "1.0.0",
        "description": "Statement of Work generator backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "accounts": "/api/accounts",
            "templates": "/api/templates",
            "sows": "/api/sows",
            "generate": "/api/sows/generate",
            "export": "/api/export/{id}/{pdf|docx|txt}",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
