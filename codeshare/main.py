"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager — logging, table creation, verification-code store
  2. Middleware — CORS, request log with per-request deadline
  3. Exception handlers — maps domain errors to HTTP responses
  4. Router registration — mounts all API endpoint groups

Running locally:
    uvicorn codeshare.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codeshare.config import settings
from codeshare.database import Base, engine, ensure_sqlite_directory
from codeshare.exceptions import register_exception_handlers
from codeshare.logging import setup_logging
from codeshare.middleware import RequestLogMiddleware
from codeshare.routers import accounts, auth, resources, users
from codeshare.verification import LoggingMailer, VerificationCodeStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Configures logging, creates missing tables, and builds the one
      verification-code store and mailer the process uses.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    setup_logging(settings)
    ensure_sqlite_directory(settings.DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.state.verification_store = VerificationCodeStore(settings.VERIFY_CODE_TTL_SECONDS)
    app.state.mailer = LoggingMailer()
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Code-sharing platform API: wallets, resources, and interaction counters",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(RequestLogMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)

# CORS: lock this down to the real frontend origin(s) in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(accounts.router, prefix="/account", tags=["Account"])
app.include_router(resources.router, prefix="/resources", tags=["Resources"])
app.include_router(users.router, prefix="/users", tags=["Users"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness check for load balancers and orchestrators."""
    return {"status": "ok", "version": settings.APP_VERSION}
