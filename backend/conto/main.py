"""Conto Gateway API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Workers subscribed explicitly in the lifespan, before the first request
    - Global error handlers map ContoError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Shutdown drains in-flight bus handlers before closing the bank client
      and the database engine

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Bus, bank client and session manager live on app.state, not in module
      globals: tests build their own and assign them
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conto.api.error_handlers import register_error_handlers
from conto.api.middleware import REQUEST_ID_HEADER, request_id_middleware
from conto.api.routes import accounts, health
from conto.config import get_settings
from conto.infrastructure.bank_api_client import BankApiClient
from conto.infrastructure.database import DatabaseSessionManager
from conto.infrastructure.dispatch_bus import DispatchBus
from conto.infrastructure.observability import setup_logging
from conto.services.worker_registry import register_workers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    db_manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    bank_client = BankApiClient(
        settings.bank_api_key,
        settings.bank_auth_schema,
        timeout_seconds=settings.bank_timeout_seconds,
    )
    bus = DispatchBus(default_timeout=settings.dispatch_timeout_seconds)
    register_workers(bus, bank_client, db_manager)

    app.state.db_manager = db_manager
    app.state.bank_client = bank_client
    app.state.bus = bus
    logger.info("Conto gateway started")
    try:
        yield
    finally:
        logger.info("Conto gateway shutting down")
        await bus.drain()
        await bank_client.aclose()
        await db_manager.dispose()


app = FastAPI(
    title="Conto Gateway API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)
app.middleware("http")(request_id_middleware)

app.include_router(health.router)
app.include_router(accounts.router)

register_error_handlers(app)
