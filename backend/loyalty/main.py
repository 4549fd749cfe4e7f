"""Mall Loyalty API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LoyaltyError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from loyalty.api.error_handlers import register_error_handlers
from loyalty.api.routes import auth, coupons, health, stores, transactions, users
from loyalty.config import get_settings
from loyalty.infrastructure import database
from loyalty.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Mall loyalty API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Mall loyalty API shutting down")


app = FastAPI(
    title="Mall Loyalty API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(transactions.router)
app.include_router(coupons.router)
app.include_router(stores.router)
app.include_router(users.router)

register_error_handlers(app)
