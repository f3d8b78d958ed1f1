"""Slotkeeper FastAPI application entry point.

Start with:
    uvicorn slotkeeper.api.main:app --reload --host 0.0.0.0 --port 8000

On startup: configure logging, create the database and tables, wire the
webhook publisher and start the lifecycle sweeper. On shutdown the sweeper is
stopped, in-flight webhooks are drained and the engine is disposed.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from slotkeeper.api.errors import register_error_handlers
from slotkeeper.api.routers import appointments, availability
from slotkeeper.config import load_postgres_config, load_sweeper_config, load_webhook_config
from slotkeeper.core.logger import configure
from slotkeeper.infra.database.engine import (
    appointment_repository_scope,
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from slotkeeper.services.appointment_webhook_service import WebhookEventPublisher
from slotkeeper.services.lifecycle_sweeper import LifecycleSweeper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    pg_config = load_postgres_config()
    await ensure_database_exists(pg_config)
    engine = build_engine(pg_config)
    session_factory = build_session_factory(engine)
    await init_db(pg_config)
    app.state.session_factory = session_factory

    publisher = WebhookEventPublisher(load_webhook_config())
    app.state.event_publisher = publisher
    logger.info("API: webhook delivery %s", "enabled" if publisher.enabled else "disabled")

    sweeper = LifecycleSweeper(
        appointment_repository_scope(session_factory),
        publisher,
        config=load_sweeper_config(),
    )
    sweeper.start()
    app.state.sweeper = sweeper

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await sweeper.stop()
    await publisher.drain()
    await close_engine()
    logger.info("API: engine disposed")


app = FastAPI(
    title="Slotkeeper Scheduling API",
    version="1.0.0",
    description="Appointment booking, availability and lifecycle management.",
    lifespan=lifespan,
)

app.state.limiter = appointments.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(appointments.router, prefix="/api/v1")
app.include_router(availability.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
