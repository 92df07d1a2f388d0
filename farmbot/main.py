"""FastAPI application entrypoint. The lifespan runs the polling bot."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from farmbot.auth.session import SessionManager
from farmbot.config import get_settings
from farmbot.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from farmbot.routes import status
from farmbot.services.api_client import FarmApiClient
from farmbot.services.bot import FarmBot
from farmbot.services.context import BotSession

logger = logging.getLogger("farmbot")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Bot startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Resolve a game session (login or manual PHPSESSID)
      3. Start the polling loop

    Shutdown:
      1. Ask the loop to stop and wait for the in-flight cycle to finish
      2. Close the HTTP client
    """
    configure_structured_logging()
    settings = get_settings()
    logger.info(
        "Farm bot starting",
        extra={
            "check_interval_ms": settings.check_interval_ms,
            "silo_sell_threshold": settings.silo_sell_threshold,
            "debug": settings.debug,
        },
    )

    try:
        session_manager = SessionManager(settings)
        session_id = await session_manager.acquire()
    except Exception as exc:
        logger.exception("startup failure", extra={"error": str(exc)})
        raise

    api = FarmApiClient(session_id)
    bot = FarmBot(api, BotSession.from_settings(settings), settings, session_manager)
    stop_event = asyncio.Event()
    app.state.bot = bot
    app.state.stop_event = stop_event

    runner: asyncio.Task[None] | None = None
    if settings.auto_start:
        runner = asyncio.create_task(bot.run(stop_event), name="farmbot-loop")

    yield

    logger.info("Farm bot shutting down")
    stop_event.set()
    try:
        if runner is not None:
            await runner
    finally:
        await api.aclose()


app = FastAPI(
    title="Farm Manager Bot",
    description=(
        "Automation agent for the farming game API. Harvests mature plots, "
        "clears and plows land, plants the best-scoring affordable crop, "
        "and sells silo stock above a fill threshold."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health check ────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Basic health check: the bot process is alive."""
    return {
        "status": "ok",
        "service": "farmbot",
        "version": "1.0.0",
    }


# ── Router registration ────────────────────────────────────────────────────
app.include_router(status.router, prefix="/api/v1")
