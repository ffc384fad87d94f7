"""
Eco-Sim Perps - Sustainable Trading Simulator
A leveraged-trading game where synthetic LONG/SHORT positions grow (or
erode) a living biome, scored by how sustainably the portfolio is run.
"""
import asyncio
import contextlib
import logging
import json
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import get_settings
from routers import game_router
from routers.game import limiter
from services.game_session import get_game_session

settings = get_settings()


# ── Structured JSON Logging ─────────────────────────────────────────
class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""
    def format(self, record):
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log)


def setup_logging():
    """Configure structured logging for all app loggers."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level.upper())
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = logging.getLogger("ecosim")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the market ticker on startup, stop it on shutdown."""
    setup_logging()
    logger.info("Starting Eco-Sim Perps API")
    session = get_game_session()
    ticker = None
    if settings.ticker_enabled:
        ticker = asyncio.create_task(session.run_ticker(settings.tick_interval_seconds))
    yield
    if ticker is not None:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
    logger.info("Shutting down Eco-Sim Perps API")


# ── OpenAPI metadata ────────────────────────────────────────────────
OPENAPI_TAGS = [
    {"name": "game", "description": "Simulation snapshot, open/close positions, live SSE stream"},
    {"name": "ops", "description": "Health checks and operational endpoints"},
]

app = FastAPI(
    title="Eco-Sim Perps API",
    description=(
        "# Eco-Sim Perps — Sustainable Trading Simulator\n\n"
        "A simulated perpetuals game driven by a procedural price feed:\n\n"
        "- Open LONG/SHORT positions with 1-5x leverage\n"
        "- Positions are marked to market every tick and liquidated at -80%\n"
        "- A sustainability score reacts to leverage and exposure\n"
        "- Quests reward ECO tokens for healthy trading habits"
    ),
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
    license_info={"name": "MIT"},
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiter state (required by slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include routers
app.include_router(game_router)


# ── Request logging middleware ───────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with method, path, and response time."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    if not request.url.path.startswith("/health"):
        logger.info(
            "%s %s %d %.0fms",
            request.method, request.url.path, response.status_code, duration_ms,
        )
    return response


@app.get("/", tags=["ops"])
async def root():
    """Root endpoint with API discovery links."""
    return {
        "name": "Eco-Sim Perps API",
        "version": "1.0.0",
        "description": "Leveraged trading simulator with a sustainability-scored biome",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", tags=["ops"])
async def health_check():
    """Health check for readiness probes. Reports ticker config and simulation progress."""
    state = get_game_session().state
    checks = {
        "api": "ok",
        "ticker": "enabled" if settings.ticker_enabled else "disabled",
        "tick_interval_seconds": settings.tick_interval_seconds,
        "ticks": state.tick,
    }
    return {"status": "healthy", "service": "ecosim-api", "version": "1.0.0", "checks": checks}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
