"""
BlogForge - Main FastAPI Application.

REST API that starts the provisioning, analysis, generation and
publishing workflows and reports on their jobs.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import asyncio
import logging
import time

from api import dependencies
from api.routes import articles, events, health, jobs, onboarding, schedules, sites
from orchestration.worker import CronTimer


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="BlogForge - Blog Automation API",
    description="""
    Hosted blog automation driven by background workflows.

    Features:
    - Site provisioning on a WordPress multisite VPS
    - Product analysis and content planning
    - Article generation with the Claude batch API
    - Publishing to WordPress
    - Scheduled runs
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()
    logger.info(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"← {request.method} {request.url.path} "
        f"[{response.status_code}] ({duration:.3f}s)"
    )
    return response


# =============================================================================
# GLOBAL EXCEPTION HANDLER
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "path": request.url.path
        }
    )


# =============================================================================
# STARTUP/SHUTDOWN EVENTS
# =============================================================================

_background: dict = {}


@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("🚀 BlogForge API starting up...")
    settings = dependencies.get_settings()

    if settings.orchestration.record_store == "database":
        from core.infrastructure.database.config import init_database

        await init_database(settings.database)

    if settings.orchestration.transport == "memory":
        # Workflows run in this process
        try:
            dependencies.get_orchestrator()
        except ValueError as e:
            logger.warning(f"Workflows are disabled: {e}")
            return

        stop = asyncio.Event()
        timer = CronTimer(dependencies.get_event_bus(), settings.orchestration.cron_interval_seconds)
        _background["stop"] = stop
        _background["timer"] = asyncio.create_task(timer.run(stop))

    logger.info("📚 Swagger UI available at: /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    stop = _background.pop("stop", None)
    timer = _background.pop("timer", None)
    if stop is not None:
        stop.set()
    if timer is not None:
        timer.cancel()

    if dependencies.get_settings().orchestration.record_store == "database":
        from core.infrastructure.database.config import close_database

        await close_database()
    logger.info("👋 BlogForge API shutting down...")


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(health.router, tags=["Health"])
app.include_router(sites.router, prefix="/api/v1/sites", tags=["Sites"])
app.include_router(onboarding.router, prefix="/api/v1/onboarding", tags=["Onboarding"])
app.include_router(events.router, prefix="/api/v1/events", tags=["Events"])
app.include_router(jobs.router, prefix="/api/v1/jobs", tags=["Jobs"])
app.include_router(articles.router, prefix="/api/v1/articles", tags=["Articles"])
app.include_router(schedules.router, prefix="/api/v1/schedules", tags=["Schedules"])


# =============================================================================
# ROOT ENDPOINT
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API root endpoint."""
    return {
        "message": "BlogForge - Blog Automation API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
