import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.config import settings
from apps.api.exceptions import PulsecheckException, pulsecheck_exception_handler
from apps.api.routes import diagnostics, health, readiness, remediations, state
from apps.api.middleware import RequestIDMiddleware
from events.bus import create_event_bus
from apps.api.services.diagnostic_service import diagnostic_service

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages application startup and shutdown lifecycle."""

    BANNER = """
      \033[38;5;208m  ┌─┐┬ ┬┬  ┌─┐┌─┐\033[36m┌─┐┬ ┬┌─┐┌─┐┬┌─
      \033[38;5;208m  ├─┘│ ││  └─┐├┤ \033[36m│  ├─┤├┤ │  ├┴┐
      \033[38;5;208m  ┴  └─┘┴─┘└─┘└─┘\033[36m└─┘┴ ┴└─┘└─┘┴ ┴
      \033[0m\033[90m  Probe · Correlate · Plan · Recover
       ─────────────────────────────────────\033[0m
    """

    # --- Startup ---
    print(BANNER)
    logger.info("Pulsecheck API v%s starting up...", settings.app_version)

    # Initialize event bus
    if settings.event_bus_backend == "redis":
        event_bus = create_event_bus("redis", redis_url=settings.redis_url)
    else:
        event_bus = create_event_bus(settings.event_bus_backend, history=settings.event_history_size)
    diagnostic_service.set_event_bus(event_bus)
    logger.info("Event bus initialized (%s)", settings.event_bus_backend)

    # Report archive
    if settings.report_archive_dir:
        diagnostic_service.enable_archive(settings.report_archive_dir)

    logger.info("Diagnostic service targeting %s", settings.target_base_url)

    yield  # App runs and handles requests here

    # --- Shutdown ---
    logger.info("Pulsecheck API shutting down...")

    await diagnostic_service.close()
    await event_bus.close()

def create_app() -> FastAPI:
    """Application factory pattern.

    Tests build their own minimal app from the same routers instead.
    """

    application = FastAPI(
        title=settings.app_name,
        description="Health diagnostics, root cause analysis and recovery orchestration.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",   # Swagger UI endpoint
        redoc_url="/redoc", # Swagger UI alternative
    )

    # --- Middleware ---
    # Order matters: middleware is applied in REVERSE order (last added runs first)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestIDMiddleware)
    # --- Exception Handlers ---
    application.add_exception_handler(PulsecheckException, pulsecheck_exception_handler)

    # --- Routes ---
    application.include_router(health.router, tags=["health"])
    application.include_router(diagnostics.router)    # /diagnostics/run, /diagnostics/latest, reports
    application.include_router(remediations.router)   # /remediations/fix, /remediations/emergency-recovery
    application.include_router(readiness.router)      # /readiness/{surface}
    application.include_router(state.router)          # /state/{key}

    return application

# Create the app instance — this is what uvicorn runs
app = create_app()
