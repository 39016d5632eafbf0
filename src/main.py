"""
Nexus ISP Manager - Ticket Service
===================================

Support ticket service for the ISP operations dashboard.

Modules:
- Tickets: lifecycle, SLA due dates, escalation, comments, category
  catalog and dashboard aggregates

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database and configuration files
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from src.config import get_settings
from src.core import ApplicationException
from src.infrastructure.database import (
    init_database, close_database, create_tables, get_session_context
)
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from src.shared.infrastructure.logging import setup_logging, get_logger
from src.tickets.application import CategoryService
from src.tickets.infrastructure import (
    SQLAlchemyCategoryRepository, YAMLCategoryConfigProvider
)
from src.tickets.interfaces import tickets_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables
    3. Seed the category catalog when it is empty

    SHUTDOWN:
    1. Close database connections
    """
    settings = get_settings()
    app.state.settings = settings

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Ticket Service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    init_database(settings)
    app.state.database_ready = False

    # Note: if the database is not reachable the server still starts, but
    # database-dependent endpoints will fail
    try:
        await create_tables()
        app.state.database_ready = True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    if app.state.database_ready and settings.seed_default_categories:
        catalog_config = YAMLCategoryConfigProvider(settings.category_config_path).load()
        async with get_session_context() as session:
            await CategoryService(SQLAlchemyCategoryRepository(session)).seed_defaults(catalog_config)

    logger.info("Ticket Service started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Ticket Service")
    await close_database()
    logger.info("Ticket Service shutdown complete")


app = FastAPI(
    title="Nexus ISP Manager - Ticket API",
    description="""
    ## Support ticket lifecycle for ISP operations

    - `POST /tickets` - create a ticket; the due date comes from the category SLA
    - `PATCH /tickets/{id}` - edit status, priority, category, assignment
    - `POST /tickets/{id}/escalate` - escalate with a reason and optional reassignment
    - `GET|POST /tickets/{id}/comments` - ticket comment log
    - `GET|POST|PATCH|DELETE /categories` - category catalog and SLA hours
    - `GET /dashboard` - status counts, overdue and escalated totals

    Deleting tickets requires the `delete_records` permission and editing the
    catalog requires `manage_settings`; send the caller's role in `X-Staff-Role`.
    """,
    version=get_settings().app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(tickets_router)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint for load balancers and orchestrators."""
    settings = request.app.state.settings
    database_ready = getattr(request.app.state, "database_ready", False)
    return {
        "status": "healthy" if database_ready else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {
            "database": "connected" if database_ready else "unavailable",
        }
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    settings = get_settings()
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
