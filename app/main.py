"""
Application entry point for the project status API.

The lifespan builds every component once (database pool, repositories,
email client, pipeline stages, services) and stores them on app.state;
routes pick them up through dependency functions.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.db.pool import DatabasePoolManager
from app.features.status_notifications.api.router import router as status_router
from app.features.status_notifications.domain.models import CompanyInfo
from app.features.status_notifications.pipeline import StatusDataAggregator, StatusProcessor
from app.features.status_notifications.repository import (
    ProfileRepository,
    ProjectActivityRepository,
    ProjectRepository,
    StatusCatalogRepository,
)
from app.features.status_notifications.services import (
    NotificationDispatcher,
    ProjectActivityLogger,
    ResendEmailClient,
    StatusCatalogService,
    StatusUpdateService,
)
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.middleware import CORSMiddleware, RequestContextMiddleware
from app.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.environment != "development")
logger = get_logger(__name__)


def company_from_settings() -> CompanyInfo:
    return CompanyInfo(
        name=settings.COMPANY_NAME,
        address=settings.COMPANY_ADDRESS,
        phone=settings.COMPANY_PHONE,
        logo_url=settings.COMPANY_LOGO_URL,
        primary_color=settings.PRIMARY_COLOR,
    )


def build_components(app: FastAPI, db: DatabasePoolManager) -> ResendEmailClient:
    """Wire repositories, pipeline stages and services onto app.state."""
    company = company_from_settings()

    projects = ProjectRepository(db)
    profiles = ProfileRepository(db)
    statuses = StatusCatalogRepository(db)
    activity_logger = ProjectActivityLogger(ProjectActivityRepository(db))

    email_client = ResendEmailClient(
        api_key=settings.EMAIL_API_KEY,
        from_email=settings.FROM_EMAIL,
        from_name=settings.FROM_NAME,
        company=company,
        api_url=settings.EMAIL_API_URL,
        timeout=settings.EMAIL_REQUEST_TIMEOUT,
        max_retries=settings.EMAIL_MAX_RETRIES,
        backoff_base=settings.EMAIL_BACKOFF_BASE,
    )
    dispatcher = NotificationDispatcher(
        email_client,
        activity_logger=activity_logger,
        max_concurrency=settings.NOTIFY_MAX_CONCURRENCY,
    )
    aggregator = StatusDataAggregator(
        projects, profiles, statuses, company=company, base_url=settings.base_url()
    )

    app.state.db = db
    app.state.profile_repository = profiles
    app.state.status_update_service = StatusUpdateService(
        aggregator=aggregator,
        processor=StatusProcessor(default_button_text=settings.DEFAULT_BUTTON_TEXT),
        dispatcher=dispatcher,
        projects=projects,
        activity_logger=activity_logger,
    )
    app.state.status_catalog_service = StatusCatalogService(statuses)
    return email_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    db = DatabasePoolManager()
    try:
        await db.initialize()
    except Exception as e:
        logger.error("Failed to initialize database pool", error=str(e))
        await db.close()
        raise

    email_client = build_components(app, db)
    if not email_client.configured:
        logger.warning("Email delivery not configured - notifications will fail")
    logger.info("All services initialized successfully")

    yield

    logger.info("Application shutting down")
    shutdown_errors = []

    try:
        await email_client.close()
    except Exception as e:
        logger.error("Error closing email client", error=str(e))
        shutdown_errors.append(f"Email: {e}")

    try:
        await db.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
        shutdown_errors.append(f"Database: {e}")

    if shutdown_errors:
        logger.warning("Some services had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="Project Status API",
    description="Project status changes with role-based email notifications",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(status_router)

app.add_middleware(CORSMiddleware, allowed_origins=settings.CORS_ALLOWED_ORIGINS)
app.add_middleware(RequestContextMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
