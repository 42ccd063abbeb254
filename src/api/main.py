"""FastAPI application initialization and configuration module.

This module serves as the main entry point for the API application.
It handles:
- Application lifecycle management (startup/shutdown)
- The startup configuration report, run once startup has completed
- Health check and info endpoints
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI
from loguru import logger

from src.core.config import Settings, get_settings
from src.core.config_report import StartupConfigReporter
from src.core.environment import build_environment
from src.core.logging import setup_logging


def should_report_configuration(settings: Settings) -> bool:
    """Decide whether the startup configuration report runs.

    The report is skipped when disabled, or when the environment name or any
    active profile is listed in ``report_config.suppressed_profiles``.

    Args:
        settings: Application settings.

    Returns:
        bool: True if the report should be logged.
    """
    report_config = settings.report_config
    if not report_config.enabled:
        return False
    suppressed = set(report_config.suppressed_profiles)
    if settings.environment in suppressed:
        return False
    return not suppressed.intersection(settings.active_profiles)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance. The report follows the
            settings it was created with, falling back to the cached settings.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    settings: Settings = (
        getattr(app_instance.state, "settings", None) or get_settings()
    )

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    if should_report_configuration(settings):
        StartupConfigReporter().report(build_environment(settings))
    else:
        logger.debug("Configuration report suppressed for this environment")

    yield

    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        lifespan=lifespan,
    )
    application.state.settings = settings

    @application.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for monitoring and container orchestration.

        Returns:
            dict[str, str]: A dictionary with the service status.
        """
        return {"status": "healthy"}

    @application.get("/info")
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
    ) -> dict[str, Any]:
        """Get application information.

        Args:
            app_settings: Application settings injected via dependency.

        Returns:
            dict[str, Any]: Application information including name, version,
                environment and active profiles.
        """
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "active_profiles": app_settings.active_profiles,
        }

    return application


app = create_app()
