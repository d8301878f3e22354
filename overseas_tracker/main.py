"""
FastAPI application setup.

The lifespan owns the database engine, the clock, the mail sender and the
background scheduler; routes reach them through ``app.state``.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from contextlib import asynccontextmanager
from typing import Optional

from overseas_tracker.config.settings import Settings, get_settings
from overseas_tracker.core.clock import Clock
from overseas_tracker.core.db import Database
from overseas_tracker.core.error_handlers import setup_error_handlers
from overseas_tracker.core.logging import configure_logging
from overseas_tracker.middleware import RequestContextMiddleware
from overseas_tracker.services.account_service import AccountService
from overseas_tracker.services.mail_sender import MailSender
from overseas_tracker.services.scheduler import build_scheduler
from overseas_tracker.services.status_transition_job import StatusTransitionJob

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to use; defaults to the environment-loaded settings
        database: Pre-built database (tests pass an in-memory one)
        clock: Clock defining "today"; defaults to the configured timezone

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level.value, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.timezone})")

        app.state.database = database or Database.from_settings(settings.database)
        app.state.clock = clock or Clock(settings.get_zoneinfo())
        app.state.mail_sender = MailSender(settings.mail)
        app.state.transition_job = StatusTransitionJob(app.state.clock)
        app.state.scheduler = None

        try:
            await app.state.database.create_all()
            async with app.state.database.session() as db:
                await AccountService(db).ensure_default_admin(
                    settings.security.default_admin_username,
                    settings.security.default_admin_password,
                )

            if settings.scheduler.enabled:
                scheduler = build_scheduler(
                    settings,
                    app.state.database,
                    app.state.clock,
                    app.state.mail_sender,
                    app.state.transition_job,
                )
                scheduler.start()
                app.state.scheduler = scheduler
                logger.info("Background scheduler started")

            logger.info("Application startup complete")
        except Exception as e:
            logger.error(f"Application startup failed: {e}", exc_info=True)
            await app.state.database.dispose()
            raise

        yield

        logger.info("Shutting down application")
        if app.state.scheduler is not None:
            app.state.scheduler.shutdown(wait=False)
            logger.info("Background scheduler stopped")
        await app.state.database.dispose()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        **settings.get_cors_config()
    )
    app.add_middleware(RequestContextMiddleware)

    setup_error_handlers(app)

    from overseas_tracker.api import (
        admin_router,
        auth_router,
        company_router,
        health_router,
        jobs_router,
        trips_router,
    )
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(trips_router)
    app.include_router(company_router)
    app.include_router(admin_router)
    app.include_router(jobs_router)

    return app


# Create application instance
app = create_app()
