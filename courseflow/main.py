from __future__ import annotations

import logging

from fastapi import FastAPI

from courseflow.api.auth import router as auth_router
from courseflow.api.content import router as content_router
from courseflow.api.courses import router as courses_router
from courseflow.api.enrollments import router as enrollments_router
from courseflow.api.errors import install_error_handlers
from courseflow.api.health import router as health_router
from courseflow.api.metrics_endpoint import router as metrics_router
from courseflow.api.proposals import router as proposals_router
from courseflow.core.clock import Clock
from courseflow.core.config import SETTINGS, Settings
from courseflow.core.logging import setup_logging
from courseflow.middleware.metrics import MetricsMiddleware
from courseflow.middleware.request_context import (
    RequestContextMiddleware,
    install_request_id_filter,
)
from courseflow.services.platform import Stores, build_platform, stores_from_url

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    stores: Stores | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Build a fully wired application.

    The platform (stores, services, AuthN) hangs off ``app.state.platform``;
    nothing is shared between two apps built by separate calls.
    """
    settings = settings or SETTINGS

    setup_logging(settings.log_level, json_format=settings.log_json)
    install_request_id_filter()

    platform = build_platform(
        stores or stores_from_url(settings.database_url, echo=settings.database_echo),
        clock=clock,
        token_ttl_min=settings.access_token_ttl_min,
    )
    if settings.seed_admin_email and settings.seed_admin_password:
        admin = platform.auth.seed_admin(
            settings.seed_admin_email, settings.seed_admin_password
        )
        logger.info("Seed admin ready  user_id=%s", admin.id)

    app = FastAPI(
        title="courseflow",
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    app.state.platform = platform
    app.state.settings = settings

    install_error_handlers(app)

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext (outermost) -> Metrics -> route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(proposals_router)
    app.include_router(courses_router)
    app.include_router(enrollments_router)
    app.include_router(content_router)

    logger.info(
        "courseflow started  env=%s log_level=%s port=%d backend=%s docs=%s",
        settings.app_env,
        settings.log_level,
        settings.port,
        platform.stores.backend,
        "on" if settings.is_dev else "off",
    )
    return app


app = create_app()
