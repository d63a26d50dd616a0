import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from inventory_api.config import Settings, get_settings
from inventory_api.core.errors import register_exception_handlers
from inventory_api.core.logging import setup_logging
from inventory_api.core.middleware import RateLimitMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from inventory_api.core.rate_limit import build_rate_limiters
from inventory_api.core.security import PasswordHasher, TokenService
from inventory_api.database import Database
from inventory_api.routers import auth_router, health_router, products_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database: Database = app.state.database
    try:
        database.create_all()
        database.ping()
    except SQLAlchemyError:
        logger.critical("Database connection failed for %s; aborting startup.", database.engine.url)
        raise
    logger.info("%s started (environment=%s)", settings.APP_NAME, settings.ENVIRONMENT)
    try:
        yield
    finally:
        database.dispose()
        logger.info("%s stopped", settings.APP_NAME)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.database = Database(settings.DATABASE_URL)
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.token_service = TokenService.from_settings(settings)
    app.state.rate_limiters = build_rate_limiters(settings) if settings.RATE_LIMIT_ENABLED else []

    if app.state.rate_limiters:
        app.add_middleware(RateLimitMiddleware, rules=app.state.rate_limiters)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, expose_details=not settings.is_production)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(products_router, prefix=API_PREFIX)
    return app


app = create_app()


__all__ = ["app", "create_app"]
