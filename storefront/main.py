from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from storefront.api.deps import get_connection_manager, get_token_service
from storefront.api.routers import auth, health
from storefront.api.transport import ACCESS_HEADER_NAME, REFRESH_HEADER_NAME
from storefront.infrastructure.db.engine import create_schema, get_engine
from storefront.shared.config import get_settings
from storefront.shared.logging import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)

    # Raises SigningError on missing secrets; the app must not start without them.
    token_service = get_token_service()
    if token_service.insecure:
        logger.warning("main: insecure_signing_keys app_env=%s", settings.app_env)

    if get_connection_manager().connect():
        try:
            create_schema(get_engine(settings.database_url, settings.db_timeout_seconds))
        except SQLAlchemyError as exc:
            logger.warning("main: create_schema_failed error=%s", type(exc).__name__)
    else:
        logger.error("main: starting_degraded store_available=false")

    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Storefront Auth API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", ACCESS_HEADER_NAME, REFRESH_HEADER_NAME],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        response = await call_next(request)
        identity = getattr(request.state, "identity", None)
        logger.info(
            "request_completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "identity_id": identity.id if identity is not None else None,
            },
        )
        return response

    app.include_router(health.router)
    app.include_router(auth.router)
    return app


app = create_app()
