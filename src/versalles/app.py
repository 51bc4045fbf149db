"""FastAPI application factory for Versalles."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from versalles.common.config import get_settings
from versalles.common.exceptions import FormValidationError, VersallesError
from versalles.common.logging import get_logger, setup_logging
from versalles.common.schemas import (
    HealthResponse,
    StatusResponse,
    ViolationResponse,
    internal_error_response,
    success,
)
from versalles.common.security import current_user
from versalles.session.guard import RouteGuardMiddleware
from versalles.users.schemas import CurrentUser

logger = get_logger("app")


def _error_response(exc: VersallesError) -> JSONResponse:
    body = StatusResponse(status="error", message=exc.message or None)
    if isinstance(exc, FormValidationError):
        body.violations = [
            ViolationResponse(field=v.field, message=v.message) for v in exc.violations
        ]
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)

    from versalles.deps import get_db, get_identity_provider, get_route_table, get_session_codec

    # Misconfiguration must stop the process here, before any request.
    get_session_codec()
    get_route_table()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        db = get_db()
        await db.init()
        await db.create_all()
        logger.info("Versalles started", extra={"environment": settings.environment})
        yield
        # Shutdown
        await get_identity_provider().close()
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        RouteGuardMiddleware,
        codec_factory=get_session_codec,
        table_factory=get_route_table,
        refresh_after=settings.session_refresh_after,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(VersallesError)
    async def versalles_error_handler(request: Request, exc: VersallesError):
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "error_code": exc.code},
            )
        return _error_response(exc)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return internal_error_response()

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    @app.get("/", response_model=StatusResponse)
    async def home(user: Optional[CurrentUser] = Depends(current_user)):
        return success({"user": user.model_dump(mode="json") if user else None})

    # Mount routers
    from versalles.session.router import router as session_router
    from versalles.users.router import router as users_router
    from versalles.campaigns.router import router as campaigns_router
    from versalles.guilds.router import router as guilds_router
    from versalles.forums.router import router as forums_router
    from versalles.workshop.router import router as workshop_router

    app.include_router(session_router)
    app.include_router(users_router)
    app.include_router(campaigns_router)
    app.include_router(guilds_router)
    app.include_router(forums_router)
    app.include_router(workshop_router)

    return app
