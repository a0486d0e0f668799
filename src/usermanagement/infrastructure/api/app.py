"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with the request pipeline, routes,
and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from usermanagement.core.config import Settings, get_settings
from usermanagement.core.configuration import build_configuration_store
from usermanagement.core.logging import configure_logging, get_logger
from usermanagement.infrastructure.api.middleware import (
    AuditLoggingStage,
    AuthenticationStage,
    ExceptionContainmentStage,
    RequestPipeline,
    allow_anonymous,
    mark_anonymous_paths,
)
from usermanagement.infrastructure.api.schemas.problem_details import ProblemDetails
from usermanagement.infrastructure.auth import (
    TokenTrustSettings,
    TokenVerifier,
    resolve_token_trust_settings,
)
from usermanagement.infrastructure.persistence.database import (
    close_database,
    configure_database,
    init_database,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings: Settings = app.state.settings

    configure_logging(settings)

    logger.info(
        "Starting User Management API",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        secret_origin=app.state.token_settings.secret_origin.value,
    )

    try:
        await init_database(configure_database(settings))
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down User Management API")
    await close_database()
    logger.info("Database connection closed")


def create_app(
    settings: Settings | None = None,
    token_settings: TokenTrustSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. Defaults to the cached settings.
        token_settings: Token trust settings. Resolved from the environment
            and layered configuration when not given.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()
    if token_settings is None:
        token_settings = resolve_token_trust_settings(
            build_configuration_store(settings),
            environment=settings.environment,
        )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="User management API with bearer token authentication",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.token_settings = token_settings

    register_health_check(app)
    register_routes(app, settings)
    register_exception_handlers(app)
    register_middleware(app, settings, token_settings)

    mark_anonymous_paths(
        app,
        [app.docs_url, app.redoc_url, app.openapi_url, app.swagger_ui_oauth2_redirect_url],
    )

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    @allow_anonymous
    async def health_check():
        """Basic health check endpoint.

        Returns 200 if the service is running. Does not check
        database connectivity.
        """
        return {
            "status": "healthy",
            "service": app.state.settings.app_name,
            "version": app.state.settings.app_version,
        }


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """
    from usermanagement.infrastructure.api.routes import users_router

    app.include_router(users_router, prefix=f"{settings.api_prefix}/users", tags=["users"])


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers.

    Unhandled exceptions are not handled here; the exception containment
    stage of the request pipeline owns them.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Return field-level validation errors as a 400 problem response."""
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ())]
            if loc and loc[0] in ("body", "query", "path", "header"):
                loc = loc[1:]
            field = ".".join(loc) or "request"
            errors.setdefault(field, []).append(error.get("msg", "Invalid value"))

        problem = ProblemDetails(
            title="One or more validation errors occurred.",
            status=400,
            instance=request.url.path,
            errors=errors,
        )
        return problem.to_response()


def register_middleware(
    app: FastAPI,
    settings: Settings,
    token_settings: TokenTrustSettings,
) -> None:
    """Register middleware.

    The request pipeline is added last so it wraps everything else,
    including CORS.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
        token_settings: Token trust settings for the verifier.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    verifier = TokenVerifier(
        token_settings,
        clock_skew=timedelta(seconds=settings.token_clock_skew_seconds),
    )
    app.add_middleware(
        RequestPipeline,
        stages=[
            ExceptionContainmentStage(settings),
            AuditLoggingStage(settings.audit_excluded_headers),
            AuthenticationStage(verifier),
        ],
    )


# Create the application instance
app = create_app()
