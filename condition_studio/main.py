import hmac
import logging
import re
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from condition_studio.api.routes.blocks import router as blocks_router
from condition_studio.api.routes.catalog import router as catalog_router
from condition_studio.api.routes.conditions import router as conditions_router
from condition_studio.api.routes.health import router as health_router
from condition_studio.core.config import AppEnvironment, settings
from condition_studio.core.errors import (
    ConditionStudioError,
    get_status_code,
)
from condition_studio.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    extract_request_context,
    metrics_endpoint,
)

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _sanitize_error_details(details: dict[str, Any]) -> dict[str, Any]:
    """
    Sanitize error details to prevent information leakage in production.

    Removes file paths and Python object reprs that validation errors may
    carry. Block ids, slot ids and chain ids are kept: the client needs them
    to point at the offending block.

    Args:
        details: Original error details dictionary

    Returns:
        Sanitized details dictionary
    """
    if settings.app_env != AppEnvironment.PROD:
        # In non-production, return all details for debugging
        return details

    sanitized = {}
    sensitive_patterns = [
        r"[/\\][\w/-]+\.py",  # File paths
        r"<[\w.]+ object at 0x[0-9a-f]+>",  # Object reprs
        r"Traceback \(most recent call last\)",
    ]

    for key, value in details.items():
        if isinstance(value, str):
            for pattern in sensitive_patterns:
                if re.search(pattern, value, re.IGNORECASE):
                    sanitized[key] = "[REDACTED]"
                    break
            else:
                sanitized[key] = value
        elif isinstance(value, dict):
            sanitized[key] = _sanitize_error_details(value)
        elif isinstance(value, list):
            sanitized[key] = [
                _sanitize_error_details(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up:
    - Structured logging with correlation IDs
    - Observability middleware (metrics, request tracking)
    - CORS middleware
    - Exception handlers for domain errors
    - API routers
    - Metrics endpoint for Prometheus scraping
    """
    app = FastAPI(
        title="Condition Studio API",
        description="Block tree editing and access-condition compilation",
        version="0.1.0",
    )

    # ============================================================================
    # Observability Middleware (must be first for correlation tracking)
    # ============================================================================

    if settings.observability_enabled:
        app.add_middleware(
            ObservabilityMiddleware,
            request_id_header=settings.observability_request_id_header,
        )

    # ============================================================================
    # CORS Configuration
    # ============================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # ============================================================================
    # Exception Handlers
    # ============================================================================

    @app.exception_handler(ConditionStudioError)
    async def condition_studio_error_handler(
        request: Request, exc: ConditionStudioError
    ) -> JSONResponse:
        """
        Handle domain errors from the editor and the compiler.

        Maps domain exceptions to appropriate HTTP status codes and
        returns structured error responses.

        Args:
            request: The incoming request
            exc: The domain exception raised

        Returns:
            JSON response with error details
        """
        status_code = get_status_code(exc)

        context = {
            "details": exc.details,
            "path": request.url.path,
            **extract_request_context(request),
        }

        if status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}", extra=context)
        else:
            logger.warning(f"{exc.__class__.__name__}: {exc.message}", extra=context)

        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.__class__.__name__,
                "message": exc.message,
                "details": _sanitize_error_details(exc.details),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """
        Handle FastAPI HTTP exceptions.

        Provides consistent error response format for all HTTP exceptions.
        """
        if exc.status_code >= 500:
            logger.error(
                f"HTTP {exc.status_code}: {exc.detail}",
                extra={"method": request.method, **extract_request_context(request)},
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTPException",
                "message": exc.detail,
                "details": {},
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Catch-all handler for unexpected exceptions.

        Logs the full exception and returns a generic 500 error to the client
        without exposing internal implementation details.
        """
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=True,
            extra=extract_request_context(request),
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "InternalServerError",
                "message": "An unexpected error occurred",
                "details": {},
            },
        )

    # ============================================================================
    # Router Registration
    # ============================================================================

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(catalog_router, prefix=API_PREFIX)
    app.include_router(blocks_router, prefix=API_PREFIX)
    app.include_router(conditions_router, prefix=API_PREFIX)

    # ============================================================================
    # Metrics Endpoint (Prometheus) - Token Protected
    # ============================================================================

    async def protected_metrics(request: Request) -> Response:
        """
        Protected Prometheus metrics endpoint.

        Always requires the X-Metrics-Token header to match METRICS_TOKEN.
        """
        expected_token = settings.metrics_token
        if not expected_token:
            logger.error(
                "Metrics endpoint accessed but METRICS_TOKEN not configured",
                extra={"security_event": True, "event_type": "METRICS_NOT_CONFIGURED"},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Metrics token not configured. Set METRICS_TOKEN environment variable.",
            )

        # Constant-time comparison
        metrics_token = request.headers.get("X-Metrics-Token")
        if not hmac.compare_digest(metrics_token or "", expected_token):
            logger.warning(
                "Unauthorized metrics access attempt",
                extra={
                    "security_event": True,
                    "event_type": "METRICS_ACCESS_DENIED",
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid metrics token",
            )

        return metrics_endpoint()

    if settings.observability_enabled:
        app.add_route("/metrics", protected_metrics)

    return app


app = create_app()
