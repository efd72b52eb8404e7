"""FastAPI application entrypoint.

Serve with ``uvicorn --factory logifacade.main:create_app``; settings are read
when the factory runs.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import timedelta
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from logifacade import __version__
from logifacade.adapters.auth import BcryptPasswordHasher, JwtTokenService
from logifacade.adapters.backends import BackendConnector, HttpBackendConnector
from logifacade.core.config import Settings, get_settings
from logifacade.core.logging import configure_logging
from logifacade.errors import ApiError, InternalError
from logifacade.repositories.memory import InMemoryPrincipalDirectory, InMemoryShipmentStore
from logifacade.repositories.seed import seed_principals, seed_shipments
from logifacade.routes import auth_router, shipments_router, systems_router
from logifacade.schemas.error import ErrorResponse, ValidationErrorDetails, ValidationErrorResponse
from logifacade.schemas.shipment import ShipmentSystem
from logifacade.services.aggregator import FallbackAggregator

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_HTTP_ERROR_CODES = {
    404: ("RESOURCE_NOT_FOUND", "Resource not found"),
    405: ("METHOD_NOT_ALLOWED", "Method not allowed"),
}


def build_connectors(settings: Settings) -> list[BackendConnector]:
    """One HTTP connector per configured system, in precedence order."""
    urls = settings.backend_urls()
    return [
        HttpBackendConnector(
            ShipmentSystem(name),
            base_url=urls[name],
            timeout_seconds=settings.backend_timeout_seconds,
        )
        for name in settings.backend_order.split(",")
    ]


def _validation_fields(exc: RequestValidationError) -> dict[str, str]:
    fields: dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        name = ".".join(location) or "request"
        fields.setdefault(name, str(error.get("msg", "invalid value")))
    return fields


def create_app(
    settings: Settings | None = None,
    *,
    connectors: Sequence[BackendConnector] | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    aggregator = FallbackAggregator(connectors if connectors is not None else build_connectors(settings))

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("app.started backends=%s", ",".join(system.value for system in aggregator.order))
        yield
        await aggregator.aclose()

    app = FastAPI(title="LogiFacade API", version=__version__, lifespan=lifespan)

    password_hasher = BcryptPasswordHasher(rounds=settings.password_hash_rounds)
    store = InMemoryShipmentStore()
    principals = InMemoryPrincipalDirectory()
    if settings.seed_sample_shipments:
        seed_shipments(store)
    if settings.seed_principals:
        seed_principals(principals, password_hasher)

    app.state.settings = settings
    app.state.store = store
    app.state.principals = principals
    app.state.password_hasher = password_hasher
    app.state.aggregator = aggregator
    app.state.token_service = JwtTokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
    )

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        code, message = _HTTP_ERROR_CODES.get(exc.status_code, ("HTTP_ERROR", str(exc.detail)))
        payload = ErrorResponse(code=code, message=message)
        return JSONResponse(
            status_code=exc.status_code,
            content=payload.model_dump(mode="json", exclude_none=True),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        payload = ValidationErrorResponse(
            message="Invalid request parameters",
            details=ValidationErrorDetails(fields=_validation_fields(exc)),
        )
        return JSONResponse(status_code=400, content=payload.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request.failed method=%s path=%s", request.method, request.url.path, exc_info=exc)
        error = InternalError()
        return JSONResponse(
            status_code=error.status_code,
            content=error.payload.model_dump(mode="json", exclude_none=True),
        )

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(shipments_router, prefix=API_PREFIX)
    app.include_router(systems_router, prefix=API_PREFIX)

    return app

