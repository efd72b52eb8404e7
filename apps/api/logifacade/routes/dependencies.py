"""Dependency wiring for routes."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from logifacade.core.logging import safe_log_identifier
from logifacade.domain.access import Operation, ensure_authorized, is_authorized
from logifacade.errors import AuthenticationError
from logifacade.schemas.auth import AuthPrincipal
from logifacade.services.aggregator import FallbackAggregator
from logifacade.services.auth import AuthService
from logifacade.services.shipments import ShipmentService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


async def get_request_deadline(request: Request) -> float:
    """Absolute event-loop time after which backend calls are abandoned."""
    timeout = request.app.state.settings.request_timeout_seconds
    return asyncio.get_running_loop().time() + timeout


def get_aggregator(request: Request) -> FallbackAggregator:
    return request.app.state.aggregator


def get_auth_service(request: Request) -> AuthService:
    state = request.app.state
    return AuthService(state.principals, state.password_hasher, state.token_service)


def get_shipment_service(
    request: Request,
    aggregator: Annotated[FallbackAggregator, Depends(get_aggregator)],
) -> ShipmentService:
    return ShipmentService(request.app.state.store, aggregator)


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthPrincipal:
    """Validate bearer token and attach normalized principal to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise AuthenticationError()

    try:
        principal = auth_service.authenticate(credentials.credentials)
    except AuthenticationError:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise

    request.state.auth_principal = principal
    return principal


def require_operation(operation: Operation) -> Callable[..., Awaitable[AuthPrincipal]]:
    """Build a dependency that authenticates and checks the operation's role table."""

    async def _authorize(
        request: Request,
        principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    ) -> AuthPrincipal:
        safe_principal_id = safe_log_identifier(principal.user_id, prefix="pid")
        safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
        if not is_authorized(principal.roles, operation):
            logger.warning(
                "auth.forbidden correlation_id=%s principal_id=%s operation=%s",
                safe_correlation_id,
                safe_principal_id,
                operation.value,
            )
        ensure_authorized(principal, operation)

        logger.info(
            "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s operation=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
            safe_principal_id,
            operation.value,
        )
        return principal

    return _authorize
