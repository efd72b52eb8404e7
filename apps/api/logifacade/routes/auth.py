"""Authentication routes."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from logifacade.domain.access import Operation
from logifacade.routes.dependencies import get_auth_service, require_operation
from logifacade.schemas.auth import (
    AuthPrincipal,
    LoginRequest,
    LoginResponse,
    PrincipalProfile,
    ValidateTokenRequest,
    ValidateTokenResponse,
)
from logifacade.schemas.error import ErrorResponse, ValidationErrorResponse
from logifacade.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])

_VALIDATE_RESPONSES = {400: {"model": ValidationErrorResponse}, 401: {"model": ErrorResponse}}


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ValidationErrorResponse}, 401: {"model": ErrorResponse}},
)
async def login(
    payload: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    return await asyncio.to_thread(service.login, username=payload.username, password=payload.password)


@router.post("/validate", response_model=ValidateTokenResponse, responses=_VALIDATE_RESPONSES)
async def validate_token(
    payload: ValidateTokenRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ValidateTokenResponse:
    return service.validate(payload.token)


@router.get("/validate", response_model=ValidateTokenResponse, responses=_VALIDATE_RESPONSES)
async def validate_token_query(
    service: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Query()] = None,
) -> ValidateTokenResponse:
    return service.validate(token)


@router.get(
    "/me",
    response_model=PrincipalProfile,
    responses={401: {"model": ErrorResponse}},
)
async def current_principal(
    principal: Annotated[AuthPrincipal, Depends(require_operation(Operation.AUTH_ME))],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> PrincipalProfile:
    return service.profile(principal.user_id)
