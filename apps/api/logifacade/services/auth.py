"""Login, token validation and principal resolution."""

from __future__ import annotations

import logging

from logifacade.adapters.auth.base import PasswordHasher, TokenService
from logifacade.core.logging import safe_log_identifier
from logifacade.errors import AuthenticationError, NotFoundError, ValidationError
from logifacade.repositories.memory import InMemoryPrincipalDirectory, PrincipalRecord
from logifacade.schemas.auth import AuthPrincipal, LoginResponse, PrincipalProfile, ValidateTokenResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        directory: InMemoryPrincipalDirectory,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._directory = directory
        self._hasher = hasher
        self._tokens = tokens

    def login(self, *, username: str, password: str) -> LoginResponse:
        record = self._directory.get_by_username(username)
        if record is None or not record.enabled or not self._hasher.verify(password, record.password_hash):
            logger.warning(
                "login.rejected username=%s",
                safe_log_identifier(username, prefix="usr"),
            )
            raise AuthenticationError("Invalid credentials")

        issued = self._tokens.issue(self._to_principal(record))
        self._directory.record_access(record.id, issued.issued_at)
        logger.info("login.accepted principal_id=%s", safe_log_identifier(record.id, prefix="pid"))
        return LoginResponse(
            token=issued.token,
            id=record.id,
            username=record.username,
            email=record.email,
            display_name=record.display_name,
            roles=sorted(record.roles, key=lambda role: role.value),
            expires_at=issued.expires_at,
        )

    def validate(self, token: str | None) -> ValidateTokenResponse:
        if token is None or not token.strip():
            raise ValidationError("Token is required", fields={"token": "must not be blank"})

        verification = self._tokens.verify(token.strip(), check_expiry=True)
        if not verification.valid or self._enabled_principal(verification.subject) is None:
            raise AuthenticationError("Invalid or expired token")
        return ValidateTokenResponse(
            valid=True,
            subject=verification.subject,
            expires_at=verification.expires_at,
        )

    def authenticate(self, token: str) -> AuthPrincipal:
        """Resolve a bearer token to an enabled principal with its current roles."""
        verification = self._tokens.verify(token, check_expiry=True)
        if not verification.valid:
            raise AuthenticationError("Invalid or expired bearer token")

        record = self._enabled_principal(verification.subject)
        if record is None:
            raise AuthenticationError("Bearer token subject is not a known principal")
        return self._to_principal(record)

    def profile(self, principal_id: int) -> PrincipalProfile:
        record = self._directory.get(principal_id)
        if record is None:
            raise NotFoundError()
        return PrincipalProfile(
            id=record.id,
            username=record.username,
            email=record.email,
            display_name=record.display_name,
            roles=sorted(record.roles, key=lambda role: role.value),
            enabled=record.enabled,
            last_access_at=record.last_access_at,
        )

    def _enabled_principal(self, subject: str | None) -> PrincipalRecord | None:
        try:
            principal_id = int(subject)
        except (TypeError, ValueError):
            return None
        record = self._directory.get(principal_id)
        if record is None or not record.enabled:
            return None
        return record

    @staticmethod
    def _to_principal(record: PrincipalRecord) -> AuthPrincipal:
        return AuthPrincipal(user_id=record.id, username=record.username, roles=record.roles)
