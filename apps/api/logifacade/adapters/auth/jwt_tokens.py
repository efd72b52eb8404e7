"""JWT token service backed by PyJWT."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
import logging

import jwt

from logifacade.adapters.auth.base import IssuedToken, TokenService, TokenVerification
from logifacade.core.logging import safe_log_identifier
from logifacade.schemas.auth import AuthPrincipal, Role

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JwtTokenService(TokenService):
    """HMAC-signed JWTs carrying subject, issue time, expiry and role claims.

    Signature checks go through PyJWT, which compares digests with
    ``hmac.compare_digest``. Expiry is evaluated against the injected clock
    rather than PyJWT's wall clock so callers decide when it applies.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS512",
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    def issue(self, principal: AuthPrincipal) -> IssuedToken:
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._ttl
        payload = {
            "sub": str(principal.user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "roles": sorted(role.value for role in principal.roles),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, issued_at=issued_at, expires_at=expires_at)

    def verify(self, token: str, *, check_expiry: bool = False) -> TokenVerification:
        claims = self._decode(token)
        if isinstance(claims, TokenVerification):
            return claims

        expires_at = datetime.fromtimestamp(claims["exp"], UTC)
        if check_expiry and expires_at <= self._clock():
            self._log_rejection(token, "expired")
            return TokenVerification.invalid("expired")

        roles = frozenset(
            Role(value) for value in claims.get("roles", []) if value in Role.__members__
        )
        return TokenVerification(
            valid=True,
            subject=str(claims["sub"]),
            expires_at=expires_at,
            roles=roles,
        )

    def is_expired(self, token: str) -> bool:
        try:
            claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
            expires_at = datetime.fromtimestamp(int(claims["exp"]), UTC)
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
            return True
        return expires_at <= self._clock()

    def _decode(self, token: str) -> dict | TokenVerification:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": _REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError:
            reason = "bad_signature"
        except jwt.MissingRequiredClaimError:
            reason = "missing_claims"
        except jwt.InvalidTokenError:
            reason = "malformed"
        self._log_rejection(token, reason)
        return TokenVerification.invalid(reason)

    @staticmethod
    def _log_rejection(token: str, reason: str) -> None:
        logger.info(
            "token.rejected token=%s reason=%s",
            safe_log_identifier(token, prefix="tok"),
            reason,
        )


__all__ = ["JwtTokenService"]
