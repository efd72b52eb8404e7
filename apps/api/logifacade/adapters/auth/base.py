"""Token service and credential hashing interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from logifacade.schemas.auth import AuthPrincipal, Role

InvalidTokenReason = Literal["malformed", "bad_signature", "missing_claims", "expired"]


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenVerification:
    """Outcome of a verification; ``reason`` is for diagnostics only."""

    valid: bool
    subject: str | None = None
    expires_at: datetime | None = None
    roles: frozenset[Role] = field(default_factory=frozenset)
    reason: InvalidTokenReason | None = None

    @classmethod
    def invalid(cls, reason: InvalidTokenReason) -> "TokenVerification":
        return cls(valid=False, reason=reason)


class TokenService(ABC):
    """Issues and verifies signed bearer tokens."""

    @abstractmethod
    def issue(self, principal: AuthPrincipal) -> IssuedToken:
        """Sign a token bound to the principal's identifier and roles."""

    @abstractmethod
    def verify(self, token: str, *, check_expiry: bool = False) -> TokenVerification:
        """Check signature and structure; expiry only when requested."""

    @abstractmethod
    def is_expired(self, token: str) -> bool:
        """Compare the embedded expiry to the current time."""


class PasswordHasher(ABC):
    @abstractmethod
    def hash(self, password: str) -> str:
        """Return an encoded hash for ``password``."""

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """Return True when ``password`` matches ``password_hash``."""


__all__ = [
    "InvalidTokenReason",
    "IssuedToken",
    "PasswordHasher",
    "TokenService",
    "TokenVerification",
]
