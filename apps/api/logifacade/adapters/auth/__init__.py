"""Token and credential adapters."""

from .base import IssuedToken, PasswordHasher, TokenService, TokenVerification
from .jwt_tokens import JwtTokenService
from .passwords import BcryptPasswordHasher

__all__ = [
    "BcryptPasswordHasher",
    "IssuedToken",
    "JwtTokenService",
    "PasswordHasher",
    "TokenService",
    "TokenVerification",
]
