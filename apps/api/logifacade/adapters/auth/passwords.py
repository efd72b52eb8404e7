"""bcrypt password hashing."""

import logging

import bcrypt

from logifacade.adapters.auth.base import PasswordHasher

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12


class BcryptPasswordHasher(PasswordHasher):
    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("password.verify_failed reason=malformed_hash")
            return False


__all__ = ["BcryptPasswordHasher", "DEFAULT_ROUNDS"]
