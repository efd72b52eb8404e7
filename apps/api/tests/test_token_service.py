"""Token issuing, verification and expiry tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import unittest

import jwt

from logifacade.adapters.auth.jwt_tokens import JwtTokenService
from logifacade.schemas.auth import AuthPrincipal, Role

from _support import TEST_JWT_SECRET


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def _principal() -> AuthPrincipal:
    return AuthPrincipal(user_id=7, username="operator", roles=frozenset({Role.OPERATOR}))


class JwtTokenServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock(datetime(2026, 3, 1, 12, 0, tzinfo=UTC))
        self.service = JwtTokenService(TEST_JWT_SECRET, clock=self.clock)

    def test_issued_token_binds_subject_expiry_and_roles(self) -> None:
        issued = self.service.issue(_principal())

        self.assertEqual(issued.issued_at, self.clock.now)
        self.assertEqual(issued.expires_at, self.clock.now + timedelta(hours=24))

        verification = self.service.verify(issued.token)
        self.assertTrue(verification.valid)
        self.assertEqual(verification.subject, "7")
        self.assertEqual(verification.expires_at, issued.expires_at)
        self.assertEqual(verification.roles, frozenset({Role.OPERATOR}))
        self.assertIsNone(verification.reason)

    def test_token_is_valid_until_expiry_and_invalid_after(self) -> None:
        issued = self.service.issue(_principal())

        self.clock.advance(timedelta(hours=23, minutes=59))
        self.assertTrue(self.service.verify(issued.token, check_expiry=True).valid)
        self.assertFalse(self.service.is_expired(issued.token))

        self.clock.advance(timedelta(minutes=2))
        expired = self.service.verify(issued.token, check_expiry=True)
        self.assertFalse(expired.valid)
        self.assertEqual(expired.reason, "expired")
        self.assertIsNone(expired.subject)
        self.assertTrue(self.service.is_expired(issued.token))

    def test_verify_ignores_expiry_unless_requested(self) -> None:
        issued = self.service.issue(_principal())
        self.clock.advance(timedelta(days=3))

        self.assertTrue(self.service.verify(issued.token).valid)
        self.assertFalse(self.service.verify(issued.token, check_expiry=True).valid)

    def test_custom_ttl_is_applied(self) -> None:
        service = JwtTokenService(TEST_JWT_SECRET, ttl=timedelta(minutes=5), clock=self.clock)
        issued = service.issue(_principal())

        self.assertEqual(issued.expires_at - issued.issued_at, timedelta(minutes=5))

    def test_tampered_signature_is_invalid(self) -> None:
        token = self.service.issue(_principal()).token
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

        verification = self.service.verify(f"{header}.{payload}.{flipped}")

        self.assertFalse(verification.valid)
        self.assertEqual(verification.reason, "bad_signature")

    def test_token_signed_with_another_secret_is_invalid(self) -> None:
        other = JwtTokenService("another-secret-" + "z" * 64, clock=self.clock)
        token = other.issue(_principal()).token

        verification = self.service.verify(token)

        self.assertFalse(verification.valid)
        self.assertEqual(verification.reason, "bad_signature")

    def test_malformed_tokens_are_invalid(self) -> None:
        for token in ("", "not-a-token", "a.b.c", "Bearer abc"):
            with self.subTest(token=token):
                verification = self.service.verify(token)
                self.assertFalse(verification.valid)
                self.assertEqual(verification.reason, "malformed")

    def test_token_without_expiry_claim_is_invalid(self) -> None:
        token = jwt.encode({"sub": "7", "iat": 1_700_000_000}, TEST_JWT_SECRET, algorithm="HS512")

        verification = self.service.verify(token)

        self.assertFalse(verification.valid)
        self.assertEqual(verification.reason, "missing_claims")

    def test_token_with_other_algorithm_is_rejected(self) -> None:
        now = int(self.clock.now.timestamp())
        token = jwt.encode({"sub": "7", "iat": now, "exp": now + 60}, TEST_JWT_SECRET, algorithm="HS256")

        self.assertFalse(self.service.verify(token).valid)

    def test_unreadable_token_counts_as_expired(self) -> None:
        self.assertTrue(self.service.is_expired("garbage"))

    def test_unknown_role_claims_are_dropped(self) -> None:
        now = int(self.clock.now.timestamp())
        token = jwt.encode(
            {"sub": "7", "iat": now, "exp": now + 60, "roles": ["ADMIN", "ROOT"]},
            TEST_JWT_SECRET,
            algorithm="HS512",
        )

        self.assertEqual(self.service.verify(token).roles, frozenset({Role.ADMIN}))

    def test_empty_secret_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            JwtTokenService("")
