"""Unit tests for access token minting and verification."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from storefront.core.errors import Unauthenticated
from storefront.core.security import create_access_token, decode_access_token
from tests.support import TEST_SECRET, make_settings


class TestAccessTokens(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()

    def test_round_trip_returns_external_id(self) -> None:
        token = create_access_token("uid-123", self.settings)
        claims = decode_access_token(token, self.settings)
        self.assertEqual(claims.external_id, "uid-123")

    def test_expires_after_configured_minutes(self) -> None:
        token = create_access_token("uid-123", self.settings)
        payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])
        self.assertEqual(payload["exp"] - payload["iat"], 24 * 60 * 60)

    def test_each_token_is_fresh(self) -> None:
        first = create_access_token("uid-123", self.settings)
        second = create_access_token("uid-123", self.settings)
        self.assertNotEqual(first, second)

    def test_missing_token_rejected(self) -> None:
        for token in (None, "", "   "):
            with self.assertRaises(Unauthenticated):
                decode_access_token(token, self.settings)

    def test_malformed_token_rejected(self) -> None:
        with self.assertRaises(Unauthenticated):
            decode_access_token("not-a-jwt", self.settings)

    def test_wrong_signature_rejected(self) -> None:
        other = make_settings(JWT_SECRET="another-secret")
        token = create_access_token("uid-123", other)
        with self.assertRaises(Unauthenticated):
            decode_access_token(token, self.settings)

    def test_expired_token_rejected(self) -> None:
        past = datetime.now(UTC) - timedelta(days=2)
        token = jwt.encode(
            {"sub": "uid-123", "iat": past, "exp": past + timedelta(hours=24)},
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(Unauthenticated):
            decode_access_token(token, self.settings)

    def test_token_without_subject_rejected(self) -> None:
        token = jwt.encode(
            {"exp": datetime.now(UTC) + timedelta(hours=1)},
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(Unauthenticated):
            decode_access_token(token, self.settings)


if __name__ == "__main__":
    unittest.main()
