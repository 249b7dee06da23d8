"""Unit tests for lumasms.core.security: password verification and session tokens."""

import unittest
from unittest.mock import patch

import bcrypt
import jwt

from lumasms.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)


class TestVerifyPassword(unittest.TestCase):
    def test_correct_and_wrong_password(self) -> None:
        digest = hash_password("s3cret")
        self.assertTrue(verify_password("s3cret", digest))
        self.assertFalse(verify_password("wrong", digest))

    def test_hash_is_salted(self) -> None:
        self.assertNotEqual(hash_password("same"), hash_password("same"))

    def test_empty_digest_never_verifies(self) -> None:
        self.assertFalse(verify_password("", ""))
        self.assertFalse(verify_password("anything", None))

    def test_empty_digest_still_runs_one_comparison(self) -> None:
        with patch("lumasms.core.security.bcrypt.checkpw", wraps=bcrypt.checkpw) as checkpw:
            verify_password("anything", "")
        self.assertEqual(checkpw.call_count, 1)

    def test_malformed_digest_is_false(self) -> None:
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))


class TestSessionToken(unittest.TestCase):
    def test_round_trip(self) -> None:
        token = create_session_token(42, "alice")
        payload = decode_session_token(token)
        self.assertEqual(payload["sub"], "42")
        self.assertEqual(payload["username"], "alice")
        self.assertIn("exp", payload)

    def test_token_signed_with_other_secret_rejected(self) -> None:
        forged = jwt.encode({"sub": "1", "username": "root"}, "other-secret", algorithm="HS256")
        with self.assertRaises(jwt.PyJWTError):
            decode_session_token(forged)
